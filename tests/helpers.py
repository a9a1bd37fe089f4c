# tests/helpers.py

from datetime import datetime, timedelta, timezone
from typing import Dict

from fastapi.testclient import TestClient

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"
PASSWORD = "password"


def pdf(name: str, content: bytes = PDF_BYTES, content_type: str = "application/pdf"):
    """One multipart part under the "documents" field"""
    return ("documents", (name, content, content_type))


def utc_in(**delta) -> datetime:
    """Naive UTC datetime offset from now, whole seconds"""
    return (datetime.now(timezone.utc) + timedelta(**delta)).replace(tzinfo=None, microsecond=0)


def login(client: TestClient, email: str, password: str = PASSWORD) -> Dict[str, str]:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


def register(client: TestClient, email: str, password: str = PASSWORD) -> Dict[str, str]:
    response = client.post("/api/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


def user_id(client: TestClient, headers: Dict[str, str]) -> int:
    return client.get("/api/users/me", headers=headers).json()["user"]["id"]


def create_task(client: TestClient, headers: Dict[str, str], files=None, **fields) -> dict:
    """POST a task (multipart when files are given) and return the created task"""
    fields.setdefault("title", "Write tests")
    if files:
        response = client.post("/api/tasks", data={k: str(v) for k, v in fields.items()}, files=files, headers=headers)
    else:
        response = client.post("/api/tasks", json=fields, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["task"]
