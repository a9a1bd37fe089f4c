# tests/test_documents.py

from pathlib import Path

from app.models import TaskDocument

from .helpers import PDF_BYTES, create_task, pdf, user_id


def test_upload_to_existing_task(client, user_headers, db):
    task = create_task(client, user_headers, files=[pdf("first.pdf")], title="Grows later")

    response = client.post(
        f"/api/tasks/{task['id']}/upload",
        files=[pdf("second.pdf"), pdf("third.pdf")],
        headers=user_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Documents uploaded successfully"
    assert [doc["original_name"] for doc in body["documents"]] == ["second.pdf", "third.pdf"]

    fetched = client.get(f"/api/tasks/{task['id']}", headers=user_headers).json()["task"]
    assert [doc["original_name"] for doc in fetched["documents"]] == ["first.pdf", "second.pdf", "third.pdf"]


def test_upload_beyond_per_task_cap(client, user_headers, upload_dir, db):
    task = create_task(client, user_headers, files=[pdf("a.pdf"), pdf("b.pdf")], title="Nearly full")

    response = client.post(
        f"/api/tasks/{task['id']}/upload",
        files=[pdf("c.pdf"), pdf("d.pdf")],
        headers=user_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Maximum 3 documents allowed per task"
    db.expire_all()
    assert db.query(TaskDocument).filter(TaskDocument.task_id == task["id"]).count() == 2
    assert len(list(upload_dir.iterdir())) == 2


def test_upload_without_files(client, user_headers):
    task = create_task(client, user_headers, title="Empty upload")
    response = client.post(f"/api/tasks/{task['id']}/upload", data={"note": "nothing"}, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "No files uploaded"


def test_upload_rejects_non_pdf(client, user_headers, upload_dir):
    task = create_task(client, user_headers, title="Picky")
    response = client.post(
        f"/api/tasks/{task['id']}/upload",
        files=[pdf("photo.png", b"\x89PNG", "image/png")],
        headers=user_headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Only PDF files are allowed"
    assert list(upload_dir.iterdir()) == []


def test_assignee_can_upload(client, user_headers, admin_headers):
    task = create_task(client, admin_headers, title="Delegated", assigned_to=user_id(client, user_headers))
    response = client.post(f"/api/tasks/{task['id']}/upload", files=[pdf("work.pdf")], headers=user_headers)
    assert response.status_code == 201


def test_download_returns_original_file(client, user_headers):
    task = create_task(client, user_headers, files=[pdf("Quarterly-Report.pdf")], title="Downloadable")
    document = task["documents"][0]

    response = client.get(f"/api/tasks/{task['id']}/download/{document['filename']}", headers=user_headers)

    assert response.status_code == 200
    assert response.content == PDF_BYTES
    assert response.headers["content-type"] == "application/pdf"
    assert "Quarterly-Report.pdf" in response.headers["content-disposition"]


def test_download_unknown_filename(client, user_headers):
    task = create_task(client, user_headers, title="No such file")
    response = client.get(f"/api/tasks/{task['id']}/download/missing.pdf", headers=user_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Document not found"


def test_download_when_file_vanished(client, user_headers):
    task = create_task(client, user_headers, files=[pdf("gone.pdf")], title="Lost file")
    document = task["documents"][0]
    Path(document["file_path"]).unlink()

    response = client.get(f"/api/tasks/{task['id']}/download/{document['filename']}", headers=user_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "File not found"


def test_download_requires_access(client, user_headers, other_headers):
    task = create_task(client, user_headers, files=[pdf("private.pdf")], title="Private")
    filename = task["documents"][0]["filename"]
    response = client.get(f"/api/tasks/{task['id']}/download/{filename}", headers=other_headers)
    assert response.status_code == 403


def test_delete_document_removes_row_and_file(client, user_headers, db):
    task = create_task(client, user_headers, files=[pdf("keep.pdf"), pdf("drop.pdf")], title="Trim docs")
    keep, drop = task["documents"]

    response = client.delete(f"/api/tasks/{task['id']}/documents/{drop['id']}", headers=user_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Document deleted successfully"
    assert not Path(drop["file_path"]).exists()
    assert Path(keep["file_path"]).exists()
    db.expire_all()
    remaining = db.query(TaskDocument).filter(TaskDocument.task_id == task["id"]).all()
    assert [doc.id for doc in remaining] == [keep["id"]]


def test_assignee_cannot_delete_document(client, user_headers, admin_headers):
    task = create_task(
        client,
        admin_headers,
        files=[pdf("admin.pdf")],
        title="Admin owned",
        assigned_to=user_id(client, user_headers),
    )
    document_id = task["documents"][0]["id"]

    response = client.delete(f"/api/tasks/{task['id']}/documents/{document_id}", headers=user_headers)
    assert response.status_code == 403


def test_delete_document_of_another_task(client, user_headers):
    first = create_task(client, user_headers, files=[pdf("one.pdf")], title="First")
    second = create_task(client, user_headers, title="Second")

    response = client.delete(
        f"/api/tasks/{second['id']}/documents/{first['documents'][0]['id']}",
        headers=user_headers,
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Document not found"
