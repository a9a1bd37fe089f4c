# tests/conftest.py

import os

# Process-wide settings (password hashing, tokens) read these on first use
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

from pathlib import Path
from typing import Dict, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.main import create_application

from .helpers import login, register


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings for one isolated app: fresh SQLite file, private upload directory,
    a small upload cap so size checks stay fast.
    """
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'tasks.sqlite3'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        ENVIRONMENT="test",
        BCRYPT_ROUNDS=4,
        DB_CONNECT_RETRIES=1,
        DB_CONNECT_RETRY_DELAY=0,
        MAX_UPLOAD_SIZE=64 * 1024,
    )


@pytest.fixture()
def client(settings: Settings) -> Iterator[TestClient]:
    app = create_application(settings)
    with TestClient(app) as test_client:  # Runs the lifespan: tables + default users
        yield test_client


@pytest.fixture()
def db(client: TestClient) -> Iterator[Session]:
    """A separate session for asserting on persisted state"""
    session = client.app.state.database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def upload_dir(settings: Settings) -> Path:
    return Path(settings.UPLOAD_DIR)


@pytest.fixture()
def admin_headers(client: TestClient) -> Dict[str, str]:
    return login(client, "admin@test.com")


@pytest.fixture()
def user_headers(client: TestClient) -> Dict[str, str]:
    return login(client, "user@test.com")


@pytest.fixture()
def other_headers(client: TestClient) -> Dict[str, str]:
    """A third account that neither created nor is assigned to anything"""
    return register(client, "other@example.com")
