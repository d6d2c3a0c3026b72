import os
import tempfile

# keep the module-level app in app.main away from the working tree and any real DB
os.environ["DATABASE_URL"] = ""
os.environ.setdefault("UPLOADS_DIR", tempfile.mkdtemp(prefix="uploads-"))

import pytest
import requests
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.db.demo import create_demo_backend
from app.main import create_app
from app.services.sync_client import SpreadsheetSyncClient


class FakeSheets:
    """Stands in for SheetsService; records rows instead of calling Google."""

    def __init__(self, configured: bool = True) -> None:
        self.configured = configured
        self.rows = []

    def is_configured(self) -> bool:
        return self.configured

    def sync_record(self, sheet, record, date_field="created_at"):
        if not self.configured:
            return False
        self.rows.append((sheet, dict(record), date_field))
        return True


@pytest.fixture(autouse=True)
def offline(monkeypatch):
    """No test talks to a real sync endpoint; every outgoing requests call fails to connect."""
    sent = []

    def _send(self, request, **kwargs):
        sent.append(request)
        raise requests.ConnectionError(f"offline: {request.url}")

    monkeypatch.setattr(requests.Session, "send", _send)
    return sent


@pytest.fixture
def settings(tmp_path):
    return Settings(
        uploads_dir=str(tmp_path / "uploads"),
        sync_base_url="http://sync.test",
        sync_timeout=1.0,
        admin_password="admin2024",
    )


@pytest.fixture
def backend():
    b = create_demo_backend()
    yield b
    b.close()


@pytest.fixture
def sheets():
    return FakeSheets()


@pytest.fixture
def sync_client(settings):
    client = SpreadsheetSyncClient(settings.sync_base_url, timeout=settings.sync_timeout)
    yield client
    client.close()


@pytest.fixture
def app(settings, backend, sheets, sync_client):
    return create_app(settings=settings, backend=backend, sheets=sheets, sync_client=sync_client)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_client(client):
    r = client.post("/admin/login", data={"password": "admin2024"}, follow_redirects=False)
    assert r.status_code == 303
    return client
