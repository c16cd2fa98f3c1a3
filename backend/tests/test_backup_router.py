"""Backup HTTP endpoint tests."""

import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from conftest import OTHER_USER_ID, encode
from finance_api.main import create_app
from finance_api.routers.backup import get_backup_service
from finance_api.security.auth import StaticIdentityProvider
from finance_api.services.backup_service import BackupService

EXPORT_URL = "/api/v1/backup/export"
VALIDATE_URL = "/api/v1/backup/validate"
IMPORT_URL = "/api/v1/backup/import"


@pytest.fixture()
def repositories(make_repositories, sample_data):
    return make_repositories(sample_data)


@pytest.fixture()
def make_client(repositories, settings):
    """Client for an app whose requests resolve to the given user."""

    def _make(current_user) -> TestClient:
        app = create_app(settings, identity_provider=StaticIdentityProvider(current_user))
        app.dependency_overrides[get_backup_service] = lambda: BackupService(
            repositories, current_user, settings
        )
        return TestClient(app)

    return _make


@pytest.fixture()
def client(make_client, user) -> TestClient:
    return make_client(user)


def _upload(content: bytes, filename: str = "backup.json") -> dict:
    return {"file": (filename, content, "application/json")}


class TestExportEndpoint:
    """POST /export."""

    def test_download(self, client) -> None:
        response = client.post(EXPORT_URL)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="backup_jc_financeiro_')
        assert response.headers["cache-control"] == "no-store, max-age=0"
        payload = response.json()
        assert payload["counts"]["transactions"] == 3

    def test_requires_authentication(self, make_client) -> None:
        response = make_client(None).post(EXPORT_URL)

        assert response.status_code == 401
        assert response.json() == {"detail": "Authentication required"}

    def test_export_failure(self, client, repositories) -> None:
        repositories["banks"].list_error = RuntimeError("database is gone")
        response = client.post(EXPORT_URL)

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to generate backup"


class TestValidateEndpoint:
    """POST /validate."""

    def test_valid(self, client, build_backup) -> None:
        response = client.post(VALIDATE_URL, files=_upload(encode(build_backup())))

        assert response.status_code == 200
        body = response.json()
        assert body["valid"] is True
        assert body["preview"]["total_records"] == 12

    def test_invalid_is_still_200(self, client, build_backup) -> None:
        payload = build_backup()
        payload["checksum"]["value"] = "f" * 64
        response = client.post(VALIDATE_URL, files=_upload(encode(payload)))

        assert response.status_code == 200
        body = response.json()
        assert body["valid"] is False
        assert body["issues"][0]["type"] == "checksum"

    def test_anonymous_gets_permission_issue(self, make_client, build_backup) -> None:
        response = make_client(None).post(VALIDATE_URL, files=_upload(encode(build_backup())))

        assert response.status_code == 200
        assert [issue["type"] for issue in response.json()["issues"]] == ["permission"]

    def test_rejects_other_extensions(self, client, build_backup) -> None:
        response = client.post(VALIDATE_URL, files=_upload(encode(build_backup()), "backup.zip"))

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid file type")

    def test_upload_limit(self, client, settings) -> None:
        settings.backup_upload_limit_mb = 1
        response = client.post(VALIDATE_URL, files=_upload(b" " * (1024 * 1024 + 1)))

        assert response.status_code == 400
        assert response.json()["detail"] == "File too large. Maximum size: 1MB"


class TestImportEndpoint:
    """POST /import."""

    def test_merge(self, client, build_backup, repositories) -> None:
        for repository in repositories.values():
            repository.records.clear()

        response = client.post(IMPORT_URL, files=_upload(encode(build_backup())))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["summary"]["created"]["transactions"] == 3
        assert len(repositories["categories"].records) == 2

    def test_dry_run(self, client, build_backup, repositories) -> None:
        response = client.post(
            IMPORT_URL,
            files=_upload(encode(build_backup())),
            data={"dry_run": "true", "chunk_size": "10"},
        )

        assert response.status_code == 200
        assert response.json()["dry_run"] is True
        assert all(repository.created == [] for repository in repositories.values())

    def test_invalid_backup(self, client, build_backup, repositories) -> None:
        response = client.post(IMPORT_URL, files=_upload(encode(build_backup(owner_id=OTHER_USER_ID))))

        assert response.status_code == 422
        body = response.json()
        assert body["detail"] == "Backup file is invalid"
        assert body["report"]["valid"] is False
        assert body["report"]["issues"][0]["message"] == "This backup belongs to another user"
        assert all(repository.created == [] for repository in repositories.values())

    def test_replace_strategy(self, client, build_backup) -> None:
        response = client.post(
            IMPORT_URL,
            files=_upload(encode(build_backup())),
            data={"strategy": "replace"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Unsupported import strategy: replace"
        assert body["details"]["supported"] == ["merge"]

    def test_unknown_strategy(self, client, build_backup) -> None:
        response = client.post(
            IMPORT_URL,
            files=_upload(encode(build_backup())),
            data={"strategy": "overwrite"},
        )
        assert response.status_code == 422

    def test_requires_authentication(self, make_client, build_backup) -> None:
        response = make_client(None).post(IMPORT_URL, files=_upload(encode(build_backup())))
        assert response.status_code == 401

    def test_not_json_file(self, client) -> None:
        response = client.post(IMPORT_URL, files=_upload(b"not json at all"))

        assert response.status_code == 422
        assert json.dumps(response.json()["report"]).count("Could not read backup") == 1


class TestHealth:
    """Service health."""

    def test_health(self, client) -> None:
        assert client.get("/health").json() == {"status": "healthy"}


class TestErrorResponses:
    """Errors never leak internals."""

    def test_database_error_is_sanitized(self, client) -> None:
        def _unavailable():
            raise OperationalError("SELECT * FROM transactions", {}, Exception("connection refused"))

        client.app.dependency_overrides[get_backup_service] = _unavailable
        response = client.post(EXPORT_URL)

        assert response.status_code == 500
        assert response.json() == {"detail": "Database error occurred"}

    def test_unknown_route(self, client) -> None:
        response = client.get("/api/v1/backup/restore")
        assert response.status_code == 404
        assert response.json() == {"detail": "Resource not found"}
