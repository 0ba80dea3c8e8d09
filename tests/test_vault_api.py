"""Tests for the /api/vault endpoints."""

from vault_api.core.config import settings


def _root_folder(client, name="Notes", parent_id=None):
    payload = {"name": name}
    if parent_id is not None:
        payload["parent_id"] = parent_id
    resp = client.post("/api/vault/folders", json=payload)
    assert resp.status_code == 201
    return resp.json()


def _system_folder_id(client):
    roots = client.get("/api/vault").json()["root_folders"]
    return next(f["id"] for f in roots if f["is_system_folder"])


class TestVaultSummary:

    def test_first_get_provisions_vault(self, client):
        resp = client.get("/api/vault")
        assert resp.status_code == 200
        data = resp.json()
        assert data["vault"]["storage_used"] == 0
        assert data["vault"]["storage_limit"] == settings.default_storage_limit_bytes
        assert [f["name"] for f in data["root_folders"]] == ["AI Outputs"]
        assert data["root_folders"][0]["is_system_folder"] is True

    def test_repeated_get_returns_same_vault(self, client):
        first = client.get("/api/vault").json()
        second = client.get("/api/vault").json()
        assert first["vault"]["id"] == second["vault"]["id"]
        assert len(second["root_folders"]) == 1

    def test_storage_usage(self, client):
        resp = client.get("/api/vault/storage")
        assert resp.status_code == 200
        data = resp.json()
        assert data["storage_used"] == 0
        assert data["remaining"] == data["storage_limit"]


class TestFolderEndpoints:

    def test_create_folder(self, client):
        folder = _root_folder(client, "  Notes ")
        assert folder["name"] == "Notes"
        assert folder["parent_id"] is None
        assert folder["is_system_folder"] is False

    def test_whitespace_name_returns_400(self, client):
        resp = client.post("/api/vault/folders", json={"name": "   "})
        assert resp.status_code == 400
        assert resp.json()["error"] == "VALIDATION_ERROR"
        assert len(client.get("/api/vault").json()["root_folders"]) == 1

    def test_missing_parent_returns_404(self, client):
        resp = client.post("/api/vault/folders", json={"name": "X", "parent_id": 424242})
        assert resp.status_code == 404
        assert resp.json()["error"] == "FOLDER_NOT_FOUND"

    def test_folder_contents(self, client):
        parent = _root_folder(client, "Parent")
        _root_folder(client, "Child", parent_id=parent["id"])
        client.post(f"/api/vault/folders/{parent['id']}/files", json={"size": 10, "name": "a.txt"})

        resp = client.get(f"/api/vault/folders/{parent['id']}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["folder"]["id"] == parent["id"]
        assert [f["name"] for f in data["subfolders"]] == ["Child"]
        assert [f["name"] for f in data["files"]] == ["a.txt"]

    def test_rename_folder(self, client):
        folder = _root_folder(client, "Old")
        resp = client.patch(f"/api/vault/folders/{folder['id']}", json={"name": "New"})
        assert resp.status_code == 200
        assert resp.json()["name"] == "New"

    def test_rename_system_folder_forbidden(self, client):
        system_id = _system_folder_id(client)
        resp = client.patch(f"/api/vault/folders/{system_id}", json={"name": "Mine now"})
        assert resp.status_code == 403
        assert resp.json()["error"] == "FORBIDDEN"
        roots = client.get("/api/vault").json()["root_folders"]
        assert roots[0]["name"] == "AI Outputs"

    def test_delete_system_folder_forbidden(self, client):
        system_id = _system_folder_id(client)
        resp = client.delete(f"/api/vault/folders/{system_id}")
        assert resp.status_code == 403

    def test_delete_folder_cascades(self, client):
        notes = _root_folder(client, "Notes")
        client.post(f"/api/vault/folders/{notes['id']}/files", json={"size": 1_000_000})
        assert client.get("/api/vault/storage").json()["storage_used"] == 1_000_000

        resp = client.delete(f"/api/vault/folders/{notes['id']}")
        assert resp.status_code == 204
        assert client.get("/api/vault/storage").json()["storage_used"] == 0
        assert client.get(f"/api/vault/folders/{notes['id']}").status_code == 404


class TestFileEndpoints:

    def test_record_and_delete_file(self, client):
        folder = _root_folder(client)
        resp = client.post(
            f"/api/vault/folders/{folder['id']}/files",
            json={"size": 2048, "name": "photo.png", "content_type": "image/png"},
        )
        assert resp.status_code == 201
        file = resp.json()
        assert file["size"] == 2048
        assert client.get(f"/api/vault/files/{file['id']}").json()["name"] == "photo.png"

        storage = client.get("/api/vault/storage").json()
        assert storage["storage_used"] == 2048
        assert storage["remaining"] == storage["storage_limit"] - 2048

        assert client.delete(f"/api/vault/files/{file['id']}").status_code == 204
        assert client.get("/api/vault/storage").json()["storage_used"] == 0
        resp = client.delete(f"/api/vault/files/{file['id']}")
        assert resp.status_code == 404
        assert resp.json()["error"] == "FILE_NOT_FOUND"

    def test_negative_size_returns_400(self, client):
        folder = _root_folder(client)
        resp = client.post(f"/api/vault/folders/{folder['id']}/files", json={"size": -5})
        assert resp.status_code == 400

    def test_over_quota_returns_413(self, client):
        folder = _root_folder(client)
        too_big = settings.default_storage_limit_bytes + 1
        resp = client.post(f"/api/vault/folders/{folder['id']}/files", json={"size": too_big})
        assert resp.status_code == 413
        assert resp.json()["error"] == "QUOTA_EXCEEDED"
        assert client.get("/api/vault/storage").json()["storage_used"] == 0


class TestOutOfRangeIntegers:
    """Integers wider than the database columns are answered like any other miss."""

    HUGE = 2**63

    def test_huge_folder_id_returns_404(self, client):
        resp = client.get(f"/api/vault/folders/{self.HUGE}")
        assert resp.status_code == 404
        assert resp.json()["error"] == "FOLDER_NOT_FOUND"
        assert client.delete(f"/api/vault/folders/{self.HUGE}").status_code == 404
        resp = client.patch(f"/api/vault/folders/{self.HUGE}", json={"name": "X"})
        assert resp.status_code == 404

    def test_huge_file_id_returns_404(self, client):
        resp = client.get(f"/api/vault/files/{self.HUGE}")
        assert resp.status_code == 404
        assert resp.json()["error"] == "FILE_NOT_FOUND"
        assert client.delete(f"/api/vault/files/{self.HUGE}").status_code == 404

    def test_huge_parent_id_returns_404(self, client):
        resp = client.post("/api/vault/folders", json={"name": "X", "parent_id": self.HUGE})
        assert resp.status_code == 404
        assert len(client.get("/api/vault").json()["root_folders"]) == 1

    def test_huge_target_folder_for_file_returns_404(self, client):
        resp = client.post(f"/api/vault/folders/{self.HUGE}/files", json={"size": 1})
        assert resp.status_code == 404

    def test_huge_size_returns_413(self, client):
        folder = _root_folder(client)
        resp = client.post(f"/api/vault/folders/{folder['id']}/files", json={"size": self.HUGE})
        assert resp.status_code == 413
        assert resp.json()["error"] == "QUOTA_EXCEEDED"
        assert client.get("/api/vault/storage").json()["storage_used"] == 0


class TestIdentityScoping:
    """With auth enabled, each token subject sees only its own vault."""

    def test_missing_token_returns_401(self, client, monkeypatch):
        monkeypatch.setattr(settings, "auth_enabled", True)
        resp = client.get("/api/vault")
        assert resp.status_code == 401
        assert resp.json()["error"] == "UNAUTHORIZED"

    def test_bad_token_returns_401(self, client, monkeypatch):
        monkeypatch.setattr(settings, "auth_enabled", True)
        resp = client.get("/api/vault", headers={"Authorization": "Bearer not.a.token"})
        assert resp.status_code == 401

    def test_users_cannot_reach_each_others_folders(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(settings, "auth_enabled", True)
        alice, bob = auth_headers("alice"), auth_headers("bob")

        folder = client.post("/api/vault/folders", json={"name": "Private"}, headers=alice).json()
        file = client.post(
            f"/api/vault/folders/{folder['id']}/files", json={"size": 10}, headers=alice
        ).json()

        assert client.get(f"/api/vault/folders/{folder['id']}", headers=bob).status_code == 404
        assert client.delete(f"/api/vault/folders/{folder['id']}", headers=bob).status_code == 404
        assert client.delete(f"/api/vault/files/{file['id']}", headers=bob).status_code == 404
        assert client.get("/api/vault/storage", headers=alice).json()["storage_used"] == 10
        assert client.get("/api/vault", headers=alice).json()["vault"]["id"] != \
            client.get("/api/vault", headers=bob).json()["vault"]["id"]
