"""Unit tests for VaultService: lazy, idempotent vault provisioning."""

from concurrent.futures import ThreadPoolExecutor

from vault_api.core.config import DEFAULT_STORAGE_LIMIT_BYTES
from vault_api.models import Vault, VaultFolder
from vault_api.services import FolderTreeService, VaultService


def _system_folders(db, vault_id):
    return (
        db.query(VaultFolder)
        .filter(VaultFolder.vault_id == vault_id, VaultFolder.is_system_folder.is_(True))
        .all()
    )


class TestResolveVault:
    """First access provisions; later accesses return the same rows."""

    def test_first_access_creates_empty_vault(self, db):
        vault = VaultService(db).resolve_vault("alice")
        assert vault.owner_id == "alice"
        assert vault.storage_used == 0
        assert vault.storage_limit == DEFAULT_STORAGE_LIMIT_BYTES

    def test_custom_limit_applies_to_new_vault(self, db):
        vault = VaultService(db, storage_limit=500_000_000).resolve_vault("alice")
        assert vault.storage_limit == 500_000_000

    def test_system_folder_is_created(self, db):
        vault = VaultService(db).resolve_vault("alice")
        system = _system_folders(db, vault.id)
        assert len(system) == 1
        assert system[0].name == "AI Outputs"
        assert system[0].parent_id is None

    def test_resolving_twice_is_idempotent(self, db):
        svc = VaultService(db)
        first = svc.resolve_vault("alice")
        second = svc.resolve_vault("alice")
        assert first.id == second.id
        assert db.query(Vault).filter(Vault.owner_id == "alice").count() == 1
        assert len(_system_folders(db, first.id)) == 1

    def test_existing_limit_is_kept(self, db):
        VaultService(db, storage_limit=1000).resolve_vault("alice")
        vault = VaultService(db, storage_limit=5000).resolve_vault("alice")
        assert vault.storage_limit == 1000

    def test_identities_get_separate_vaults(self, db):
        svc = VaultService(db)
        a = svc.resolve_vault("alice")
        b = svc.resolve_vault("bob")
        assert a.id != b.id
        assert len(_system_folders(db, a.id)) == 1
        assert len(_system_folders(db, b.id)) == 1

    def test_missing_system_folder_is_recreated(self, db):
        svc = VaultService(db)
        vault = svc.resolve_vault("alice")
        db.query(VaultFolder).filter(VaultFolder.vault_id == vault.id).delete()
        db.commit()

        svc.resolve_vault("alice")
        assert len(_system_folders(db, vault.id)) == 1

    def test_concurrent_first_access_converges(self, session_factory):
        def resolve(_):
            session = session_factory()
            try:
                return VaultService(session).resolve_vault("racer").id
            finally:
                session.close()

        with ThreadPoolExecutor(max_workers=4) as pool:
            ids = list(pool.map(resolve, range(8)))

        assert len(set(ids)) == 1
        session = session_factory()
        try:
            assert session.query(Vault).filter(Vault.owner_id == "racer").count() == 1
            assert len(_system_folders(session, ids[0])) == 1
        finally:
            session.close()


class TestSummary:

    def test_summary_lists_root_folders_in_creation_order(self, db):
        svc = VaultService(db)
        vault = svc.resolve_vault("alice")
        tree = FolderTreeService(db)
        tree.create_folder(vault, "Zeta")
        parent = tree.create_folder(vault, "Alpha")
        tree.create_folder(vault, "Nested", parent_id=parent.id)

        _, roots = svc.get_summary("alice")
        assert [f.name for f in roots] == ["AI Outputs", "Zeta", "Alpha"]

    def test_get_system_folder(self, db):
        svc = VaultService(db)
        vault = svc.resolve_vault("alice")
        folder = svc.get_system_folder(vault)
        assert folder.is_system_folder is True
        assert folder.name == "AI Outputs"
