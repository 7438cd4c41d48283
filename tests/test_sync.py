# tests/test_sync.py

"""
Tests for orphan-identity sync.
"""

from fastapi.testclient import TestClient

from core.config import settings
from models.enums import Role
from models.user import Identity
from services.orphan_sync import derive_names, sync_orphan_identities


def add_orphans(provider):
    provider.add("orphan-1", "jeanne.dupont@pass21.test", metadata={"name": "Jeanne Dupont"})
    provider.add("orphan-2", "marc@pass21.test", metadata={"full_name": "Marc Leroy"})
    provider.add("orphan-3", "solo@pass21.test")


def test_sync_partial_failure_then_idempotent(client: TestClient, provider, store, headers):
    add_orphans(provider)
    store.fail_insert_ids = {"orphan-2"}

    first = client.post("/admin/users/sync", headers=headers["ADMIN"])
    assert first.status_code == 200
    data = first.json()
    assert data["synced"] == 2
    assert len(data["errors"]) == 1
    assert "marc@pass21.test" in data["errors"][0]
    assert data["totalAuthUsers"] == 7
    assert data["totalPublicUsers"] == 4
    assert data["partialFailure"] == "1 item(s) failed, 2 succeeded"

    assert "orphan-1" in store.rows
    assert "orphan-3" in store.rows
    assert "orphan-2" not in store.rows

    second = client.post("/admin/users/sync", headers=headers["ADMIN"])
    assert second.status_code == 200
    assert second.json()["synced"] == 0
    assert second.json()["partialFailure"] is None
    assert "orphan-1" in store.rows


def test_sync_without_orphans(provider, store, accounts):
    report = sync_orphan_identities(provider, store)
    assert report.synced == 0
    assert report.errors == []
    assert report.partialFailure is None
    assert report.totalAuthUsers == report.totalPublicUsers == 4


def test_synced_profiles_default_to_resident(provider, store, accounts):
    add_orphans(provider)
    sync_orphan_identities(provider, store)
    row = store.rows["orphan-1"]
    assert row["role"] == "RESIDENT"
    assert row["firstName"] == "Jeanne"
    assert row["lastName"] == "Dupont"
    assert row["isActive"] is True


def test_sync_requires_privileged_caller(client: TestClient, provider, store, headers):
    add_orphans(provider)
    response = client.post("/admin/users/sync", headers=headers["SUPERVISOR"])
    assert response.status_code == 403
    assert "orphan-1" not in store.rows


def test_derive_names_fallbacks():
    assert derive_names(Identity(id="1", email="a@b.c", user_metadata={"name": "Ana Maria Lopez"})) == ("Ana", "Maria Lopez")
    assert derive_names(Identity(id="2", email="zoe@b.c")) == ("zoe", "Name")
    assert derive_names(Identity(id="3")) == ("User", "Name")


def test_sync_uses_configured_default_role(provider, store, accounts, monkeypatch):
    monkeypatch.setattr(settings, "SYNC_DEFAULT_ROLE", Role.SUPERVISOR)
    add_orphans(provider)
    sync_orphan_identities(provider, store)
    assert store.rows["orphan-3"]["role"] == "SUPERVISOR"


def test_sync_report_marks_partial_failure(provider, store, accounts):
    add_orphans(provider)
    store.fail_insert_ids = {"orphan-1", "orphan-3"}
    report = sync_orphan_identities(provider, store)
    assert report.synced == 1
    assert report.partialFailure == "2 item(s) failed, 1 succeeded"
