"""Tests for GDPR export and deletion."""

import pytest

from fitai.gdpr import MAX_BATCH_WRITES, ConfirmationRequiredError, GdprService


def seed_user(db):
    db.seed("users/u1", {"email": "ana@example.com", "displayName": "Ana"})
    db.seed("routines/r1", {"userId": "u1", "name": "PPL"})
    db.seed("routines/r2", {"userId": "u2", "name": "Other"})
    db.seed("workouts/w1", {"userId": "u1", "duration": 45})
    db.seed("nutritionLogs/u1_2026-10-17", {"calories": 2100})
    db.seed("nutritionLogs/u10_2026-10-17", {"calories": 1800})
    db.seed("nutritionLogs/u2_2026-10-17", {"calories": 1500})


@pytest.fixture
def deleted_auth_users():
    return []


@pytest.fixture
def service(db, deleted_auth_users):
    return GdprService(db, delete_auth_user=deleted_auth_users.append)


class TestExport:

    def test_collects_user_documents(self, db, service):
        seed_user(db)

        export = service.export_user_data("u1")

        collections = export["collections"]
        assert export["userId"] == "u1"
        assert collections["users"]["email"] == "ana@example.com"
        assert collections["routines"] == [{"id": "r1", "userId": "u1", "name": "PPL"}]
        assert collections["workouts"][0]["id"] == "w1"
        assert collections["diets"] == []
        assert [d["id"] for d in collections["nutritionLogs"]] == ["u1_2026-10-17"]

    def test_records_audit_entry(self, db, service):
        seed_user(db)
        service.export_user_data("u1")

        audits = [db.data(p) for p in db.paths("gdprRequests")]
        assert len(audits) == 1
        assert audits[0]["type"] == "export"
        assert audits[0]["userId"] == "u1"


class TestDelete:

    def test_requires_confirmation_phrase(self, db, service, deleted_auth_users):
        seed_user(db)
        with pytest.raises(ConfirmationRequiredError):
            service.delete_user_account("u1", "eliminar")
        assert db.writes == []
        assert deleted_auth_users == []

    def test_deletes_everything_and_auth_user(self, db, service, deleted_auth_users):
        seed_user(db)

        deleted = service.delete_user_account("u1", "ELIMINAR MI CUENTA")

        assert deleted == 4
        assert db.data("users/u1") is None
        assert db.data("routines/r1") is None
        assert db.data("routines/r2") is not None
        assert db.data("nutritionLogs/u2_2026-10-17") is not None
        assert db.data("nutritionLogs/u10_2026-10-17") is not None
        assert deleted_auth_users == ["u1"]
        audit = db.data(db.paths("gdprRequests")[0])
        assert audit["type"] == "delete"
        assert audit["documentsDeleted"] == 4

    def test_large_accounts_are_deleted_in_chunks(self, db, service):
        for i in range(MAX_BATCH_WRITES + 10):
            db.seed(f"workouts/w{i:04d}", {"userId": "u1"})

        deleted = service.delete_user_account("u1", "ELIMINAR MI CUENTA")

        assert deleted == MAX_BATCH_WRITES + 11
        assert db.batch_commits == 2
        assert db.paths("workouts") == []
