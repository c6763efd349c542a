from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from app.repositories.firestore import FirestoreRepository, FirestoreVerificationStore
from app.repositories.memory import MemoryRepository, MemoryVerificationStore
from app.utils.errors import StorageError

REPORT = {
    "categoryResults": {"A": {"mean": 2.0, "label": "mid", "description": "mid"}},
    "globalResult": {"mean": 2.0, "label": "mid", "description": "mid"},
    "baiResult": {"mean": 1.0, "sum": 6, "label": "normal", "description": "normal"},
}
T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


class TestMemoryRepository:

    def test_save_and_read_back(self) -> None:
        repo = MemoryRepository()
        repo.save_result("+8210", "r1", {"phone": "+8210", "name": "kim"}, {"q1": 3}, REPORT)

        assert repo.get_user("+8210")["name"] == "kim"
        assert repo.get_user_result("+8210", "r1")["answers"] == {"q1": 3}
        legacy = repo.get_legacy_result("r1")
        assert legacy["userId"] == "+8210"
        assert legacy["userInfo"]["name"] == "kim"

    def test_latest_and_history_order(self) -> None:
        repo = MemoryRepository()
        for rid in ("r1", "r2", "r3"):
            repo.save_result("u", rid, {"phone": "u"}, {}, REPORT)

        assert repo.get_latest_result("u")[0] == "r3"
        assert [rid for rid, _ in repo.list_user_results("u", limit=2)] == ["r3", "r2"]

    def test_missing_lookups(self) -> None:
        repo = MemoryRepository()
        assert repo.get_latest_result("u") is None
        assert repo.get_user_result("u", "r1") is None
        assert repo.get_legacy_result("r1") is None
        assert repo.get_share("s1") is None

    def test_returned_documents_are_copies(self) -> None:
        repo = MemoryRepository()
        repo.save_result("u", "r1", {"phone": "u"}, {}, REPORT)
        repo.get_user_result("u", "r1")["globalResult"]["label"] = "changed"
        assert repo.get_user_result("u", "r1")["globalResult"]["label"] == "mid"

    def test_merge_upsert_keeps_existing_fields(self) -> None:
        repo = MemoryRepository()
        repo.upsert_user("u", {"name": "kim"}, merge=False)
        repo.upsert_user("u", {"region": "seoul"})
        user = repo.get_user("u")
        assert user["name"] == "kim"
        assert user["region"] == "seoul"
        assert "createdAt" in user

    def test_share_round_trip(self) -> None:
        repo = MemoryRepository()
        share_id = repo.create_share({"globalResult": {}}, T0)
        assert repo.get_share(share_id)["expiresAt"] == T0


class TestMemoryVerificationStore:

    def test_attempts_count_up(self) -> None:
        store = MemoryVerificationStore(clock=lambda: T0)
        store.set_code("p", "123456", T0 + timedelta(minutes=3))
        assert store.increment_attempts("p") == 1
        assert store.increment_attempts("p") == 2
        assert store.get_code("p").attempts == 2

    def test_no_code_issued(self) -> None:
        assert MemoryVerificationStore().increment_attempts("p") is None

    def test_expired_codes_are_dropped(self) -> None:
        now = [T0]
        store = MemoryVerificationStore(clock=lambda: now[0])
        store.set_code("p", "123456", T0 + timedelta(minutes=3))
        now[0] = T0 + timedelta(minutes=4)
        assert store.get_code("p") is None
        assert store.increment_attempts("p") is None

    def test_reissue_resets_attempts(self) -> None:
        store = MemoryVerificationStore(clock=lambda: T0)
        store.set_code("p", "111111", T0 + timedelta(minutes=3))
        store.increment_attempts("p")
        store.set_code("p", "222222", T0 + timedelta(minutes=3))
        assert store.get_code("p").attempts == 0

    def test_delete(self) -> None:
        store = MemoryVerificationStore()
        store.set_code("p", "1", datetime.now(timezone.utc) + timedelta(minutes=1))
        assert store.delete_code("p") is True
        assert store.delete_code("p") is False


@pytest.mark.unit
class TestFirestoreRepository:

    def test_save_result_is_one_batch(self) -> None:
        db = MagicMock()
        FirestoreRepository(db).save_result("u", "r1", {"phone": "u"}, {"q1": 3}, REPORT)

        batch = db.batch.return_value
        assert batch.set.call_count == 3
        batch.commit.assert_called_once()

        user_doc = batch.set.call_args_list[0]
        assert user_doc.kwargs == {"merge": True}
        legacy_doc = batch.set.call_args_list[2].args[1]
        assert legacy_doc["userId"] == "u"
        assert legacy_doc["resultId"] == "r1"
        assert legacy_doc["answers"] == {"q1": 3}
        assert legacy_doc["baiResult"]["sum"] == 6

    def test_get_user_missing(self) -> None:
        db = MagicMock()
        db.collection.return_value.document.return_value.get.return_value.exists = False
        assert FirestoreRepository(db).get_user("u") is None

    def test_latest_result(self) -> None:
        db = MagicMock()
        doc = MagicMock(id="r9")
        doc.to_dict.return_value = REPORT
        query = db.collection.return_value.document.return_value.collection.return_value.order_by.return_value
        query.limit.return_value.stream.return_value = [doc]

        assert FirestoreRepository(db).get_latest_result("u") == ("r9", REPORT)
        query.limit.assert_called_with(1)

    def test_create_share_uses_generated_id(self) -> None:
        db = MagicMock()
        db.collection.return_value.document.return_value.id = "auto123"
        share_id = FirestoreRepository(db).create_share({"globalResult": {}}, T0)

        assert share_id == "auto123"
        stored = db.collection.return_value.document.return_value.set.call_args.args[0]
        assert stored["expiresAt"] == T0

    def test_update_users_is_chunked(self) -> None:
        db = MagicMock()
        FirestoreRepository(db).update_users({f"u{i}": {"privacyAgreed": True} for i in range(501)})
        assert db.batch.return_value.commit.call_count == 2

    def test_google_errors_become_storage_errors(self) -> None:
        db = MagicMock()
        db.collection.return_value.document.return_value.get.side_effect = google_exceptions.ServiceUnavailable("down")
        with pytest.raises(StorageError):
            FirestoreRepository(db).get_user("u")


@pytest.mark.unit
class TestFirestoreVerificationStore:

    @pytest.fixture(autouse=True)
    def transactional(self, monkeypatch):
        # the real decorator retries and commits against a live backend
        decorator = MagicMock(side_effect=lambda func: func)
        monkeypatch.setattr(firestore, "transactional", decorator)
        return decorator

    def test_increment_existing(self) -> None:
        db = MagicMock()
        ref = db.collection.return_value.document.return_value
        ref.get.return_value.exists = True
        ref.get.return_value.to_dict.return_value = {"code": "1", "expiresAt": T0, "attempts": 2}
        transaction = db.transaction.return_value

        assert FirestoreVerificationStore(db).increment_attempts("p") == 3
        ref.get.assert_called_once_with(transaction=transaction)
        transaction.update.assert_called_once_with(ref, {"attempts": 3})
        ref.update.assert_not_called()

    def test_increment_runs_in_transaction(self, transactional) -> None:
        db = MagicMock()
        db.collection.return_value.document.return_value.get.return_value.exists = False

        FirestoreVerificationStore(db).increment_attempts("p")
        transactional.assert_called_once()
        db.transaction.assert_called_once_with()

    def test_increment_without_code(self) -> None:
        db = MagicMock()
        db.collection.return_value.document.return_value.get.return_value.exists = False
        assert FirestoreVerificationStore(db).increment_attempts("p") is None
        db.transaction.return_value.update.assert_not_called()

    def test_get_code(self) -> None:
        db = MagicMock()
        snapshot = db.collection.return_value.document.return_value.get.return_value
        snapshot.exists = True
        snapshot.to_dict.return_value = {"code": "123456", "expiresAt": T0, "attempts": 1}

        record = FirestoreVerificationStore(db).get_code("p")
        assert (record.code, record.expires_at, record.attempts) == ("123456", T0, 1)
