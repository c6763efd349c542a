import functools

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from app.repositories.base import (
    LEGACY_RESPONSES,
    RESULTS,
    SHARED_RESULTS,
    USERS,
    VERIFICATIONS,
    AssessmentRepository,
    VerificationRecord,
    VerificationStore,
    chunked,
)
from app.utils.errors import StorageError
from app.utils.logger import logger

# Firestore rejects batches larger than this
MAX_BATCH_WRITES = 500


def _wrap(operation):
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except google_exceptions.GoogleAPIError as e:
                logger.exception(f"Firestore {operation} failed: {e}")
                raise StorageError(f"Firestore {operation} failed") from e
        return wrapper
    return decorator


class FirestoreRepository(AssessmentRepository):

    def __init__(self, db):
        self.db = db

    def server_timestamp(self):
        return firestore.SERVER_TIMESTAMP

    def _user_ref(self, user_id):
        return self.db.collection(USERS).document(user_id)

    @_wrap("get_user")
    def get_user(self, user_id):
        snapshot = self._user_ref(user_id).get()
        return snapshot.to_dict() if snapshot.exists else None

    @_wrap("upsert_user")
    def upsert_user(self, user_id, data, merge=True):
        doc = dict(data)
        if not merge:
            doc["createdAt"] = firestore.SERVER_TIMESTAMP
        self._user_ref(user_id).set(doc, merge=merge)

    @_wrap("list_users")
    def list_users(self):
        return [(doc.id, doc.to_dict()) for doc in self.db.collection(USERS).stream()]

    @_wrap("update_users")
    def update_users(self, updates):
        for chunk in chunked(updates.items(), MAX_BATCH_WRITES):
            batch = self.db.batch()
            for user_id, fields in chunk:
                batch.update(self._user_ref(user_id), {**fields, "updatedAt": firestore.SERVER_TIMESTAMP})
            batch.commit()

    @_wrap("save_result")
    def save_result(self, user_id, result_id, user_info, answers, report):
        user_ref = self._user_ref(user_id)
        result_doc = {**report, "answers": answers, "createdAt": firestore.SERVER_TIMESTAMP}

        batch = self.db.batch()
        batch.set(user_ref, {**user_info, "updatedAt": firestore.SERVER_TIMESTAMP}, merge=True)
        batch.set(user_ref.collection(RESULTS).document(result_id), result_doc)
        batch.set(
            self.db.collection(LEGACY_RESPONSES).document(result_id),
            {**result_doc, "userInfo": user_info, "userId": user_id, "resultId": result_id},
        )
        batch.commit()

    def _recent_results(self, user_id, limit):
        query = (
            self._user_ref(user_id)
            .collection(RESULTS)
            .order_by("createdAt", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        return [(doc.id, doc.to_dict()) for doc in query.stream()]

    @_wrap("get_latest_result")
    def get_latest_result(self, user_id):
        results = self._recent_results(user_id, 1)
        return results[0] if results else None

    @_wrap("get_user_result")
    def get_user_result(self, user_id, result_id):
        snapshot = self._user_ref(user_id).collection(RESULTS).document(result_id).get()
        return snapshot.to_dict() if snapshot.exists else None

    @_wrap("get_legacy_result")
    def get_legacy_result(self, result_id):
        snapshot = self.db.collection(LEGACY_RESPONSES).document(result_id).get()
        return snapshot.to_dict() if snapshot.exists else None

    @_wrap("list_user_results")
    def list_user_results(self, user_id, limit=10):
        return self._recent_results(user_id, limit)

    @_wrap("create_share")
    def create_share(self, snapshot, expires_at):
        ref = self.db.collection(SHARED_RESULTS).document()
        ref.set({**snapshot, "createdAt": firestore.SERVER_TIMESTAMP, "expiresAt": expires_at})
        return ref.id

    @_wrap("get_share")
    def get_share(self, share_id):
        snapshot = self.db.collection(SHARED_RESULTS).document(share_id).get()
        return snapshot.to_dict() if snapshot.exists else None


def _increment_attempts(transaction, ref):
    """Read and bump the counter in one transaction; returns the stored value."""
    snapshot = ref.get(transaction=transaction)
    if not snapshot.exists:
        return None
    attempts = snapshot.to_dict().get("attempts", 0) + 1
    transaction.update(ref, {"attempts": attempts})
    return attempts


class FirestoreVerificationStore(VerificationStore):
    """Codes persisted in the `verifications` collection so every instance sees them."""

    def __init__(self, db):
        self.db = db

    def _ref(self, phone):
        return self.db.collection(VERIFICATIONS).document(phone)

    @_wrap("set_code")
    def set_code(self, phone, code, expires_at):
        self._ref(phone).set({
            "code": code,
            "expiresAt": expires_at,
            "attempts": 0,
            "createdAt": firestore.SERVER_TIMESTAMP,
        })

    @_wrap("get_code")
    def get_code(self, phone):
        snapshot = self._ref(phone).get()
        if not snapshot.exists:
            return None
        data = snapshot.to_dict()
        return VerificationRecord(code=data["code"], expires_at=data["expiresAt"], attempts=data.get("attempts", 0))

    @_wrap("delete_code")
    def delete_code(self, phone):
        ref = self._ref(phone)
        if not ref.get().exists:
            return False
        ref.delete()
        return True

    @_wrap("increment_attempts")
    def increment_attempts(self, phone):
        increment = firestore.transactional(_increment_attempts)
        return increment(self.db.transaction(), self._ref(phone))
