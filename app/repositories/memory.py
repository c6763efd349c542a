import copy
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from app.repositories.base import AssessmentRepository, VerificationRecord, VerificationStore


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryRepository(AssessmentRepository):
    """Process-local backend used in development and tests."""

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[str, dict] = {}
        # user_id -> list of (result_id, doc) in insertion order
        self._results: Dict[str, List[Tuple[str, dict]]] = {}
        self._legacy: Dict[str, dict] = {}
        self._shares: Dict[str, dict] = {}

    def get_user(self, user_id):
        with self._lock:
            user = self._users.get(user_id)
            return copy.deepcopy(user) if user is not None else None

    def upsert_user(self, user_id, data, merge=True):
        with self._lock:
            self._upsert_user(user_id, data, merge)

    def _upsert_user(self, user_id, data, merge):
        existing = self._users.get(user_id)
        if existing is not None and merge:
            existing.update(copy.deepcopy(data))
            return

        doc = copy.deepcopy(data)
        if not merge:
            doc["createdAt"] = _now()
        self._users[user_id] = doc

    def list_users(self):
        with self._lock:
            return [(uid, copy.deepcopy(doc)) for uid, doc in self._users.items()]

    def update_users(self, updates):
        with self._lock:
            now = _now()
            for user_id, fields in updates.items():
                if user_id in self._users:
                    self._users[user_id].update(fields)
                    self._users[user_id]["updatedAt"] = now

    def save_result(self, user_id, result_id, user_info, answers, report):
        now = _now()
        result_doc = {**copy.deepcopy(report), "answers": dict(answers), "createdAt": now}
        legacy_doc = {
            **result_doc,
            "userInfo": copy.deepcopy(user_info),
            "userId": user_id,
            "resultId": result_id,
        }
        with self._lock:
            self._upsert_user(user_id, {**user_info, "updatedAt": now}, merge=True)
            self._results.setdefault(user_id, []).append((result_id, result_doc))
            self._legacy[result_id] = legacy_doc

    def get_latest_result(self, user_id):
        results = self.list_user_results(user_id, limit=1)
        return results[0] if results else None

    def get_user_result(self, user_id, result_id):
        with self._lock:
            for rid, doc in self._results.get(user_id, []):
                if rid == result_id:
                    return copy.deepcopy(doc)
        return None

    def get_legacy_result(self, result_id):
        with self._lock:
            doc = self._legacy.get(result_id)
            return copy.deepcopy(doc) if doc is not None else None

    def list_user_results(self, user_id, limit=10):
        with self._lock:
            ordered = list(reversed(self._results.get(user_id, [])))
            return [(rid, copy.deepcopy(doc)) for rid, doc in ordered[:limit]]

    def create_share(self, snapshot, expires_at):
        share_id = uuid.uuid4().hex[:20]
        with self._lock:
            self._shares[share_id] = {**copy.deepcopy(snapshot), "createdAt": _now(), "expiresAt": expires_at}
        return share_id

    def get_share(self, share_id):
        with self._lock:
            doc = self._shares.get(share_id)
            return copy.deepcopy(doc) if doc is not None else None


class MemoryVerificationStore(VerificationStore):
    """TTL key-value store for one-time codes with an attempt counter."""

    def __init__(self, clock=_now):
        self._lock = threading.Lock()
        self._codes: Dict[str, VerificationRecord] = {}
        self._clock = clock

    def set_code(self, phone, code, expires_at):
        with self._lock:
            self._codes[phone] = VerificationRecord(code=code, expires_at=expires_at)

    def _live(self, phone) -> Optional[VerificationRecord]:
        record = self._codes.get(phone)
        if record is not None and self._clock() > record.expires_at:
            del self._codes[phone]
            return None
        return record

    def get_code(self, phone):
        with self._lock:
            record = self._live(phone)
            return copy.copy(record) if record is not None else None

    def delete_code(self, phone):
        with self._lock:
            return self._codes.pop(phone, None) is not None

    def increment_attempts(self, phone):
        with self._lock:
            record = self._live(phone)
            if record is None:
                return None
            record.attempts += 1
            return record.attempts
