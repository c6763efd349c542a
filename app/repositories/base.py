"""
Storage interfaces.

Routers and services depend on these abstractions; the concrete backend
(Firestore or in-memory) is chosen in app.dependencies from settings.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

# Collection names of the Firestore deployment
USERS = "users"
RESULTS = "results"
LEGACY_RESPONSES = "responses"
SHARED_RESULTS = "shared_results"
VERIFICATIONS = "verifications"


class AssessmentRepository(ABC):
    """Users, their results and shared snapshots."""

    def server_timestamp(self):
        """Value stored for "now" in timestamp fields."""
        return datetime.now(timezone.utc)

    # ============================================
    # USERS
    # ============================================

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[dict]:
        ...

    @abstractmethod
    def upsert_user(self, user_id: str, data: dict, merge: bool = True) -> None:
        """Create or update a user document; `createdAt` is stamped on create."""

    @abstractmethod
    def list_users(self) -> List[Tuple[str, dict]]:
        ...

    @abstractmethod
    def update_users(self, updates: Dict[str, dict]) -> None:
        """Apply partial updates to many users; `updatedAt` is stamped on each."""

    # ============================================
    # RESULTS
    # ============================================

    @abstractmethod
    def save_result(self, user_id: str, result_id: str, user_info: dict, answers: dict, report: dict) -> None:
        """
        Persist a scored submission atomically.

        Writes the owner upsert, the owner's result document and the legacy
        flat copy in one commit.
        """

    @abstractmethod
    def get_latest_result(self, user_id: str) -> Optional[Tuple[str, dict]]:
        ...

    @abstractmethod
    def get_user_result(self, user_id: str, result_id: str) -> Optional[dict]:
        ...

    @abstractmethod
    def get_legacy_result(self, result_id: str) -> Optional[dict]:
        ...

    @abstractmethod
    def list_user_results(self, user_id: str, limit: int = 10) -> List[Tuple[str, dict]]:
        """Most recent first."""

    # ============================================
    # SHARES
    # ============================================

    @abstractmethod
    def create_share(self, snapshot: dict, expires_at: datetime) -> str:
        """Store a snapshot and return its generated share id."""

    @abstractmethod
    def get_share(self, share_id: str) -> Optional[dict]:
        ...


@dataclass
class VerificationRecord:
    code: str
    expires_at: datetime
    attempts: int = 0


class VerificationStore(ABC):
    """Issued one-time codes keyed by normalized phone number."""

    @abstractmethod
    def set_code(self, phone: str, code: str, expires_at: datetime) -> None:
        """Store a code, replacing any previous one and resetting attempts."""

    @abstractmethod
    def get_code(self, phone: str) -> Optional[VerificationRecord]:
        ...

    @abstractmethod
    def delete_code(self, phone: str) -> bool:
        ...

    @abstractmethod
    def increment_attempts(self, phone: str) -> Optional[int]:
        """Count one attempt. Returns the new count, or None when no code was issued."""


def chunked(items: Iterable, size: int):
    batch = []
    for item in items:
        batch.append(item)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch
