import re
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.config import Settings, get_settings
from app.dependencies import get_repository, get_sms_client, get_verification_store
from app.models.report_models import Question
from app.repositories.memory import MemoryRepository, MemoryVerificationStore
from app.utils.content import build_report_config, get_questions, get_report_config

CONTENT_DIR = Path(__file__).resolve().parent.parent / "content"
BAI = "BAI 불안척도"


class FakeSmsClient:
    """Records messages instead of calling the gateway."""

    def __init__(self):
        self.sent = []

    def send(self, to, text):
        self.sent.append((to, text))
        return {"status": "success"}

    def last_code(self):
        return re.search(r"\[(\d+)\] 입니다", self.sent[-1][1]).group(1)


@pytest.fixture
def questions():
    return get_questions(CONTENT_DIR)


@pytest.fixture
def report_config():
    return get_report_config(CONTENT_DIR)


@pytest.fixture
def small_questions():
    """Two mean-scored categories of different sizes plus a six-item BAI."""
    items = [Question(id=f"a{i}", category="A", text=f"A {i}") for i in range(3)]
    items += [Question(id=f"b{i}", category="B", text=f"B {i}") for i in range(10)]
    items += [Question(id=f"bai{i}", category=BAI, text=f"BAI {i}") for i in range(6)]
    return items


def _levels():
    return [
        {"min": 1, "max": 2, "label": "low", "description": "low"},
        {"min": 2, "max": 4, "label": "mid", "description": "mid"},
        {"min": 4, "label": "high", "description": "high"},
    ]


@pytest.fixture
def small_raw_config():
    return {
        "anxietySumCategory": BAI,
        "globalCompositeCategories": ["A", "B"],
        "thresholds": {
            "categories": {
                "A": _levels(),
                "B": _levels(),
                BAI: [
                    {"min": 0, "max": 10, "label": "normal", "description": "normal"},
                    {"min": 10, "label": "anxious", "description": "anxious"},
                ],
            },
            "globalAverage": _levels(),
        },
    }


@pytest.fixture
def small_config(small_raw_config, small_questions):
    return build_report_config(small_raw_config, small_questions)


@pytest.fixture
def settings():
    return Settings(APP_ENV="production", STORAGE_BACKEND="memory", ADMIN_API_KEY="admin-secret", CONTENT_DIR=CONTENT_DIR)


@pytest.fixture
def dev_settings():
    return Settings(APP_ENV="development", STORAGE_BACKEND="memory", CONTENT_DIR=CONTENT_DIR)


@pytest.fixture
def repository():
    return MemoryRepository()


@pytest.fixture
def verification_store():
    return MemoryVerificationStore()


@pytest.fixture
def sms_client():
    return FakeSmsClient()


def _test_client(app_settings, repository, verification_store, sms_client):
    from app.main import app

    app.dependency_overrides[get_settings] = lambda: app_settings
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_verification_store] = lambda: verification_store
    app.dependency_overrides[get_sms_client] = lambda: sms_client
    return app, TestClient(app)


@pytest.fixture
def client(settings, repository, verification_store, sms_client):
    app, test_client = _test_client(settings, repository, verification_store, sms_client)
    with test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def dev_client(dev_settings, repository, verification_store, sms_client):
    app, test_client = _test_client(dev_settings, repository, verification_store, sms_client)
    with test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def answer_all():
    """Answer every question: `ordinary` on the 1-5 scale, `bai` on the BAI items."""

    def _answer_all(questions, ordinary, bai, overrides=None):
        overrides = overrides or {}
        return {
            q.id: overrides.get(q.category, bai if q.category == BAI else ordinary)
            for q in questions
        }

    return _answer_all
