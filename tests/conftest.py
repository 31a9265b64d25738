"""Глобальные фикстуры и настройки окружения для тестов."""

import os
import sys
from datetime import date
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("BOT_TOKEN", "test-token")
os.environ.setdefault("ADMIN_IDS", "1001")
os.environ.setdefault("DEFAULT_LANGUAGE", "ru")
os.environ.setdefault("REPORT_API_URL", "https://reports.test")
os.environ.setdefault("REPORT_PAGE_SIZE", "10")
os.environ.setdefault("REPORT_SIBLING_COUNT", "1")


@pytest.fixture
def fixed_today() -> date:
    """Фиксированная дата для воспроизводимых проверок фильтров."""
    return date(2024, 3, 15)


@pytest.fixture
def record_payload() -> dict:
    return {
        "id": 17,
        "user": {"name": "Ivan Petrov", "email": "ivan@example.com"},
        "membership_plan": {"PlanName": "Premium"},
        "PaymentDate": "2024-03-01T10:00:00Z",
        "PaymentStatus": "paid",
        "SubscriptionStatus": "active",
    }


@pytest.fixture
def page_payload(record_payload) -> dict:
    return {
        "data": [record_payload],
        "current_page": 2,
        "last_page": 5,
        "total": 42,
        "per_page": 10,
    }
