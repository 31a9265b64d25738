from __future__ import annotations

import asyncio
from dataclasses import replace
from types import SimpleNamespace
from typing import Any, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiogram import types
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.base import StorageKey
from aiogram.fsm.storage.memory import MemoryStorage

from app.config import settings
from app.handlers.admin import subscription_report as report_handlers
from app.external.report_api import ReportPeriod, SubscriptionReportPage
from app.services.subscription_report_service import ReportViewState, SubscriptionReportService, initial_state

ADMIN_ID = 1001


class FakeReportService:
    def __init__(self, result_factory=None) -> None:
        self.result_factory = result_factory or (lambda state: replace(state, total=100, last_page=10))
        self.loaded: List[ReportViewState] = []

    async def load(self, owner_id: int, state: ReportViewState, language: str = "ru") -> Optional[ReportViewState]:
        self.loaded.append(state)
        return self.result_factory(state)


def _make_callback(data: str, user_id: int = ADMIN_ID) -> Any:
    callback = MagicMock(spec=types.CallbackQuery)
    callback.data = data
    callback.from_user = SimpleNamespace(id=user_id, username="admin", language_code="en")
    callback.answer = AsyncMock()
    callback.message = MagicMock()
    callback.message.edit_text = AsyncMock()
    return callback


@pytest.fixture
def fsm() -> FSMContext:
    return FSMContext(storage=MemoryStorage(), key=StorageKey(bot_id=1, chat_id=ADMIN_ID, user_id=ADMIN_ID))


@pytest.fixture
def fake_service(monkeypatch: pytest.MonkeyPatch) -> FakeReportService:
    monkeypatch.setattr(settings, "ADMIN_IDS", str(ADMIN_ID), raising=False)
    service = FakeReportService()
    monkeypatch.setattr(report_handlers, "subscription_report_service", service)
    return service


async def _store(fsm: FSMContext, state: ReportViewState) -> None:
    await fsm.update_data({report_handlers.REPORT_STATE_KEY: state.to_storage()})


@pytest.mark.asyncio
async def test_open_report_loads_first_page(fsm, fake_service) -> None:
    callback = _make_callback("admin_sub_report")

    await report_handlers.show_subscription_report(callback, state=fsm, language="en")

    assert fake_service.loaded[0].current_page == 1
    assert callback.message.edit_text.await_count == 2
    loading_text = callback.message.edit_text.await_args_list[0].args[0]
    final_text = callback.message.edit_text.await_args_list[1].args[0]
    assert "Loading" in loading_text
    assert "Total: 100 | Page: 1/10" in final_text
    stored = (await fsm.get_data())[report_handlers.REPORT_STATE_KEY]
    assert stored["last_page"] == 10
    callback.answer.assert_awaited()


@pytest.mark.asyncio
async def test_page_change_within_range_fetches(fsm, fake_service) -> None:
    await _store(fsm, replace(initial_state(), total=100, last_page=10, current_page=2))
    callback = _make_callback("sub_report_page_5")

    await report_handlers.handle_report_pagination(callback, state=fsm, language="en")

    assert [state.current_page for state in fake_service.loaded] == [5]


@pytest.mark.asyncio
@pytest.mark.parametrize("data", ["sub_report_page_2", "sub_report_page_0", "sub_report_page_11"])
async def test_page_change_outside_guard_is_ignored(fsm, fake_service, data: str) -> None:
    await _store(fsm, replace(initial_state(), total=100, last_page=10, current_page=2))
    callback = _make_callback(data)

    await report_handlers.handle_report_pagination(callback, state=fsm, language="en")

    assert fake_service.loaded == []
    callback.message.edit_text.assert_not_awaited()
    callback.answer.assert_awaited_once()


@pytest.mark.asyncio
async def test_period_change_resets_page(fsm, fake_service) -> None:
    await _store(fsm, replace(initial_state(), total=100, last_page=10, current_page=4))
    callback = _make_callback("sub_report_period_monthly")

    await report_handlers.handle_report_period(callback, state=fsm, language="en")

    loaded = fake_service.loaded[0]
    assert loaded.period.value == "monthly"
    assert loaded.current_page == 1


@pytest.mark.asyncio
async def test_year_and_month_selection(fsm, fake_service) -> None:
    await report_handlers.handle_report_year(_make_callback("sub_report_year_2022"), state=fsm, language="en")
    await report_handlers.handle_report_month(_make_callback("sub_report_month_6"), state=fsm, language="en")

    assert fake_service.loaded[0].year == 2022
    assert fake_service.loaded[1].year == 2022
    assert fake_service.loaded[1].month == 6


@pytest.mark.asyncio
async def test_superseded_load_is_not_rendered(fsm, fake_service) -> None:
    fake_service.result_factory = lambda state: None
    callback = _make_callback("sub_report_refresh")

    await report_handlers.refresh_subscription_report(callback, state=fsm, language="en")

    assert callback.message.edit_text.await_count == 1
    stored = (await fsm.get_data())[report_handlers.REPORT_STATE_KEY]
    assert stored["last_page"] == 1
    callback.answer.assert_awaited_once()


@pytest.mark.asyncio
async def test_non_admin_is_denied(fsm, fake_service) -> None:
    callback = _make_callback("admin_sub_report", user_id=42)

    await report_handlers.show_subscription_report(callback, state=fsm, language="en")

    assert fake_service.loaded == []
    callback.answer.assert_awaited_once()
    assert callback.answer.await_args.kwargs.get("show_alert") is True


@pytest.mark.asyncio
async def test_unknown_period_is_ignored(fsm, fake_service) -> None:
    callback = _make_callback("sub_report_period_decade")

    await report_handlers.handle_report_period(callback, state=fsm, language="en")

    assert fake_service.loaded == []
    callback.answer.assert_awaited_once()


class SlowFirstFetchAPI:
    """Первый запрос висит до release(), остальные отвечают сразу."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self._first_released = asyncio.Event()

    def release(self) -> None:
        self._first_released.set()

    async def __aenter__(self) -> "SlowFirstFetchAPI":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def fetch_subscriptions(self, period, year, month, page) -> SubscriptionReportPage:
        self.calls.append((period, year, month, page))
        if len(self.calls) == 1:
            await self._first_released.wait()
        return SubscriptionReportPage(rows=[], current_page=page, last_page=3, total=25, per_page=10)


@pytest.mark.asyncio
async def test_filter_chosen_during_pending_load_is_kept(fsm, monkeypatch) -> None:
    monkeypatch.setattr(settings, "ADMIN_IDS", str(ADMIN_ID), raising=False)
    api = SlowFirstFetchAPI()
    monkeypatch.setattr(report_handlers, "subscription_report_service", SubscriptionReportService(api_factory=lambda: api))

    period_task = asyncio.create_task(
        report_handlers.handle_report_period(_make_callback("sub_report_period_monthly"), state=fsm, language="en")
    )
    while not api.calls:
        await asyncio.sleep(0)

    await report_handlers.handle_report_year(_make_callback("sub_report_year_2023"), state=fsm, language="en")
    api.release()
    await period_task

    assert len(api.calls) == 2
    period, year, month, page = api.calls[1]
    assert period is ReportPeriod.MONTHLY
    assert year == 2023
    assert page == 1
    stored = (await fsm.get_data())[report_handlers.REPORT_STATE_KEY]
    assert stored["period"] == "monthly"
    assert stored["year"] == 2023
