"""Тесты форматирования отчета по подпискам из app.utils.formatters."""

from dataclasses import replace
from datetime import datetime

from app.external.report_api import ReportPeriod, SubscriptionRecord
from app.localization.texts import get_texts
from app.services.subscription_report_service import apply_failure, initial_state, select_period
from app.utils import formatters


def _record(**overrides) -> SubscriptionRecord:
    data = dict(
        id=1,
        user_name="Ivan <Admin>",
        user_email="ivan@example.com",
        plan_name="Premium",
        payment_date="2024-03-01T10:00:00Z",
        payment_status="paid",
        subscription_status="active",
    )
    data.update(overrides)
    return SubscriptionRecord(**data)


def test_format_date_handles_iso_strings_and_raw_values() -> None:
    assert formatters.format_date("2024-03-01T10:00:00Z") == "01.03.2024"
    assert formatters.format_date(datetime(2023, 12, 31)) == "31.12.2023"
    assert formatters.format_date("31/12/2023") == "31/12/2023"
    assert formatters.format_date(None) == "—"


def test_truncate_text_appends_suffix() -> None:
    assert formatters.truncate_text("short", 10) == "short"
    assert formatters.truncate_text("a" * 20, 10) == "aaaaaaa..."


def test_format_report_period_labels(fixed_today) -> None:
    texts = get_texts("en")
    state = initial_state(fixed_today)

    assert formatters.format_report_period(state, texts) == "Last 7 Days"
    assert formatters.format_report_period(select_period(state, ReportPeriod.MONTHLY), texts) == "Monthly: March 2024"
    assert formatters.format_report_period(select_period(state, ReportPeriod.YEARLY), texts) == "Yearly: 2024"


def test_format_subscription_row_escapes_html() -> None:
    row = formatters.format_subscription_row(_record(), 11, get_texts("en"))

    assert row.startswith("11. Ivan &lt;Admin&gt; (ivan@example.com)")
    assert "Plan: Premium" in row
    assert "Subscribe Date: 01.03.2024" in row
    assert "Payment Status: paid" in row
    assert "Subscription Status: active" in row


def test_format_subscription_report_numbers_rows_by_page(fixed_today) -> None:
    state = replace(
        initial_state(fixed_today),
        rows=(_record(id=1), _record(id=2)),
        current_page=3,
        last_page=3,
        total=22,
    )

    text = formatters.format_subscription_report(state, get_texts("en"))

    assert "Subscription Table Report" in text
    assert "Total: 22 | Page: 3/3" in text
    assert "21. Ivan" in text
    assert "22. Ivan" in text


def test_format_subscription_report_states(fixed_today) -> None:
    texts = get_texts("en")
    state = initial_state(fixed_today)

    assert "No subscriptions found." in formatters.format_subscription_report(state, texts)
    assert "Loading" in formatters.format_subscription_report(replace(state, loading=True), texts)

    failed = formatters.format_subscription_report(apply_failure(state, "Failed to load subscriptions"), texts)
    assert "❌ Failed to load subscriptions" in failed
    assert "Total:" not in failed
