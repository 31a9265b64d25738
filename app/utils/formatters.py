from datetime import date, datetime
from html import escape
from typing import Optional, Union

from app.external.report_api import ReportPeriod, SubscriptionRecord
from app.localization.texts import Texts
from app.services.subscription_report_service import ReportViewState


def format_date(dt: Optional[Union[datetime, date, str]], format_str: str = "%d.%m.%Y") -> str:
    if dt is None or dt == "":
        return "—"

    if isinstance(dt, str):
        try:
            dt = datetime.fromisoformat(dt.replace('Z', '+00:00'))
        except (ValueError, AttributeError):
            # оставляем как есть, если API прислал дату в своем формате
            return dt

    return dt.strftime(format_str)


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    if len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix


def format_period_label(period: ReportPeriod, texts: Texts) -> str:
    return texts.t(
        f"SUB_REPORT_PERIOD_{period.name.replace('LAST_', '')}",
        period.value,
    )


def format_report_period(state: ReportViewState, texts: Texts) -> str:
    label = format_period_label(state.period, texts)

    if state.period is ReportPeriod.MONTHLY:
        month_name = texts.month_names()[state.month - 1]
        return f"{label}: {month_name} {state.year}"
    if state.period is ReportPeriod.YEARLY:
        return f"{label}: {state.year}"
    return label


def format_subscription_row(record: SubscriptionRecord, index: int, texts: Texts) -> str:
    user = escape(truncate_text(record.user_name or "—", 40))
    if record.user_email:
        user += f" ({escape(record.user_email)})"

    lines = [
        f"{index}. {user}",
        f"   {texts.t('SUB_REPORT_PLAN', 'Plan')}: {escape(record.plan_name or '—')}",
        f"   {texts.t('SUB_REPORT_DATE', 'Subscribe Date')}: {escape(format_date(record.payment_date))}",
        f"   {texts.t('SUB_REPORT_PAYMENT_STATUS', 'Payment Status')}: {escape(record.payment_status or '—')}",
        f"   {texts.t('SUB_REPORT_SUBSCRIPTION_STATUS', 'Subscription Status')}: "
        f"{escape(record.subscription_status or '—')}",
    ]
    return "\n".join(lines)


def format_subscription_report(state: ReportViewState, texts: Texts) -> str:
    parts = [
        texts.t("SUB_REPORT_TITLE", "📋 <b>Subscription Table Report</b>"),
        texts.t("SUB_REPORT_FILTER", "Period: {period}").format(
            period=escape(format_report_period(state, texts))
        ),
    ]

    if state.loading:
        parts.append(texts.t("SUB_REPORT_LOADING", "⏳ Loading…"))
        return "\n\n".join(parts)

    if state.error:
        parts.append(f"❌ {escape(state.error)}")
        return "\n\n".join(parts)

    parts.append(
        texts.t("SUB_REPORT_SUMMARY", "Total: {total} | Page: {page}/{last_page}").format(
            total=state.total,
            page=state.current_page,
            last_page=state.last_page,
        )
    )

    if not state.rows:
        parts.append(texts.t("SUB_REPORT_EMPTY", "No subscriptions found."))
        return "\n\n".join(parts)

    first_index = 1 + (state.current_page - 1) * state.page_size
    parts.append(
        "\n\n".join(
            format_subscription_row(record, index, texts)
            for index, record in enumerate(state.rows, first_index)
        )
    )
    return "\n\n".join(parts)
