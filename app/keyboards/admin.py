from typing import List, Optional, Sequence
from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from app.external.report_api import ReportPeriod
from app.localization.texts import get_texts
from app.services.subscription_report_service import ReportViewState
from app.utils.formatters import format_period_label
from app.utils.pagination import PageItem, PageNumber

NOOP_CALLBACK = "sub_report_noop"
MAX_BUTTONS_PER_ROW = 8


def _t(texts, key: str, default: str) -> str:
    """Helper for localized button labels with fallbacks."""
    return texts.t(key, default)


def _mark(text: str, selected: bool) -> str:
    return f"• {text} •" if selected else text


def get_admin_main_keyboard(language: str = "ru") -> InlineKeyboardMarkup:
    texts = get_texts(language)

    return InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(
                text=_t(texts, "ADMIN_SUB_REPORT", "📋 Subscription report"),
                callback_data="admin_sub_report",
            )
        ],
    ])


def _get_period_rows(state: ReportViewState, texts) -> List[List[InlineKeyboardButton]]:
    buttons = [
        InlineKeyboardButton(
            text=_mark(format_period_label(period, texts), period is state.period),
            callback_data=f"sub_report_period_{period.value}",
        )
        for period in ReportPeriod
    ]
    return [buttons[:3], buttons[3:]]


def _get_year_row(state: ReportViewState, years: Sequence[int]) -> List[InlineKeyboardButton]:
    return [
        InlineKeyboardButton(
            text=_mark(str(year), year == state.year),
            callback_data=f"sub_report_year_{year}",
        )
        for year in years
    ]


def _get_month_rows(state: ReportViewState, texts) -> List[List[InlineKeyboardButton]]:
    buttons = [
        InlineKeyboardButton(
            text=_mark(name[:3], number == state.month),
            callback_data=f"sub_report_month_{number}",
        )
        for number, name in enumerate(texts.month_names(), 1)
    ]
    return [buttons[i:i + 4] for i in range(0, len(buttons), 4)]


def _get_page_row(state: ReportViewState, pagination_items: Sequence[PageItem]) -> List[InlineKeyboardButton]:
    row = []
    for item in pagination_items:
        if isinstance(item, PageNumber):
            row.append(InlineKeyboardButton(
                text=_mark(str(item.number), item.number == state.current_page),
                callback_data=f"sub_report_page_{item.number}",
            ))
        else:
            row.append(InlineKeyboardButton(text="…", callback_data=NOOP_CALLBACK))
    return row


def _get_prev_next_row(state: ReportViewState, texts) -> List[InlineKeyboardButton]:
    has_prev = state.current_page > 1
    has_next = state.current_page < state.last_page

    previous_text = _t(texts, "SUB_REPORT_PREVIOUS", "⬅️ Previous")
    next_text = _t(texts, "SUB_REPORT_NEXT", "Next ➡️")

    return [
        InlineKeyboardButton(
            text=previous_text if has_prev else f"✖️ {previous_text}",
            callback_data=f"sub_report_page_{state.current_page - 1}" if has_prev else NOOP_CALLBACK,
        ),
        InlineKeyboardButton(
            text=next_text if has_next else f"{next_text} ✖️",
            callback_data=f"sub_report_page_{state.current_page + 1}" if has_next else NOOP_CALLBACK,
        ),
    ]


def get_subscription_report_keyboard(
    state: ReportViewState,
    pagination_items: Sequence[PageItem],
    language: str = "ru",
    years: Optional[Sequence[int]] = None,
) -> InlineKeyboardMarkup:
    texts = get_texts(language)
    keyboard: List[List[InlineKeyboardButton]] = []

    keyboard.extend(_get_period_rows(state, texts))

    if state.period.requires_year and years:
        keyboard.append(_get_year_row(state, years))

    if state.period.requires_month:
        keyboard.extend(_get_month_rows(state, texts))

    show_pagination = not state.loading and not state.error
    if show_pagination and pagination_items:
        page_row = _get_page_row(state, pagination_items)
        keyboard.extend(
            page_row[i:i + MAX_BUTTONS_PER_ROW] for i in range(0, len(page_row), MAX_BUTTONS_PER_ROW)
        )
        keyboard.append(_get_prev_next_row(state, texts))

    keyboard.append([
        InlineKeyboardButton(text=_t(texts, "SUB_REPORT_REFRESH", "🔄 Refresh"), callback_data="sub_report_refresh"),
    ])
    keyboard.append([
        InlineKeyboardButton(text=_t(texts, "BACK", "⬅️ Back"), callback_data="admin_panel"),
    ])

    return InlineKeyboardMarkup(inline_keyboard=keyboard)
