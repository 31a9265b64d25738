import logging
from dataclasses import replace

from aiogram import Dispatcher, types, F
from aiogram.fsm.context import FSMContext

from app.config import settings
from app.external.report_api import ReportPeriod
from app.keyboards.admin import NOOP_CALLBACK, get_subscription_report_keyboard
from app.localization.texts import get_texts
from app.services.subscription_report_service import (
    ReportViewState,
    change_page,
    initial_state,
    pagination_range,
    select_month,
    select_period,
    select_year,
    subscription_report_service,
)
from app.utils.decorators import admin_required, error_handler
from app.utils.formatters import format_subscription_report

logger = logging.getLogger(__name__)

REPORT_STATE_KEY = "sub_report"


async def _get_view_state(state: FSMContext) -> ReportViewState:
    data = await state.get_data()
    return ReportViewState.from_storage(data.get(REPORT_STATE_KEY))


def _build_keyboard(view_state: ReportViewState, language: str) -> types.InlineKeyboardMarkup:
    items = [] if view_state.loading or view_state.error else pagination_range(view_state)
    return get_subscription_report_keyboard(
        view_state,
        items,
        language,
        years=settings.get_report_years(),
    )


async def _load_and_render(
    callback: types.CallbackQuery,
    state: FSMContext,
    view_state: ReportViewState,
    language: str,
) -> None:
    texts = get_texts(language)

    # фильтры сохраняем до запроса, чтобы следующее нажатие видело выбор админа
    await state.update_data({REPORT_STATE_KEY: view_state.to_storage()})

    loading_state = replace(view_state, loading=True, error=None)
    await callback.message.edit_text(
        format_subscription_report(loading_state, texts),
        reply_markup=_build_keyboard(loading_state, language),
    )

    loaded = await subscription_report_service.load(callback.from_user.id, view_state, language)
    if loaded is None:
        # пока ждали ответ, админ успел сменить фильтр или страницу
        await callback.answer()
        return

    await state.update_data({REPORT_STATE_KEY: loaded.to_storage()})
    await callback.message.edit_text(
        format_subscription_report(loaded, texts),
        reply_markup=_build_keyboard(loaded, language),
    )
    await callback.answer()


@admin_required
@error_handler
async def show_subscription_report(
    callback: types.CallbackQuery,
    state: FSMContext,
    language: str = settings.DEFAULT_LANGUAGE,
):
    await _load_and_render(callback, state, initial_state(), language)


@admin_required
@error_handler
async def refresh_subscription_report(
    callback: types.CallbackQuery,
    state: FSMContext,
    language: str = settings.DEFAULT_LANGUAGE,
):
    await _load_and_render(callback, state, await _get_view_state(state), language)


@admin_required
@error_handler
async def handle_report_period(
    callback: types.CallbackQuery,
    state: FSMContext,
    language: str = settings.DEFAULT_LANGUAGE,
):
    raw_period = callback.data.removeprefix("sub_report_period_")
    try:
        period = ReportPeriod(raw_period)
    except ValueError:
        logger.warning(f"Неизвестный период отчета: {raw_period}")
        await callback.answer()
        return

    view_state = select_period(await _get_view_state(state), period)
    await _load_and_render(callback, state, view_state, language)


@admin_required
@error_handler
async def handle_report_year(
    callback: types.CallbackQuery,
    state: FSMContext,
    language: str = settings.DEFAULT_LANGUAGE,
):
    year = int(callback.data.split('_')[-1])
    view_state = select_year(await _get_view_state(state), year)
    await _load_and_render(callback, state, view_state, language)


@admin_required
@error_handler
async def handle_report_month(
    callback: types.CallbackQuery,
    state: FSMContext,
    language: str = settings.DEFAULT_LANGUAGE,
):
    month = int(callback.data.split('_')[-1])
    view_state = select_month(await _get_view_state(state), month)
    await _load_and_render(callback, state, view_state, language)


@admin_required
@error_handler
async def handle_report_pagination(
    callback: types.CallbackQuery,
    state: FSMContext,
    language: str = settings.DEFAULT_LANGUAGE,
):
    page = int(callback.data.split('_')[-1])
    current = await _get_view_state(state)
    view_state = change_page(current, page)

    if view_state is current:
        logger.debug(f"Переход на страницу {page} отклонен (текущая {current.current_page}/{current.last_page})")
        await callback.answer()
        return

    await _load_and_render(callback, state, view_state, language)


async def handle_report_noop(callback: types.CallbackQuery):
    await callback.answer()


def register_handlers(dp: Dispatcher):
    dp.callback_query.register(show_subscription_report, F.data == "admin_sub_report")
    dp.callback_query.register(refresh_subscription_report, F.data == "sub_report_refresh")
    dp.callback_query.register(handle_report_noop, F.data == NOOP_CALLBACK)
    dp.callback_query.register(handle_report_period, F.data.startswith("sub_report_period_"))
    dp.callback_query.register(handle_report_year, F.data.regexp(r"^sub_report_year_\d+$"))
    dp.callback_query.register(handle_report_month, F.data.regexp(r"^sub_report_month_\d+$"))
    dp.callback_query.register(handle_report_pagination, F.data.regexp(r"^sub_report_page_-?\d+$"))
