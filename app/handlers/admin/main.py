import logging
from aiogram import Dispatcher, types, F
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext

from app.config import settings
from app.keyboards.admin import get_admin_main_keyboard
from app.localization.texts import get_texts
from app.utils.decorators import admin_required, error_handler

logger = logging.getLogger(__name__)


@admin_required
@error_handler
async def show_admin_panel(
    callback: types.CallbackQuery,
    state: FSMContext,
    language: str = settings.DEFAULT_LANGUAGE,
):
    texts = get_texts(language)

    await state.clear()
    await callback.message.edit_text(
        texts.ADMIN_PANEL,
        reply_markup=get_admin_main_keyboard(language)
    )
    await callback.answer()


@admin_required
@error_handler
async def admin_command(
    message: types.Message,
    state: FSMContext,
    language: str = settings.DEFAULT_LANGUAGE,
):
    texts = get_texts(language)

    await state.clear()
    await message.answer(
        texts.ADMIN_PANEL,
        reply_markup=get_admin_main_keyboard(language)
    )


def register_handlers(dp: Dispatcher):
    dp.callback_query.register(
        show_admin_panel,
        F.data == "admin_panel"
    )

    dp.message.register(
        admin_command,
        Command("admin")
    )
