from typing import Optional

from aiogram import types

from app.config import settings
from app.localization.loader import DEFAULT_LANGUAGE


def get_user_language(user: Optional[types.User]) -> str:
    """Язык интерфейса по language_code из Telegram, если он поддерживается."""
    if user is None or not user.language_code:
        return DEFAULT_LANGUAGE

    code = user.language_code.split("-")[0].lower()
    if code in settings.get_available_languages():
        return code
    return DEFAULT_LANGUAGE
