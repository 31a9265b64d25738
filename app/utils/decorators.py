import logging
import functools
from typing import Callable, Any, Optional
from aiogram import types
from aiogram.exceptions import TelegramBadRequest

from app.config import settings
from app.localization.texts import get_texts
from app.utils.user_utils import get_user_language

logger = logging.getLogger(__name__)


def admin_required(func: Callable) -> Callable:

    @functools.wraps(func)
    async def wrapper(event: types.TelegramObject, *args, **kwargs) -> Any:
        user = getattr(event, 'from_user', None)

        if not user or not settings.is_admin(user.id):
            logger.warning(f"Отказ в доступе к админ-панели для {user.id if user else 'Unknown'}")
            texts = get_texts(kwargs.get('language') or get_user_language(user))
            await _reply(event, texts.ACCESS_DENIED)
            return None

        return await func(event, *args, **kwargs)

    return wrapper


def error_handler(func: Callable) -> Callable:
    """Ловит сбои обработчика и показывает админу локализованную ошибку.

    TelegramBadRequest пробрасывается дальше: устаревшие callback'и и
    "message is not modified" разбирает GlobalErrorMiddleware.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> Any:
        try:
            return await func(*args, **kwargs)
        except TelegramBadRequest:
            raise
        except Exception as e:
            logger.error(f"Ошибка в {func.__name__}: {e}", exc_info=True)
            event = _extract_event(args)
            if event is None:
                return None
            texts = get_texts(kwargs.get('language') or get_user_language(event.from_user))
            try:
                await _reply(event, texts.ERROR)
            except TelegramBadRequest as answer_error:
                logger.warning(f"Не удалось сообщить об ошибке в {func.__name__}: {answer_error}")
            return None

    return wrapper


def _extract_event(args) -> Optional[types.TelegramObject]:
    for arg in args:
        if isinstance(arg, (types.Message, types.CallbackQuery)):
            return arg
    return None


async def _reply(event: types.TelegramObject, text: str) -> None:
    if isinstance(event, types.CallbackQuery):
        await event.answer(text, show_alert=True)
    elif isinstance(event, types.Message):
        await event.answer(text)
