import logging
from typing import Callable, Dict, Any, Awaitable
from aiogram import BaseMiddleware
from aiogram.types import Message, CallbackQuery, TelegramObject

from app.utils.user_utils import get_user_language

logger = logging.getLogger(__name__)


class AuthMiddleware(BaseMiddleware):
    """Кладет в данные хэндлера язык пользователя."""

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any]
    ) -> Any:
        user = None
        if isinstance(event, (Message, CallbackQuery)):
            user = event.from_user

        if user is None:
            logger.debug("Событие без from_user, пропускаем без языка")
            return await handler(event, data)

        data["language"] = get_user_language(user)
        return await handler(event, data)
