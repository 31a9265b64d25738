import logging
from typing import Callable, Dict, Any, Awaitable
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, CallbackQuery
from aiogram.exceptions import TelegramBadRequest

logger = logging.getLogger(__name__)

_OLD_QUERY_PHRASES = (
    "query is too old",
    "query id is invalid",
    "response timeout expired",
)

_IGNORED_PHRASES = (
    "message not found",
    "chat not found",
    "bot was blocked by the user",
    "user is deactivated",
)


class GlobalErrorMiddleware(BaseMiddleware):

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any]
    ) -> Any:
        try:
            return await handler(event, data)
        except TelegramBadRequest as e:
            return await self._handle_telegram_error(event, e)
        except Exception as e:
            logger.error(f"Неожиданная ошибка в GlobalErrorMiddleware: {e}", exc_info=True)
            raise

    async def _handle_telegram_error(self, event: TelegramObject, error: TelegramBadRequest):
        error_message = str(error).lower()

        if any(phrase in error_message for phrase in _OLD_QUERY_PHRASES):
            data = event.data if isinstance(event, CallbackQuery) else None
            logger.warning(
                f"🕐 [GlobalErrorMiddleware] Игнорируем устаревший запрос {data!r} от {self._get_user_info(event)}"
            )
            return None

        if "message is not modified" in error_message:
            logger.debug(f"📝 [GlobalErrorMiddleware] Сообщение не было изменено: {error}")
            if isinstance(event, CallbackQuery):
                try:
                    await event.answer()
                except TelegramBadRequest as answer_error:
                    logger.debug(f"Не удалось ответить на callback: {answer_error}")
            return None

        if any(phrase in error_message for phrase in _IGNORED_PHRASES):
            logger.warning(f"🔍 [GlobalErrorMiddleware] {self._get_user_info(event)}: {error}")
            return None

        logger.error(f"Неизвестная Telegram API ошибка: {error}")
        raise error

    def _get_user_info(self, event: TelegramObject) -> str:
        user = getattr(event, 'from_user', None)
        if not user:
            return "Unknown"
        return f"@{user.username}" if user.username else f"ID:{user.id}"
