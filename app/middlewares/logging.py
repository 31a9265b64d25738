import logging
import time
from typing import Callable, Dict, Any, Awaitable
from aiogram import BaseMiddleware
from aiogram.types import Message, CallbackQuery, TelegramObject

logger = logging.getLogger(__name__)

SLOW_HANDLER_SECONDS = 1.0


class LoggingMiddleware(BaseMiddleware):

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any]
    ) -> Any:
        start_time = time.monotonic()

        if isinstance(event, Message):
            logger.info(f"📩 Сообщение от {_user_info(event)}: {event.text or event.caption or '[медиа]'}")
        elif isinstance(event, CallbackQuery):
            logger.info(f"🔘 Callback от {_user_info(event)}: {event.data}")

        try:
            result = await handler(event, data)
        except Exception as e:
            logger.error(f"❌ Ошибка при обработке события за {time.monotonic() - start_time:.2f}s: {e}")
            raise

        execution_time = time.monotonic() - start_time
        if execution_time > SLOW_HANDLER_SECONDS:
            logger.warning(f"⏱️ Медленная операция: {execution_time:.2f}s")

        return result


def _user_info(event) -> str:
    user = event.from_user
    if user is None:
        return "Unknown"
    return f"@{user.username}" if user.username else f"ID:{user.id}"
