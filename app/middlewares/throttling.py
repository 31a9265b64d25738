import logging
import time
from typing import Callable, Dict, Any, Awaitable
from aiogram import BaseMiddleware
from aiogram.types import Message, CallbackQuery, TelegramObject

logger = logging.getLogger(__name__)


class ThrottlingMiddleware(BaseMiddleware):

    def __init__(self, rate_limit: float = 0.3):
        self.rate_limit = rate_limit
        self.user_buckets: Dict[int, float] = {}

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any]
    ) -> Any:
        user = event.from_user if isinstance(event, (Message, CallbackQuery)) else None
        if not user:
            return await handler(event, data)

        now = time.monotonic()
        if now - self.user_buckets.get(user.id, 0) < self.rate_limit:
            logger.warning(f"🚫 Throttling для пользователя {user.id}")
            if isinstance(event, CallbackQuery):
                await event.answer("⏳", show_alert=False)
            return None

        self.user_buckets[user.id] = now

        cleanup_threshold = now - 60
        self.user_buckets = {
            uid: timestamp
            for uid, timestamp in self.user_buckets.items()
            if timestamp > cleanup_threshold
        }

        return await handler(event, data)
