import asyncio
import logging
import signal
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent))

from app.bot import setup_bot, shutdown_bot
from app.config import settings


class GracefulExit:

    def __init__(self):
        self.exit = False

    def exit_gracefully(self, signum, frame):
        logging.getLogger(__name__).info(f"Получен сигнал {signum}. Корректное завершение работы...")
        self.exit = True


async def main():
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(settings.LOG_FILE, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )

    logger = logging.getLogger(__name__)
    logger.info("🚀 Запуск бота отчетов по подпискам")
    logger.info(f"API отчетов: {settings.REPORT_API_URL}{settings.REPORT_SUBSCRIPTIONS_ENDPOINT}")

    if not settings.get_admin_ids():
        logger.warning("⚠️ ADMIN_IDS пуст: отчет будет недоступен всем пользователям")

    killer = GracefulExit()
    signal.signal(signal.SIGINT, killer.exit_gracefully)
    signal.signal(signal.SIGTERM, killer.exit_gracefully)

    bot, dp = await setup_bot()
    polling_task = asyncio.create_task(dp.start_polling(bot, skip_updates=True, handle_signals=False))
    logger.info("🤖 Aiogram polling запущен")

    try:
        while not killer.exit:
            await asyncio.sleep(1)

            if polling_task.done():
                exception = polling_task.exception()
                if exception:
                    logger.error(f"❌ Polling завершился с ошибкой: {exception}")
                break
    finally:
        logger.info("🛑 Начинается корректное завершение работы...")

        if not polling_task.done():
            await dp.stop_polling()
            try:
                await polling_task
            except asyncio.CancelledError:
                pass

        await shutdown_bot(bot, dp)
        logger.info("✅ Завершение работы бота завершено")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n🛑 Бот остановлен пользователем")
    except Exception as e:
        print(f"❌ Критическая ошибка: {e}")
        sys.exit(1)
