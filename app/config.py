import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


logger = logging.getLogger(__name__)


class Settings(BaseSettings):

    BOT_TOKEN: str
    ADMIN_IDS: str = ""

    DEFAULT_LANGUAGE: str = "ru"
    AVAILABLE_LANGUAGES: str = "ru,en"

    REDIS_URL: str = "redis://localhost:6379/0"

    REPORT_API_URL: str = "http://localhost:8000"
    REPORT_API_KEY: Optional[str] = None
    REPORT_API_TIMEOUT: int = 30
    REPORT_SUBSCRIPTIONS_ENDPOINT: str = "/api/reports/subscriptions"

    # Используется, только если API не вернул per_page
    REPORT_PAGE_SIZE: int = 10
    # Количество соседних страниц слева и справа от текущей
    REPORT_SIBLING_COUNT: int = 1
    REPORT_YEARS_BACK: int = 5

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/bot.log"

    @field_validator('REPORT_PAGE_SIZE', 'REPORT_YEARS_BACK', 'REPORT_API_TIMEOUT', mode='before')
    @classmethod
    def ensure_positive_int(cls, value: Optional[int], info) -> int:
        defaults = {
            'REPORT_PAGE_SIZE': 10,
            'REPORT_YEARS_BACK': 5,
            'REPORT_API_TIMEOUT': 30,
        }
        fallback = defaults[info.field_name]
        try:
            if value is None:
                return fallback
            return max(1, int(value))
        except (TypeError, ValueError):
            return fallback

    @field_validator('REPORT_SIBLING_COUNT', mode='before')
    @classmethod
    def ensure_non_negative_sibling_count(cls, value: Optional[int]) -> int:
        try:
            if value is None:
                return 1
            return max(0, int(value))
        except (TypeError, ValueError):
            return 1

    @field_validator('REPORT_API_URL', mode='before')
    @classmethod
    def strip_api_url(cls, value: Optional[str]) -> str:
        if not value or not str(value).strip():
            return "http://localhost:8000"
        return str(value).strip().rstrip('/')

    @field_validator('LOG_LEVEL', mode='before')
    @classmethod
    def normalize_log_level(cls, value: Optional[str]) -> str:
        level = str(value or "INFO").strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            return "INFO"
        return level

    @field_validator('LOG_FILE', mode='before')
    @classmethod
    def ensure_log_dir(cls, v):
        log_path = Path(v)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        return str(log_path)

    def is_admin(self, user_id: int) -> bool:
        return user_id in self.get_admin_ids()

    def get_admin_ids(self) -> List[int]:
        try:
            admin_ids = self.ADMIN_IDS

            if isinstance(admin_ids, str):
                if not admin_ids.strip():
                    return []
                return [int(x.strip()) for x in admin_ids.split(',') if x.strip()]

            return []

        except (ValueError, AttributeError):
            return []

    def get_available_languages(self) -> List[str]:
        defaults = ["ru", "en"]

        langs = self.AVAILABLE_LANGUAGES
        if not langs or not langs.strip():
            return defaults

        cleaned: List[str] = []
        seen: set[str] = set()

        for code in langs.split(','):
            normalized = code.strip().lower()
            if not normalized or normalized in seen:
                continue
            seen.add(normalized)
            cleaned.append(normalized)

        return cleaned or defaults

    def get_report_years(self, today: Optional[date] = None) -> List[int]:
        """Годы для фильтра отчета: текущий и несколько предыдущих."""
        current_year = (today or date.today()).year
        return [current_year - offset for offset in range(self.REPORT_YEARS_BACK)]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }


settings = Settings()
