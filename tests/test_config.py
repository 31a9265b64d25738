"""Тесты настроек отчета в app.config."""

from datetime import date

from app.config import Settings


def _settings(**overrides) -> Settings:
    return Settings(BOT_TOKEN="token", _env_file=None, **overrides)


def test_admin_ids_are_parsed_from_comma_separated_string() -> None:
    settings = _settings(ADMIN_IDS="1, 2,,3")
    assert settings.get_admin_ids() == [1, 2, 3]
    assert settings.is_admin(2)
    assert not settings.is_admin(4)


def test_invalid_admin_ids_give_empty_list() -> None:
    assert _settings(ADMIN_IDS="one,two").get_admin_ids() == []


def test_report_years_count_back_from_today() -> None:
    settings = _settings(REPORT_YEARS_BACK=3)
    assert settings.get_report_years(date(2024, 6, 1)) == [2024, 2023, 2022]


def test_report_numbers_are_sanitized() -> None:
    settings = _settings(REPORT_PAGE_SIZE="0", REPORT_SIBLING_COUNT="-2", REPORT_API_TIMEOUT="abc")
    assert settings.REPORT_PAGE_SIZE == 1
    assert settings.REPORT_SIBLING_COUNT == 0
    assert settings.REPORT_API_TIMEOUT == 30


def test_api_url_and_log_level_are_normalized() -> None:
    settings = _settings(REPORT_API_URL=" https://reports.test/ ", LOG_LEVEL="debug")
    assert settings.REPORT_API_URL == "https://reports.test"
    assert settings.LOG_LEVEL == "DEBUG"
    assert _settings(LOG_LEVEL="verbose").LOG_LEVEL == "INFO"


def test_available_languages_are_deduplicated() -> None:
    assert _settings(AVAILABLE_LANGUAGES="EN, ru, en").get_available_languages() == ["en", "ru"]
    assert _settings(AVAILABLE_LANGUAGES=" ").get_available_languages() == ["ru", "en"]
