import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.config import settings
from app.external.report_api import (
    ReportPeriod,
    SubscriptionRecord,
    SubscriptionReportAPI,
    SubscriptionReportAPIError,
    SubscriptionReportPage,
)
from app.localization.texts import get_texts
from app.utils.pagination import PageItem, get_pagination_range, is_page_change_allowed


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReportViewState:
    period: ReportPeriod
    year: int
    month: int
    current_page: int = 1
    last_page: int = 1
    total: int = 0
    page_size: int = 10
    rows: Tuple[SubscriptionRecord, ...] = ()
    loading: bool = False
    error: Optional[str] = None
    request_id: int = 0

    def to_storage(self) -> Dict[str, Any]:
        return {
            "period": self.period.value,
            "year": self.year,
            "month": self.month,
            "current_page": self.current_page,
            "last_page": self.last_page,
            "total": self.total,
            "page_size": self.page_size,
        }

    @classmethod
    def from_storage(cls, data: Optional[Dict[str, Any]], today: Optional[date] = None) -> "ReportViewState":
        base = initial_state(today)
        if not data:
            return base

        try:
            period = ReportPeriod(data.get("period", base.period.value))
            month = int(data.get("month", base.month))
            return replace(
                base,
                period=period,
                year=int(data.get("year", base.year)),
                month=month if 1 <= month <= 12 else base.month,
                current_page=max(1, int(data.get("current_page", 1))),
                last_page=max(1, int(data.get("last_page", 1))),
                total=max(0, int(data.get("total", 0))),
                page_size=max(1, int(data.get("page_size", base.page_size))),
            )
        except (TypeError, ValueError) as e:
            logger.warning(f"Некорректное состояние отчета в хранилище, сбрасываем: {e}")
            return base


def initial_state(today: Optional[date] = None) -> ReportViewState:
    today = today or date.today()
    return ReportViewState(
        period=ReportPeriod.LAST_7_DAYS,
        year=today.year,
        month=today.month,
        page_size=settings.REPORT_PAGE_SIZE,
    )


def select_period(state: ReportViewState, period: ReportPeriod) -> ReportViewState:
    return replace(state, period=period, current_page=1)


def select_year(state: ReportViewState, year: int) -> ReportViewState:
    return replace(state, year=year, current_page=1)


def select_month(state: ReportViewState, month: int) -> ReportViewState:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    return replace(state, month=month, current_page=1)


def change_page(state: ReportViewState, page: int) -> ReportViewState:
    if not is_page_change_allowed(page, state.current_page, state.last_page):
        return state
    return replace(state, current_page=page)


def start_loading(state: ReportViewState, request_id: int) -> ReportViewState:
    return replace(state, loading=True, error=None, request_id=request_id)


def apply_page(state: ReportViewState, page: SubscriptionReportPage) -> ReportViewState:
    return replace(
        state,
        rows=tuple(page.rows),
        current_page=page.current_page,
        last_page=page.last_page,
        total=page.total,
        page_size=page.per_page or settings.REPORT_PAGE_SIZE,
        loading=False,
        error=None,
    )


def apply_failure(state: ReportViewState, message: str) -> ReportViewState:
    return replace(state, rows=(), loading=False, error=message)


def fetch_params(state: ReportViewState) -> Tuple[ReportPeriod, Optional[int], Optional[int], int]:
    year = state.year if state.period.requires_year else None
    month = state.month if state.period.requires_month else None
    return state.period, year, month, state.current_page


def pagination_range(state: ReportViewState, sibling_count: Optional[int] = None) -> List[PageItem]:
    if sibling_count is None:
        sibling_count = settings.REPORT_SIBLING_COUNT
    return get_pagination_range(
        total_count=state.total,
        page_size=state.page_size,
        current_page=state.current_page,
        sibling_count=sibling_count,
    )


class SubscriptionReportService:
    """Загружает страницы отчета по подпискам и отбрасывает устаревшие ответы."""

    def __init__(self, api_factory: Callable[[], SubscriptionReportAPI] = SubscriptionReportAPI) -> None:
        self._api_factory = api_factory
        self._request_counter = 0
        self._latest_requests: Dict[int, int] = {}

    def _next_request_id(self, owner_id: int) -> int:
        self._request_counter += 1
        self._latest_requests[owner_id] = self._request_counter
        return self._request_counter

    def is_latest(self, owner_id: int, request_id: int) -> bool:
        return self._latest_requests.get(owner_id) == request_id

    async def load(
        self,
        owner_id: int,
        state: ReportViewState,
        language: str = settings.DEFAULT_LANGUAGE,
    ) -> Optional[ReportViewState]:
        state = start_loading(state, self._next_request_id(owner_id))
        period, year, month, page = fetch_params(state)

        try:
            async with self._api_factory() as api:
                result = await api.fetch_subscriptions(period, year, month, page)
        except SubscriptionReportAPIError as e:
            if not self.is_latest(owner_id, state.request_id):
                logger.debug(f"Ошибка устаревшего запроса отчета #{state.request_id} проигнорирована")
                return None
            logger.error(
                f"Не удалось загрузить отчет по подпискам "
                f"(period={period.value}, year={year}, month={month}, page={page}): {e}"
            )
            texts = get_texts(language)
            return apply_failure(
                state,
                texts.t("SUB_REPORT_LOAD_FAILED", "Failed to load subscriptions"),
            )

        if not self.is_latest(owner_id, state.request_id):
            logger.info(
                f"Ответ отчета #{state.request_id} для {owner_id} устарел, отбрасываем"
            )
            return None

        logger.info(
            f"📊 Отчет по подпискам: {len(result.rows)} записей, "
            f"страница {result.current_page}/{result.last_page}, всего {result.total}"
        )
        return apply_page(state, result)


subscription_report_service = SubscriptionReportService()
