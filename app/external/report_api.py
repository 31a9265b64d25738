import asyncio
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import aiohttp

from app.config import settings

logger = logging.getLogger(__name__)


class ReportPeriod(Enum):
    LAST_7_DAYS = "7_days"
    LAST_14_DAYS = "14_days"
    LAST_28_DAYS = "28_days"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def requires_year(self) -> bool:
        return self in (ReportPeriod.MONTHLY, ReportPeriod.YEARLY)

    @property
    def requires_month(self) -> bool:
        return self is ReportPeriod.MONTHLY


@dataclass
class SubscriptionRecord:
    id: Any
    user_name: str
    user_email: str
    plan_name: str
    payment_date: Optional[str]
    payment_status: Optional[str]
    subscription_status: Optional[str]


@dataclass
class SubscriptionReportPage:
    rows: List[SubscriptionRecord] = field(default_factory=list)
    current_page: int = 1
    last_page: int = 1
    total: int = 0
    per_page: Optional[int] = None


class SubscriptionReportAPIError(Exception):
    def __init__(self, message: str, status_code: int = None, response_data: dict = None):
        self.message = message
        self.status_code = status_code
        self.response_data = response_data
        super().__init__(self.message)


class SubscriptionReportAPI:

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[int] = None,
        endpoint: Optional[str] = None,
    ):
        self.base_url = (base_url or settings.REPORT_API_URL).rstrip('/')
        self.api_key = api_key if api_key is not None else settings.REPORT_API_KEY
        self.timeout = timeout or settings.REPORT_API_TIMEOUT
        self.endpoint = endpoint or settings.REPORT_SUBSCRIPTIONS_ENDPOINT
        self.session: Optional[aiohttp.ClientSession] = None

    def _prepare_headers(self) -> Dict[str, str]:
        headers = {'Accept': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f'Bearer {self.api_key}'
        return headers

    async def __aenter__(self):
        logger.debug(f"Подключение к API отчетов: {self.base_url}")

        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            headers=self._prepare_headers(),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()
            self.session = None

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict] = None
    ) -> Dict:
        if not self.session:
            raise SubscriptionReportAPIError("Session not initialized. Use async context manager.")

        url = f"{self.base_url}{endpoint}"

        try:
            async with self.session.request(method, url=url, params=params) as response:
                response_text = await response.text()

                try:
                    response_data = json.loads(response_text) if response_text else {}
                except json.JSONDecodeError:
                    response_data = {'raw_response': response_text}

                if response.status >= 400:
                    error_message = f'HTTP {response.status}'
                    if isinstance(response_data, dict):
                        error_message = response_data.get('message', error_message)
                    logger.error(f"API отчетов вернул ошибку {response.status}: {error_message}")
                    logger.error(f"Response: {response_text[:500]}")
                    raise SubscriptionReportAPIError(
                        error_message,
                        response.status,
                        response_data
                    )

                return response_data

        except asyncio.TimeoutError:
            logger.error(f"Таймаут запроса к API отчетов: {url}")
            raise SubscriptionReportAPIError("Request timed out")
        except aiohttp.ClientError as e:
            logger.error(f"Request failed: {e}")
            raise SubscriptionReportAPIError(f"Request failed: {str(e)}")

    async def fetch_subscriptions(
        self,
        period: ReportPeriod,
        year: Optional[int] = None,
        month: Optional[int] = None,
        page: int = 1
    ) -> SubscriptionReportPage:
        params: Dict[str, Any] = {
            'period': period.value,
            'page': page,
        }

        if period.requires_year and year is not None:
            params['year'] = year
        if period.requires_month and month is not None:
            params['month'] = month

        response = await self._make_request('GET', self.endpoint, params=params)
        return self._parse_page(response)

    def _parse_page(self, payload: Any) -> SubscriptionReportPage:
        if not isinstance(payload, dict):
            raise SubscriptionReportAPIError("Unexpected report payload", response_data={'raw': payload})

        # некоторые бэкенды оборачивают пагинатор в "response"
        data = payload.get('response', payload)
        if not isinstance(data, dict) or not isinstance(data.get('data'), list):
            raise SubscriptionReportAPIError("Report payload has no rows", response_data=payload)

        try:
            rows = [self._parse_record(item) for item in data['data']]
            current_page = int(data.get('current_page', 1))
            last_page = max(1, int(data.get('last_page', 1)))
            total = max(0, int(data.get('total', len(rows))))
            per_page = data.get('per_page')
            per_page = int(per_page) if per_page not in (None, '') else None
        except (TypeError, ValueError) as e:
            raise SubscriptionReportAPIError(f"Malformed pagination metadata: {e}", response_data=payload)

        if per_page is not None and per_page <= 0:
            per_page = None

        return SubscriptionReportPage(
            rows=rows,
            current_page=current_page,
            last_page=last_page,
            total=total,
            per_page=per_page,
        )

    def _parse_record(self, record_data: Dict) -> SubscriptionRecord:
        user = record_data.get('user') or {}
        plan = record_data.get('membership_plan') or {}

        return SubscriptionRecord(
            id=record_data.get('id'),
            user_name=user.get('name') or '',
            user_email=user.get('email') or '',
            plan_name=plan.get('PlanName') or '',
            payment_date=record_data.get('PaymentDate'),
            payment_status=record_data.get('PaymentStatus'),
            subscription_status=record_data.get('SubscriptionStatus'),
        )
