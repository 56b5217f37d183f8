"""Payment service HTTP client for transaction reports"""

import httpx
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from payment_service.api.v1.schemas import ReportRowSchema, SearchQuery
from report_service.config import settings
from report_service.exceptions import PaymentServiceError

SEARCH_PATH = "/api/payment/search"


def build_search_params(query: SearchQuery) -> Dict[str, str]:
    """Query string for the payment search endpoint, dates as yyyy-MM-dd"""
    params: Dict[str, str] = {}
    if query.bank_id:
        params["bankId"] = query.bank_id
    if query.status is not None:
        params["status"] = query.status.value
    if query.order_reference:
        params["orderReference"] = query.order_reference
    if query.start_date is not None:
        params["startDate"] = query.start_date.strftime("%Y-%m-%d")
    if query.end_date is not None:
        params["endDate"] = query.end_date.strftime("%Y-%m-%d")
    return params


class PaymentServiceClient:
    """Client for the payment service search endpoint"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.payment_service_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def search_transactions(self, query: SearchQuery, request_id: Optional[str] = None) -> List[ReportRowSchema]:
        """
        Forward a report query and return the rows unchanged.

        Raises:
            PaymentServiceError: On timeout, non-2xx status, or invalid response
        """
        headers = {"X-Request-ID": request_id} if request_id else {}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}{SEARCH_PATH}",
                    params=build_search_params(query),
                    headers=headers,
                )
                response.raise_for_status()
                data: List[Dict[str, Any]] = response.json()

                return [ReportRowSchema.model_validate(row) for row in data]

            except httpx.TimeoutException as e:
                raise PaymentServiceError(f"Payment service timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise PaymentServiceError(f"Payment service error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise PaymentServiceError(f"Payment service unreachable: {e}") from e
            except (ValidationError, ValueError, TypeError) as e:
                raise PaymentServiceError(f"Invalid report data from payment service: {e}") from e
