"""Hosted finance backend HTTP client for transactions and categories"""

import httpx
from datetime import date
from typing import Any, Dict, List
from finhealth_gateway.domain.models import Category, Transaction
from finhealth_gateway.domain.exceptions import FinanceAPIError
from finhealth_gateway.utils.date_utils import parse_iso_date
from finhealth_gateway.config import settings


class FinanceAPIClient:
    """Client for the hosted backend's REST interface (PostgREST-style filters)"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.finance_api_base).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.finance_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _get(self, path: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/{path}",
                    params=params,
                    headers=self._headers(),
                )
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as e:
                raise FinanceAPIError(f"Finance API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise FinanceAPIError(f"Finance API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise FinanceAPIError(f"Finance API unreachable: {e}") from e
            except ValueError as e:
                raise FinanceAPIError(f"Invalid JSON from finance API: {e}") from e

        if not isinstance(data, list):
            raise FinanceAPIError("Invalid response from finance API: expected a list of rows")
        return data

    async def get_expense_transactions(self, user_id: str, since: date) -> List[Transaction]:
        """
        Fetch a user's expense transactions (amount < 0) dated on or after `since`.

        Rows with an unparseable date are kept with date=None.

        Raises:
            FinanceAPIError: On timeout, HTTP errors, or invalid response
        """
        rows = await self._get(
            "transactions",
            {
                "select": "id,payee_clean,payee_original,amount,date,category_id",
                "user_id": f"eq.{user_id}",
                "date": f"gte.{since.isoformat()}",
                "amount": "lt.0",
                "order": "date.desc",
            },
        )

        try:
            return [
                Transaction(
                    id=str(row["id"]),
                    payee_clean=row.get("payee_clean"),
                    payee_original=row.get("payee_original"),
                    amount=float(row["amount"]),
                    date=parse_iso_date(row.get("date")),
                    category_id=row.get("category_id"),
                )
                for row in rows
            ]
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise FinanceAPIError(f"Invalid transaction data from finance API: {e}") from e

    async def get_categories(self, user_id: str) -> List[Category]:
        """
        Fetch categories visible to a user: their own plus system categories.

        Raises:
            FinanceAPIError: On timeout, HTTP errors, or invalid response
        """
        rows = await self._get(
            "categories",
            {
                "select": "id,name,icon,color",
                "or": f"(user_id.eq.{user_id},is_system.eq.true)",
            },
        )

        try:
            return [
                Category(
                    id=str(row["id"]),
                    name=row["name"],
                    icon=row.get("icon"),
                    color=row.get("color"),
                )
                for row in rows
            ]
        except (KeyError, TypeError, AttributeError) as e:
            raise FinanceAPIError(f"Invalid category data from finance API: {e}") from e
