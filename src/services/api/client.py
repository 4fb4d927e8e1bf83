"""
Expense API Client

Talks to the remote expense API:
- GET  {base_url}/api/expense  -> {"expenses": [...]}
- POST {base_url}/api/expense  -> the created record

DESIGN DECISION: No retries, no backoff. A failed request is reported
once and the caller decides what the user sees. Network errors and
non-2xx statuses are folded into the same error kind per operation.

Ambient credentials (the session cookie and any extra headers) are
sent with every request.
"""

from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError

from src.config import ApiSettings, get_settings
from src.models.expense import (
    Expense,
    ExpenseCreate,
    parse_expense_list,
)


class ExpenseApiError(Exception):
    """Base exception for expense API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class FetchError(ExpenseApiError):
    """Retrieving the expense list failed."""
    pass


class SubmitError(ExpenseApiError):
    """Creating an expense failed."""
    pass


class ExpenseApiClient:
    """
    Async client for the expense endpoints.

    A fresh httpx.AsyncClient is opened per request, so an instance can be
    shared across event loops (the Streamlit page creates a new loop per run).
    """

    def __init__(
        self,
        settings: Optional[ApiSettings] = None,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings or get_settings().api
        self._headers = {"Accept": "application/json", **(headers or {})}
        self._transport = transport
        self._logger = structlog.get_logger(__name__)

    @property
    def expense_url(self) -> str:
        return f"{self._settings.base_url}{self._settings.expense_path}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self._headers,
            cookies=self._settings.cookies,
            timeout=self._settings.timeout_seconds,
            transport=self._transport,
        )

    async def list_expenses(self) -> list[Expense]:
        """
        Fetch the full expense list.

        Raises:
            FetchError: on transport failure, non-2xx status,
                        or a body that is not {"expenses": [...]}
        """
        self._logger.debug("expense_list_request", url=self.expense_url)

        try:
            async with self._client() as client:
                response = await client.get(self.expense_url)
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch: {e}") from e

        if not response.is_success:
            raise FetchError(
                f"Failed to fetch: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            expenses = parse_expense_list(response.json())
        except (ValueError, ValidationError) as e:
            raise FetchError(
                f"Failed to fetch: malformed response ({e})",
                status_code=response.status_code,
            ) from e

        if expenses is None:
            raise FetchError(
                "Failed to fetch: response has no 'expenses' list",
                status_code=response.status_code,
            )

        self._logger.debug("expense_list_received", count=len(expenses))
        return expenses

    async def create_expense(self, payload: ExpenseCreate) -> Expense:
        """
        Create an expense and return the server's record.

        Raises:
            SubmitError: on transport failure, non-2xx status,
                         or a body that is not an expense record
        """
        body: dict[str, Any] = payload.to_request_body()
        self._logger.debug("expense_create_request", url=self.expense_url, body=body)

        try:
            async with self._client() as client:
                response = await client.post(self.expense_url, json=body)
        except httpx.HTTPError as e:
            raise SubmitError(f"Post failed: {e}") from e

        if not response.is_success:
            raise SubmitError(
                f"Post failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            created = Expense.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise SubmitError(
                f"Post failed: malformed response ({e})",
                status_code=response.status_code,
            ) from e

        self._logger.debug("expense_created", expense_id=created.id)
        return created
