"""Tests for the expense API client."""

import json

import httpx
import pytest

from conftest import BASE_URL, make_expense
from src.models.expense import ExpenseCreate
from src.services.api import ExpenseApiClient, FetchError, SubmitError


def _client_for(api_settings, handler) -> ExpenseApiClient:
    return ExpenseApiClient(settings=api_settings, transport=httpx.MockTransport(handler))


class TestListExpenses:
    """GET /api/expense."""

    @pytest.mark.asyncio
    async def test_returns_server_sequence(self, client, server):
        server.expenses = [make_expense("b", 2.0), make_expense("a", 1.0)]

        expenses = await client.list_expenses()

        assert [e.id for e in expenses] == ["b", "a"]
        assert [e.amount for e in expenses] == [2.0, 1.0]

    @pytest.mark.asyncio
    async def test_sends_ambient_credentials(self, client, server):
        await client.list_expenses()

        request = server.requests[-1]
        assert str(request.url) == f"{BASE_URL}/api/expense"
        assert "session=s3cret" in request.headers.get("cookie", "")

    @pytest.mark.asyncio
    async def test_error_status_raises_fetch_error(self, client, server):
        server.list_status = 500

        with pytest.raises(FetchError) as exc_info:
            await client.list_expenses()

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_failure_raises_fetch_error(self, api_settings):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchError) as exc_info:
            await _client_for(api_settings, handler).list_expenses()

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_body_without_expenses_raises_fetch_error(self, api_settings):
        def handler(request):
            return httpx.Response(200, json={"items": []})

        with pytest.raises(FetchError):
            await _client_for(api_settings, handler).list_expenses()

    @pytest.mark.asyncio
    async def test_non_json_body_raises_fetch_error(self, api_settings):
        def handler(request):
            return httpx.Response(200, text="<html>login</html>")

        with pytest.raises(FetchError):
            await _client_for(api_settings, handler).list_expenses()


class TestCreateExpense:
    """POST /api/expense."""

    @pytest.mark.asyncio
    async def test_posts_json_and_returns_created(self, client, server):
        server.next_ids = ["abc123"]
        payload = ExpenseCreate(date="2024-01-01", description="Coffee",
                                category="Food", amount=3.5)

        created = await client.create_expense(payload)

        assert created.id == "abc123"
        assert created.amount == 3.5
        request = server.requests[-1]
        assert request.method == "POST"
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {
            "date": "2024-01-01",
            "description": "Coffee",
            "category": "Food",
            "amount": 3.5,
        }

    @pytest.mark.asyncio
    async def test_rejected_raises_submit_error(self, client, server):
        server.create_status = 400
        payload = ExpenseCreate(date="2024-01-01", description="Coffee",
                                category="Food", amount=3.5)

        with pytest.raises(SubmitError) as exc_info:
            await client.create_expense(payload)

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_transport_failure_raises_submit_error(self, api_settings):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        payload = ExpenseCreate(date="2024-01-01", description="Coffee",
                                category="Food", amount=3.5)
        with pytest.raises(SubmitError):
            await _client_for(api_settings, handler).create_expense(payload)
