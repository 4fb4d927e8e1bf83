"""Tests for the data synchronizer."""

import asyncio

import httpx
import pytest

from conftest import make_expense, wait_until
from src.models.audit import AuditEventType
from src.models.expense import Expense
from src.services.api import ExpenseApiClient, FetchError
from src.sync import DataSynchronizer


def _expense(expense_id: str, amount: float = 1.0) -> Expense:
    return Expense.model_validate(make_expense(expense_id, amount))


class TestLoad:
    """load() replaces the cache with the server list."""

    @pytest.mark.asyncio
    async def test_cache_equals_server_sequence(self, synchronizer, server):
        server.expenses = [make_expense("c"), make_expense("a"), make_expense("b")]

        loaded = await synchronizer.load()

        assert [e.id for e in loaded] == ["c", "a", "b"]
        assert [e.id for e in synchronizer.expenses] == ["c", "a", "b"]

    @pytest.mark.asyncio
    async def test_load_is_idempotent(self, synchronizer, server):
        server.expenses = [make_expense("a", 1.0), make_expense("b", 2.0)]

        await synchronizer.load()
        first = synchronizer.expenses
        await synchronizer.load()

        assert synchronizer.expenses == first

    @pytest.mark.asyncio
    async def test_load_overwrites_optimistic_state(self, synchronizer, server):
        server.expenses = [make_expense("a")]
        await synchronizer.load()
        await synchronizer.append_local(_expense("local-only"))

        await synchronizer.load()

        assert [e.id for e in synchronizer.expenses] == ["a"]

    @pytest.mark.asyncio
    async def test_failure_sets_error_and_keeps_cache(self, synchronizer, server):
        server.expenses = [make_expense("a")]
        await synchronizer.load()
        server.list_status = 500

        with pytest.raises(FetchError):
            await synchronizer.load()

        assert synchronizer.error is not None
        assert synchronizer.error.status_code == 500
        assert [e.id for e in synchronizer.expenses] == ["a"]

    @pytest.mark.asyncio
    async def test_later_success_clears_error(self, synchronizer, server):
        server.list_status = 500
        with pytest.raises(FetchError):
            await synchronizer.load()

        server.list_status = 200
        await synchronizer.load()

        assert synchronizer.error is None

    @pytest.mark.asyncio
    async def test_load_is_audited(self, synchronizer, server, audit_storage):
        server.expenses = [make_expense("a")]
        await synchronizer.load()

        events = await audit_storage.get_recent_events()
        assert events[0].event_type == AuditEventType.EXPENSES_LOADED
        assert events[0].details["count"] == 1


class TestAppendLocal:
    """append_local() is a plain append, no refetch."""

    @pytest.mark.asyncio
    async def test_appends_exactly_one_at_end(self, synchronizer, server):
        server.expenses = [make_expense("a"), make_expense("b")]
        await synchronizer.load()
        before = synchronizer.expenses
        gets_before = server.get_count

        await synchronizer.append_local(_expense("new"))

        after = synchronizer.expenses
        assert len(after) == len(before) + 1
        assert after[:-1] == before
        assert after[-1].id == "new"
        assert server.get_count == gets_before

    @pytest.mark.asyncio
    async def test_no_deduplication(self, synchronizer):
        await synchronizer.append_local(_expense("dup"))
        await synchronizer.append_local(_expense("dup"))

        assert [e.id for e in synchronizer.expenses] == ["dup", "dup"]

    @pytest.mark.asyncio
    async def test_commands_are_journaled_in_order(self, synchronizer, cache, server):
        server.expenses = [make_expense("a")]
        await synchronizer.load()
        await synchronizer.append_local(_expense("b"))

        journal = cache.journal()
        assert [entry.kind for entry in journal] == ["replace", "append"]
        assert [entry.version for entry in journal] == [1, 2]
        assert journal[-1].size_after == 2


class TestRefreshSchedule:
    """Periodic revalidation."""

    @pytest.mark.asyncio
    async def test_start_loads_immediately(self, synchronizer, server):
        server.expenses = [make_expense("a")]

        await synchronizer.start()
        try:
            assert synchronizer.is_running
            assert [e.id for e in synchronizer.expenses] == ["a"]
        finally:
            await synchronizer.stop()

    @pytest.mark.asyncio
    async def test_start_records_initial_failure(self, synchronizer, server):
        server.list_status = 503

        await synchronizer.start()
        try:
            assert synchronizer.error is not None
        finally:
            await synchronizer.stop()

    @pytest.mark.asyncio
    async def test_reloads_every_interval_until_stopped(self, client, server):
        synchronizer = DataSynchronizer(client=client, refresh_interval_seconds=0.01)

        await synchronizer.start()
        await asyncio.sleep(0.1)
        await synchronizer.stop()

        gets_at_stop = server.get_count
        assert gets_at_stop >= 3
        assert not synchronizer.is_running

        await asyncio.sleep(0.05)
        assert server.get_count == gets_at_stop

    @pytest.mark.asyncio
    async def test_scheduled_failure_sets_persistent_error(self, client, server):
        server.expenses = [make_expense("a")]
        synchronizer = DataSynchronizer(client=client, refresh_interval_seconds=0.01)

        await synchronizer.start()
        try:
            assert synchronizer.error is None
            server.list_status = 500
            await wait_until(lambda: synchronizer.error is not None)

            assert synchronizer.error.status_code == 500
            assert [e.id for e in synchronizer.expenses] == ["a"]
            assert synchronizer.is_running
        finally:
            await synchronizer.stop()

    @pytest.mark.asyncio
    async def test_unexpected_tick_exception_is_contained(
        self, api_settings, server, audit_logger, audit_storage
    ):
        calls = []

        async def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) > 1:
                raise RuntimeError("connection pool exploded")
            return await server.handler(request)

        client = ExpenseApiClient(
            settings=api_settings,
            transport=httpx.MockTransport(handler),
        )
        synchronizer = DataSynchronizer(
            client=client,
            audit_logger=audit_logger,
            refresh_interval_seconds=0.01,
        )

        await synchronizer.start()
        await wait_until(lambda: len(calls) >= 3)
        assert synchronizer.is_running
        await synchronizer.stop()

        assert not synchronizer.is_running
        events = await audit_storage.get_recent_events(limit=1000)
        event_types = [e.event_type for e in events]
        assert AuditEventType.REFRESH_ERROR in event_types
        assert AuditEventType.REFRESH_STOPPED in event_types
        crash = next(e for e in events if e.event_type == AuditEventType.REFRESH_ERROR)
        assert crash.error_code == "RuntimeError"

    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_timer(self, synchronizer, server):
        await synchronizer.start()
        await synchronizer.start()
        try:
            assert server.get_count == 1
        finally:
            await synchronizer.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start_is_noop(self, synchronizer, audit_storage):
        await synchronizer.stop()

        events = await audit_storage.get_recent_events()
        assert events == []

    @pytest.mark.asyncio
    async def test_refresh_if_due_uses_interval(self, client, server):
        now = [1000.0]
        synchronizer = DataSynchronizer(
            client=client,
            refresh_interval_seconds=30,
            clock=lambda: now[0],
        )

        assert await synchronizer.refresh_if_due() is True
        now[0] += 10
        assert await synchronizer.refresh_if_due() is False
        now[0] += 20
        assert await synchronizer.refresh_if_due() is True
        assert server.get_count == 2

    @pytest.mark.asyncio
    async def test_refresh_if_due_does_not_retry_early(self, client, server):
        now = [0.0]
        server.list_status = 500
        synchronizer = DataSynchronizer(
            client=client,
            refresh_interval_seconds=30,
            clock=lambda: now[0],
        )

        await synchronizer.refresh_if_due()
        now[0] += 5
        await synchronizer.refresh_if_due()

        assert synchronizer.error is not None
        assert server.get_count == 1
