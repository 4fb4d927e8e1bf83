"""
Data Synchronizer

Keeps the client-side expense cache in step with the server.

Two writers share one cache:
1. load()         - full replace from GET, on mount and on a fixed timer
2. append_local() - optimistic append after a successful create

DESIGN DECISION: Both writers go through cache commands applied in the
order they resolve. There is no merge and no reconciliation; the last
writer wins and the next scheduled load() restores the server's view.

A failed load records a persistent error that blocks the whole view.
It is not retried early: only the next scheduled tick loads again,
and a successful load clears the error.
"""

import asyncio
import time
from typing import Callable, Optional

import structlog
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from src.audit import AuditLogger
from src.config import get_settings
from src.models.cache import AppendExpense, ReplaceExpenses
from src.models.expense import Expense
from src.services.api import ExpenseApiClient, FetchError
from src.services.storage import ExpenseCacheInterface, InMemoryExpenseCache


logger = structlog.get_logger(__name__)

REFRESH_JOB_ID = "expense-list-refresh"


class DataSynchronizer:
    """
    Owns the cached expense list and its refresh schedule.

    The APScheduler interval job is the only scheduled resource; stop()
    must be called when the view goes away.
    """

    def __init__(
        self,
        client: ExpenseApiClient,
        cache: Optional[ExpenseCacheInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        refresh_interval_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client = client
        self._cache = cache if cache is not None else InMemoryExpenseCache()
        self._audit_logger = audit_logger
        self._interval = (
            refresh_interval_seconds
            if refresh_interval_seconds is not None
            else get_settings().sync.refresh_interval_seconds
        )
        self._clock = clock

        self._error: Optional[FetchError] = None
        self._last_attempt_at: Optional[float] = None
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._job_task: Optional[asyncio.Task] = None

    @property
    def cache(self) -> ExpenseCacheInterface:
        return self._cache

    @property
    def expenses(self) -> list[Expense]:
        return self._cache.snapshot()

    @property
    def error(self) -> Optional[FetchError]:
        """The last load failure, until a later load succeeds."""
        return self._error

    @property
    def refresh_interval_seconds(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def load(self) -> list[Expense]:
        """
        Fetch the full list and replace the cache with it.

        Raises:
            FetchError: the cache is left untouched and the error is
                        recorded as the view's blocking error
        """
        self._last_attempt_at = self._clock()

        try:
            expenses = await self._client.list_expenses()
        except FetchError as e:
            self._error = e
            if self._audit_logger:
                await self._audit_logger.log_load_failed(
                    error_message=str(e),
                    status_code=e.status_code,
                )
            raise

        version = self._cache.apply(ReplaceExpenses(expenses=tuple(expenses)))
        self._error = None

        if self._audit_logger:
            await self._audit_logger.log_expenses_loaded(
                count=len(expenses),
                version=version,
            )

        return self._cache.snapshot()

    async def append_local(self, expense: Expense) -> int:
        """
        Append a record to the end of the cache without refetching.

        Returns the cache version after the append.
        """
        version = self._cache.apply(AppendExpense(expense=expense))

        if self._audit_logger:
            await self._audit_logger.log_optimistic_append(
                expense_id=expense.id,
                version=version,
            )

        return version

    async def refresh_if_due(self) -> bool:
        """
        Load if nothing was loaded yet or the last attempt is one interval old.

        For hosts that re-run the page instead of keeping a loop alive.
        Returns True if a load was attempted.
        """
        if self._last_attempt_at is not None:
            elapsed = self._clock() - self._last_attempt_at
            if elapsed < self._interval:
                return False

        try:
            await self.load()
        except FetchError:
            # Recorded in self.error; the view renders it
            pass
        return True

    async def start(self) -> None:
        """
        Load once, then keep reloading every interval until stop().

        Calling start() while already running does nothing.
        """
        if self.is_running:
            return

        if self._audit_logger:
            await self._audit_logger.log_refresh_started(self._interval)

        try:
            await self.load()
        except FetchError:
            pass

        scheduler = AsyncIOScheduler(
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": max(1, int(self._interval)),
            },
        )
        scheduler.add_listener(self._on_job_event, EVENT_JOB_ERROR | EVENT_JOB_MISSED)
        scheduler.add_job(
            self._scheduled_load,
            trigger=IntervalTrigger(seconds=self._interval),
            id=REFRESH_JOB_ID,
            name="expense list refresh",
        )
        scheduler.start()
        self._scheduler = scheduler

    async def stop(self) -> None:
        """Shut down the refresh schedule. Safe to call when not started."""
        scheduler, self._scheduler = self._scheduler, None
        if scheduler is None:
            return

        scheduler.shutdown(wait=False)

        # A scheduled load still in flight is cancelled with the schedule
        job_task, self._job_task = self._job_task, None
        if job_task is not None and not job_task.done():
            job_task.cancel()
            await asyncio.wait({job_task})

        if self._audit_logger:
            await self._audit_logger.log_refresh_stopped()

    async def _scheduled_load(self) -> None:
        """Body of the interval job. Never raises."""
        if self._scheduler is None:
            return
        self._job_task = asyncio.current_task()

        try:
            await self.load()
        except FetchError:
            # Recorded in self.error; the view renders it
            pass
        except Exception as e:
            logger.error("scheduled_refresh_failed", job_id=REFRESH_JOB_ID, error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_refresh_error(
                    error_message=str(e),
                    error_type=type(e).__name__,
                )
        finally:
            self._job_task = None

    @staticmethod
    def _on_job_event(event) -> None:
        """Log APScheduler job events for diagnostics."""
        job_id = getattr(event, "job_id", "?")
        if event.code == EVENT_JOB_ERROR:
            logger.error("refresh_job_error", job_id=job_id, error=str(getattr(event, "exception", "")))
        elif event.code == EVENT_JOB_MISSED:
            logger.warning("refresh_job_missed", job_id=job_id)
