"""
Database Worker (Single Writer)
===============================

Background asyncio task that owns the database connection and executes
storage requests one at a time, in the order they were submitted.

Lifecycle:
    1. ``start()`` is called once during application startup.
    2. Callers ``await submit(operation)``; the request goes onto a bounded
       queue. When the queue is full, ``submit`` waits for room.
    3. The worker opens a session per request, runs the operation,
       commits, and resolves the caller's future with the result.
    4. ``stop()`` enqueues a sentinel behind any pending requests, so
       everything already submitted is drained before the loop exits.

Errors:
    - A SQLAlchemy error rolls the request's transaction back and is
      delivered to the caller as ``StorageError``.
    - An ``AppException`` raised by the operation (e.g. ``NotFoundError``)
      also rolls back and reaches the caller unchanged.
    - There is no retry, timeout or priority.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from incubate.core.errors import AppException, StorageError, WorkerNotRunningError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[AsyncSession], Awaitable[T]]


@dataclass
class _Request:
    operation: Callable[[AsyncSession], Awaitable[Any]]
    future: asyncio.Future
    name: str


class DatabaseWorker:
    """Serial executor for every read and write against the journal database."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        maxsize: int = 64,
    ) -> None:
        self._session_factory = session_factory
        self._queue: asyncio.Queue[Optional[_Request]] = asyncio.Queue(maxsize=maxsize)
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def pending(self) -> int:
        """Requests waiting in the queue (not counting the one in progress)."""
        return self._queue.qsize()

    # -- lifecycle ---------------------------------------------------------

    async def start(self) -> None:
        """Start the processing loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._process_loop(), name="incubate-db-worker")
        logger.info("DatabaseWorker started")

    async def stop(self) -> None:
        """Drain pending requests, then stop the loop."""
        if not self._running:
            return
        self._running = False
        await self._queue.put(None)
        if self._task is not None:
            try:
                await asyncio.wait_for(self._task, timeout=10)
            except asyncio.TimeoutError:
                logger.warning("DatabaseWorker did not stop in time; cancelling")
                self._task.cancel()
            self._task = None
        logger.info("DatabaseWorker stopped")

    # -- submission --------------------------------------------------------

    async def submit(self, operation: Operation[T], name: str = "request") -> T:
        """
        Queue ``operation`` and wait for its result.

        Raises:
            WorkerNotRunningError: If the worker isn't running
            StorageError: If the operation failed in the database
        """
        if not self._running:
            raise WorkerNotRunningError(operation=name)

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        await self._queue.put(_Request(operation=operation, future=future, name=name))
        return await future

    # -- main loop ---------------------------------------------------------

    async def _process_loop(self) -> None:
        while True:
            request = await self._queue.get()
            try:
                if request is None:
                    break
                await self._handle_request(request)
            finally:
                self._queue.task_done()

    async def _handle_request(self, request: _Request) -> None:
        """Run one request in its own transaction and resolve its future."""
        if request.future.cancelled():
            return

        async with self._session_factory() as session:
            try:
                result = await request.operation(session)
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.error("Storage request '%s' failed: %s", request.name, exc)
                error = StorageError(operation=request.name)
                error.__cause__ = exc
                self._fail(request, error)
                return
            except AppException as exc:
                await session.rollback()
                logger.warning("Storage request '%s' rejected: %s", request.name, exc)
                self._fail(request, exc)
                return
            except Exception as exc:
                await session.rollback()
                logger.exception("Storage request '%s' raised", request.name)
                self._fail(request, exc)
                return

        if not request.future.done():
            request.future.set_result(result)

    @staticmethod
    def _fail(request: _Request, exc: BaseException) -> None:
        if not request.future.done():
            request.future.set_exception(exc)
