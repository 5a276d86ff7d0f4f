"""Grid session lifecycle - bounded connect retries and guaranteed release."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

from gridacl.application.ports import GridConnector, StorageGrid
from gridacl.config import Settings
from gridacl.domain.entities import GridInputStream
from gridacl.domain.exceptions import ConnectError
from gridacl.domain.value_objects import RequestContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, ConnectError) and exc.retryable


class GridSession:
    """One open grid connection, owned by a single operation."""

    def __init__(self, grid: StorageGrid, context: RequestContext) -> None:
        self._grid = grid
        self._context = context
        self._released = False

    @property
    def grid(self) -> StorageGrid:
        return self._grid

    @property
    def context(self) -> RequestContext:
        return self._context

    @property
    def released(self) -> bool:
        return self._released

    async def release(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        logger.debug("[%s] closing grid connection", self._context.correlation_id)
        await self._grid.close()

    async def run(
        self,
        fn: Callable[[StorageGrid], Awaitable[T]],
        auto_close: bool = True,
    ) -> T:
        """Evaluate ``fn`` against the grid and release the session afterwards.

        An open GridInputStream result keeps the session alive until the
        stream is closed. With ``auto_close=False`` any other result leaves
        the session open and the caller must release it. A failing ``fn``
        always releases the session before the error propagates.
        """
        cid = self._context.correlation_id
        try:
            result = await fn(self._grid)
        except BaseException:
            logger.debug("[%s] operation failed, closing grid connection", cid)
            try:
                await self.release()
            except Exception:
                logger.warning("[%s] could not close grid connection", cid, exc_info=True)
            raise

        if isinstance(result, GridInputStream) and not result.closed:
            logger.debug("[%s] returning an open stream, connection closes with it", cid)
            result.add_close_callback(self.release)
            return result
        if auto_close:
            await self.release()
        else:
            logger.debug("[%s] returning without closing the connection", cid)
        return result


class SessionFactory:
    """Opens grid sessions, retrying transient connect failures."""

    def __init__(
        self,
        connector: GridConnector,
        max_retries: int = 0,
        retry_sleep_ms: int = 0,
    ) -> None:
        self._connector = connector
        self._max_retries = max_retries
        self._retry_sleep_ms = retry_sleep_ms

    @classmethod
    def from_settings(cls, connector: GridConnector, settings: Settings) -> "SessionFactory":
        return cls(
            connector,
            max_retries=settings.max_retries,
            retry_sleep_ms=settings.retry_sleep_ms,
        )

    async def open(self, context: RequestContext) -> GridSession:
        """Connect, retrying up to ``max_retries`` times on transient errors."""
        cid = context.correlation_id

        def log_retry(state: RetryCallState) -> None:
            logger.debug(
                "[%s] transient connect failure (attempt %d): %s, retrying",
                cid,
                state.attempt_number,
                state.outcome.exception() if state.outcome else None,
            )

        retrying = AsyncRetrying(
            retry=retry_if_exception(_is_transient),
            stop=stop_after_attempt(self._max_retries + 1),
            wait=wait_fixed(self._retry_sleep_ms / 1000),
            before_sleep=log_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                grid = await self._connector.connect(context)
        logger.debug("[%s] grid connection opened", cid)
        return GridSession(grid, context)

    @asynccontextmanager
    async def session(self, context: RequestContext) -> AsyncIterator[GridSession]:
        """Open a session and release it on every exit path."""
        session = await self.open(context)
        try:
            yield session
        finally:
            await session.release()

    async def run(
        self,
        context: RequestContext,
        fn: Callable[[StorageGrid], Awaitable[T]],
        auto_close: bool = True,
    ) -> T:
        session = await self.open(context)
        return await session.run(fn, auto_close=auto_close)
