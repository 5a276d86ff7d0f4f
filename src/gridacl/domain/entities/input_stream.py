"""Open data stream read from a grid data object."""

from collections.abc import AsyncIterator, Awaitable, Callable


class GridInputStream:
    """Async byte stream over a data object.

    Closing the stream runs every registered close callback once, after the
    underlying transport has been closed. Sessions use this to stay open for
    as long as a stream they produced is being read.
    """

    def __init__(
        self,
        path: str,
        chunks: AsyncIterator[bytes],
        close: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self.path = path
        self._chunks = chunks
        self._close = close
        self._buffer = b""
        self._exhausted = False
        self._closed = False
        self._callbacks: list[Callable[[], Awaitable[None]]] = []

    @property
    def closed(self) -> bool:
        return self._closed

    def add_close_callback(self, callback: Callable[[], Awaitable[None]]) -> None:
        self._callbacks.append(callback)

    async def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes, or everything left when ``size`` is negative."""
        if self._closed:
            raise ValueError("I/O operation on closed stream")
        while not self._exhausted and (size < 0 or len(self._buffer) < size):
            try:
                self._buffer += await anext(self._chunks)
            except StopAsyncIteration:
                self._exhausted = True
        if size < 0:
            data, self._buffer = self._buffer, b""
        else:
            data, self._buffer = self._buffer[:size], self._buffer[size:]
        return data

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self.read(64 * 1024)
            if not chunk:
                return
            yield chunk

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self._close is not None:
                await self._close()
        finally:
            for callback in self._callbacks:
                await callback()

    async def __aenter__(self) -> "GridInputStream":
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.aclose()
