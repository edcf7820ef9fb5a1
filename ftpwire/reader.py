import asyncio
import contextlib
import inspect
import logging
from enum import Enum
from typing import Any, Optional

from .config import Polling
from .errors import ConnectionClosed, ReadError, TransportError

logger = logging.getLogger(__name__)


class Status(Enum):
    WAITING = "Waiting for data"
    DONE = "Action completed successfully"


class Reader:
    """
    Background reader for one live connection.

    A single asyncio task keeps pulling bytes off the stream into a buffer
    for as long as the connection lives, so callers never block on the
    socket themselves. They pull the buffer with bounded waits instead:
    :meth:`get` for replies, :meth:`block` when a transfer is running and the
    reply may take a while, :meth:`peek` to look without consuming.

    Any read failure, including a clean end of stream, stops the task for
    good and is kept in ``error``. A reader can't be restarted; every new
    connection gets its own.

    Args:
        stream: Anything with ``async read(count)`` (aioftp stream wrappers)
        polling: Wait policy for retrievals
        size: Bytes requested per read
    """

    def __init__(self, stream: Any, polling: Optional[Polling] = None, size: int = 1024) -> None:
        self.stream = stream
        self.polling: Polling = polling or Polling()
        self.size: int = size

        self.buffer = bytearray()
        self.status: Status = Status.DONE
        self.available: bool = True
        self.error: Optional[TransportError] = None
        self.sink: Any = None

        self.arrived = asyncio.Event()
        self.task: Optional[asyncio.Task] = None

    def start(self) -> "Reader":
        """Launch the background read task. Must be called from a running loop."""
        if self.task is None and self.available:
            self.task = asyncio.ensure_future(self.listen())
        return self

    @property
    def active(self) -> bool:
        return self.available and self.task is not None and not self.task.done()

    def redirect(self, sink: Any) -> None:
        """Send every byte read from now on to ``sink`` instead of the buffer.

        The sink needs a ``write(data)`` method; if it returns an awaitable
        (async writers), it is awaited. Once redirected, buffered retrieval
        returns nothing: the bytes belong to the sink.

        Raises:
            RuntimeError: If the read task is already running
        """
        if self.task is not None:
            raise RuntimeError("Redirect a reader before starting it")
        self.sink = sink

    async def listen(self) -> None:
        self.status = Status.WAITING
        while self.available:
            try:
                data = await self.stream.read(self.size)
            except (OSError, EOFError, asyncio.IncompleteReadError, asyncio.TimeoutError) as error:
                self.stop(ReadError(str(error) or type(error).__name__))
                break

            if not data:
                self.stop(ConnectionClosed("End of stream"))
                break

            if self.sink is not None:
                try:
                    result = self.sink.write(data)
                    if inspect.isawaitable(result):
                        await result
                except OSError as error:
                    self.stop(ReadError(f"Sink write failed: {error}"))
                    break
            else:
                self.buffer.extend(data)

            self.arrived.set()

        self.status = Status.DONE

    def stop(self, error: Optional[TransportError] = None) -> None:
        """Stop reading as soon as possible; the reader never resumes."""
        if error is not None and self.error is None:
            logger.debug("Reader stopped: %s", error)
            self.error = error
        self.available = False
        self.arrived.set()

    async def get(self) -> bytes:
        return await self.collect(self.polling.attempts, flush=True)

    async def block(self) -> bytes:
        return await self.collect(self.polling.block, flush=True)

    async def peek(self) -> bytes:
        return await self.collect(self.polling.attempts, flush=False)

    def now(self) -> bytes:
        """Return and clear the buffer without waiting at all."""
        data, self.buffer = bytes(self.buffer), bytearray()
        return data

    async def collect(self, attempts: int, flush: bool) -> bytes:
        """
        Wait for data with a bounded number of waits, then hand the buffer over.

        Each wait ends early when the read task signals new bytes. Waiting
        stops once a settle window passes with nothing new after data arrived,
        once the attempts run out, or once the reader has stopped for good.

        Args:
            attempts: Number of waits allowed
            flush: Clear the buffer after copying it

        Returns:
            bytes: Buffered data, empty when nothing arrived or the reader is redirected
        """
        # Settle as soon as anything arrived, even bytes handed to a sink
        settling = False
        for _ in range(attempts):
            if not self.available:
                break

            settling = settling or bool(self.buffer)
            timeout = self.polling.settle if settling else self.polling.wait

            self.arrived.clear()
            try:
                await asyncio.wait_for(self.arrived.wait(), timeout)
            except asyncio.TimeoutError:
                if settling or self.buffer:
                    break
                continue
            settling = True

        data = bytes(self.buffer)
        if flush:
            self.buffer = bytearray()
        return data

    async def close(self) -> None:
        """Stop the read task and close the stream."""
        self.stop()
        if self.task is not None and not self.task.done():
            self.task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self.task
        self.stream.close()
