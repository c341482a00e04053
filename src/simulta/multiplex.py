"""Fan-in of independent async streams.

One worker task per source forwards items into a shared memory object
stream as soon as they are ready. A completion counter closes the shared
stream once every source is exhausted, which ends iteration for the
consumer.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import TypeVar

import anyio
from anyio.abc import ObjectReceiveStream, ObjectSendStream

__all__ = ["merge"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _FanIn:
    """Shared send side plus the number of sources still running."""

    def __init__(self, send: ObjectSendStream, sources: int) -> None:
        self._send = send
        self._remaining = sources

    async def forward(self, index: int, source: AsyncIterable[T]) -> None:
        try:
            async for item in source:
                await self._send.send(item)
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            logger.debug(f"Merged stream closed early, dropping source {index}")
        finally:
            await self._finish()

    async def _finish(self) -> None:
        self._remaining -= 1
        if self._remaining <= 0:
            await self._send.aclose()


@asynccontextmanager
async def merge(
    sources: Sequence[AsyncIterable[T]],
    max_buffer_size: float = 0,
) -> AsyncIterator[ObjectReceiveStream[T]]:
    """Merge ``sources`` into one stream.

    Order is preserved within a source; across sources items arrive in
    whatever order they become ready. The merged stream ends once every
    source has ended.

    Example:
        async with merge([a, b, c]) as merged:
            async for item in merged:
                sink.write(item)

    Args:
        sources: Streams to read concurrently
        max_buffer_size: Items buffered between workers and the consumer;
            0 makes every worker wait for the consumer

    Yields:
        Receive stream of merged items
    """
    send, receive = anyio.create_memory_object_stream(max_buffer_size)
    fan_in = _FanIn(send, len(sources))

    async with anyio.create_task_group() as tg:
        if not sources:
            await send.aclose()
        for index, source in enumerate(sources):
            tg.start_soon(fan_in.forward, index, source, name=f"merge-source-{index}")

        async with receive:
            yield receive

        # No-op after a full drain; stops workers if the consumer left early
        tg.cancel_scope.cancel()
