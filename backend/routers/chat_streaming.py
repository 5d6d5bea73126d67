"""
Chat Streaming - Relays orchestration events to the HTTP response

Events are encoded as newline-delimited JSON, one object per line.
The producer runs as its own task and hands events over through a queue,
so a client disconnect cancels the exchange instead of leaving it
running upstream.
"""

import asyncio
import contextlib
import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable

from .chat_orchestration.events import EventSink, StreamEvent

logger = logging.getLogger(__name__)

MEDIA_TYPE = "text/plain; charset=utf-8"

# Marks the end of the producer's events
_END = object()


def encode_event(event: StreamEvent) -> str:
    """Serialize one event as a single NDJSON line."""
    return json.dumps(event.to_dict(), ensure_ascii=False, default=str) + "\n"


async def relay_events(producer: Callable[[EventSink], Awaitable[Any]]) -> AsyncIterator[str]:
    """Run producer and yield its events as encoded lines, in emission order.

    Args:
        producer: Coroutine function receiving the emit callback

    If the consumer stops early (client disconnect), the producer task is
    cancelled and awaited, so the exchange has closed its session before
    this generator finishes. An event that cannot be encoded ends the
    stream with an error line.
    """
    queue: asyncio.Queue = asyncio.Queue()

    async def emit(event: StreamEvent) -> None:
        queue.put_nowait(event)

    async def run() -> None:
        try:
            await producer(emit)
        except Exception as e:
            logger.error(f"Chat producer failed: {e}", exc_info=True)
            queue.put_nowait(StreamEvent.error(str(e)))
        finally:
            queue.put_nowait(_END)

    task = asyncio.create_task(run())
    lines = 0
    try:
        while True:
            item = await queue.get()
            if item is _END:
                break
            try:
                line = encode_event(item)
            except (TypeError, ValueError) as e:
                logger.error(f"Could not encode {item.type.value} event: {e}")
                yield encode_event(StreamEvent.error(f"Could not encode {item.type.value} event"))
                break
            lines += 1
            yield line
    finally:
        if not task.done():
            logger.info(f"Stream closed after {lines} events, cancelling exchange")
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
