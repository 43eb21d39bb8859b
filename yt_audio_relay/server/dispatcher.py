"""Queue hand-off between the webhook route and per-update tasks.

WHY: Telegram retries a webhook call that does not answer quickly, and
the provider can take many seconds. The route must acknowledge at once
and let the real work happen afterwards, without a failure there ever
reaching the response that was already sent.

HOW: submit() puts the raw update on an asyncio.Queue and returns. A
consumer task, started from the FastAPI lifespan, takes updates off the
queue and spawns one asyncio.Task per update. Each task wraps the
handler in a catch-all that logs and swallows the error.

RULES:
- submit() never blocks and never runs the handler inline
- Updates are processed independently and may run in parallel
- No ordering between updates, no shared mutable state, no backpressure
- A handler exception ends that update only
- stop() waits up to grace_seconds for in-flight tasks, then cancels them
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set

logger = logging.getLogger(__name__)

UpdateHandler = Callable[[Dict[str, Any]], Awaitable[None]]

DEFAULT_GRACE_SECONDS = 10.0


class UpdateDispatcher:
    """Runs ``handler`` once per submitted update, in its own task."""

    def __init__(self, handler: UpdateHandler) -> None:
        self._handler = handler
        self._queue: Optional[asyncio.Queue] = None
        self._consumer: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    @property
    def in_flight(self) -> int:
        """Number of update tasks not yet finished."""
        return len(self._tasks)

    def start(self) -> None:
        """Start the consumer task. Must be called from a running event loop."""
        if self.running:
            return
        self._queue = asyncio.Queue()
        self._consumer = asyncio.create_task(self._consume(), name="update-dispatcher")
        logger.info("Update dispatcher started")

    def submit(self, update: Dict[str, Any]) -> None:
        """Queue ``update`` for background processing."""
        if self._queue is None or not self.running:
            raise RuntimeError("UpdateDispatcher.submit() called before start()")
        self._queue.put_nowait(update)

    async def stop(self, grace_seconds: float = DEFAULT_GRACE_SECONDS) -> None:
        """Stop consuming and let in-flight updates finish.

        Updates still waiting in the queue are handed to tasks first, so an
        update acknowledged just before shutdown still gets its chance.
        """
        if self._consumer is not None:
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass
            self._consumer = None

        if self._queue is not None:
            while not self._queue.empty():
                self._spawn(self._queue.get_nowait())
            self._queue = None

        if not self._tasks:
            return

        _done, pending = await asyncio.wait(set(self._tasks), timeout=grace_seconds)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning("Cancelled %d update task(s) still running at shutdown", len(pending))
            await asyncio.gather(*pending, return_exceptions=True)

    async def _consume(self) -> None:
        assert self._queue is not None
        while True:
            update = await self._queue.get()
            self._spawn(update)
            self._queue.task_done()

    def _spawn(self, update: Dict[str, Any]) -> None:
        task = asyncio.create_task(self._run(update))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, update: Dict[str, Any]) -> None:
        try:
            await self._handler(update)
        except Exception:
            logger.exception("Update %s failed", update.get("update_id", "?"))
