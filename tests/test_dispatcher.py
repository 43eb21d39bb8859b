"""Tests for the background update dispatcher.

WHY: The dispatcher is what lets the webhook acknowledge before any work
happens. It has to run every submitted update, keep one failing update
from affecting the others, and finish queued work on shutdown.

HOW: Each test runs a small coroutine with asyncio.run(), starting and
stopping a real UpdateDispatcher around an AsyncMock or a hand-written
handler.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from yt_audio_relay.server.dispatcher import UpdateDispatcher


class TestUpdateDispatcher:
    """Lifecycle, isolation and draining."""

    def test_submitted_updates_reach_handler(self):
        handler = AsyncMock()

        async def scenario():
            dispatcher = UpdateDispatcher(handler)
            dispatcher.start()
            dispatcher.submit({"update_id": 1})
            dispatcher.submit({"update_id": 2})
            await dispatcher.stop()

        asyncio.run(scenario())

        handled = sorted(call.args[0]["update_id"] for call in handler.await_args_list)
        assert handled == [1, 2]

    def test_submit_does_not_run_handler_inline(self):
        handler = AsyncMock()

        async def scenario():
            dispatcher = UpdateDispatcher(handler)
            dispatcher.start()
            dispatcher.submit({"update_id": 1})
            awaited_before_yield = handler.await_count
            await dispatcher.stop()
            return awaited_before_yield

        assert asyncio.run(scenario()) == 0
        handler.assert_awaited_once()

    def test_failing_update_does_not_affect_others(self):
        seen = []

        async def handler(update):
            if update["update_id"] == 1:
                raise ValueError("bad update")
            seen.append(update["update_id"])

        async def scenario():
            dispatcher = UpdateDispatcher(handler)
            dispatcher.start()
            for update_id in (1, 2, 3):
                dispatcher.submit({"update_id": update_id})
            await asyncio.sleep(0.05)
            still_running = dispatcher.running
            await dispatcher.stop()
            return still_running

        assert asyncio.run(scenario()) is True
        assert sorted(seen) == [2, 3]

    def test_updates_run_concurrently(self):
        started = []

        async def scenario():
            gate = asyncio.Event()

            async def handler(update):
                started.append(update["update_id"])
                await gate.wait()

            dispatcher = UpdateDispatcher(handler)
            dispatcher.start()
            dispatcher.submit({"update_id": 1})
            dispatcher.submit({"update_id": 2})
            await asyncio.sleep(0.05)
            in_flight = dispatcher.in_flight
            gate.set()
            await dispatcher.stop()
            return in_flight

        assert asyncio.run(scenario()) == 2
        assert sorted(started) == [1, 2]

    def test_submit_before_start_raises(self):
        dispatcher = UpdateDispatcher(AsyncMock())
        with pytest.raises(RuntimeError, match="before start"):
            dispatcher.submit({"update_id": 1})

    def test_submit_after_stop_raises(self):
        async def scenario():
            dispatcher = UpdateDispatcher(AsyncMock())
            dispatcher.start()
            await dispatcher.stop()
            dispatcher.submit({"update_id": 1})

        with pytest.raises(RuntimeError):
            asyncio.run(scenario())

    def test_stop_cancels_after_grace_period(self):
        cancelled = []

        async def slow_handler(update):
            try:
                await asyncio.sleep(30)
            except asyncio.CancelledError:
                cancelled.append(update["update_id"])
                raise

        async def scenario():
            dispatcher = UpdateDispatcher(slow_handler)
            dispatcher.start()
            dispatcher.submit({"update_id": 7})
            await asyncio.sleep(0.01)
            await dispatcher.stop(grace_seconds=0.05)
            return dispatcher.in_flight

        assert asyncio.run(scenario()) == 0
        assert cancelled == [7]

    def test_stop_without_start(self):
        asyncio.run(UpdateDispatcher(AsyncMock()).stop())

    def test_start_is_idempotent(self):
        async def scenario():
            dispatcher = UpdateDispatcher(AsyncMock())
            dispatcher.start()
            consumer = dispatcher._consumer
            dispatcher.start()
            same = dispatcher._consumer is consumer
            await dispatcher.stop()
            return same

        assert asyncio.run(scenario()) is True
