"""Unit tests for the callback system."""

from __future__ import annotations

import pytest

from patternplay.tracking.callbacks import (
    CallbackContext,
    CallbackEvent,
    CallbackManager,
)


class TestCallbackManager:
    """Tests for CallbackManager."""

    @pytest.mark.asyncio
    async def test_register_and_emit(self) -> None:
        """Should call a registered callback with the context."""
        manager = CallbackManager()
        received: list[CallbackContext] = []

        manager.register(CallbackEvent.NODE_START, received.append)
        await manager.emit(CallbackEvent.NODE_START, node_id="llm1", timestamp=1.5, visit=1)

        assert len(received) == 1
        assert received[0].event == CallbackEvent.NODE_START
        assert received[0].node_id == "llm1"
        assert received[0].timestamp == 1.5
        assert received[0].data == {"visit": 1}

    @pytest.mark.asyncio
    async def test_only_matching_event(self) -> None:
        """Should not call callbacks registered for other events."""
        manager = CallbackManager()
        received: list[CallbackContext] = []

        manager.register(CallbackEvent.NODE_COMPLETE, received.append)
        await manager.emit(CallbackEvent.NODE_START, node_id="llm1")

        assert received == []

    @pytest.mark.asyncio
    async def test_async_callback(self) -> None:
        """Should await async callbacks."""
        manager = CallbackManager()
        received: list[str] = []

        async def on_end(ctx: CallbackContext) -> None:
            received.append(ctx.data["output"])

        manager.register(CallbackEvent.RUN_END, on_end)
        await manager.emit(CallbackEvent.RUN_END, output="done")

        assert received == ["done"]

    @pytest.mark.asyncio
    async def test_global_callbacks_first(self) -> None:
        """Global callbacks run before event callbacks, each in registration order."""
        manager = CallbackManager()
        order: list[str] = []

        manager.register(CallbackEvent.RUN_START, lambda ctx: order.append("event"))
        manager.register_global(lambda ctx: order.append("global-1"))
        manager.register_global(lambda ctx: order.append("global-2"))
        await manager.emit(CallbackEvent.RUN_START)

        assert order == ["global-1", "global-2", "event"]

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_propagate(self) -> None:
        """A broken observer should not stop later observers."""
        manager = CallbackManager()
        received: list[CallbackContext] = []

        def broken(ctx: CallbackContext) -> None:
            raise RuntimeError("observer bug")

        manager.register(CallbackEvent.NODE_FAILED, broken)
        manager.register(CallbackEvent.NODE_FAILED, received.append)
        await manager.emit(CallbackEvent.NODE_FAILED, node_id="router")

        assert len(received) == 1

    def test_emit_sync_skips_async(self) -> None:
        """emit_sync() only calls sync callbacks."""
        manager = CallbackManager()
        received: list[str] = []

        async def async_cb(ctx: CallbackContext) -> None:
            received.append("async")

        manager.register(CallbackEvent.RUN_RESET, async_cb)
        manager.register(CallbackEvent.RUN_RESET, lambda ctx: received.append("sync"))
        manager.emit_sync(CallbackEvent.RUN_RESET)

        assert received == ["sync"]

    def test_unregister(self) -> None:
        """Should remove callbacks and report whether they existed."""
        manager = CallbackManager()

        def cb(ctx: CallbackContext) -> None:
            pass

        manager.register(CallbackEvent.RUN_END, cb)
        manager.register_global(cb)
        assert manager.callback_count == 2

        assert manager.unregister(CallbackEvent.RUN_END, cb) is True
        assert manager.unregister(CallbackEvent.RUN_END, cb) is False
        assert manager.unregister_global(cb) is True
        assert manager.unregister_global(cb) is False
        assert manager.callback_count == 0

    def test_clear(self) -> None:
        """clear() removes one event or everything."""
        manager = CallbackManager()
        manager.register(CallbackEvent.RUN_START, lambda ctx: None)
        manager.register(CallbackEvent.RUN_END, lambda ctx: None)
        manager.register_global(lambda ctx: None)

        manager.clear(CallbackEvent.RUN_START)
        assert manager.callback_count == 2

        manager.clear()
        assert manager.callback_count == 0
