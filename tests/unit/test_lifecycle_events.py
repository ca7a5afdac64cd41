"""Tests for LifecycleEventDispatcher (registration, concurrent dispatch, error isolation)."""

import asyncio

import pytest

from app.domain.events import HandlerOutcome, LifecycleEvent, LifecycleEventDispatcher


async def test_dispatch_without_handlers_returns_empty() -> None:
    dispatcher = LifecycleEventDispatcher()
    assert await dispatcher.dispatch(LifecycleEvent.TENANT_DELETED, {}) == []


async def test_dispatch_passes_payload_to_every_handler() -> None:
    dispatcher = LifecycleEventDispatcher()
    seen: list[tuple[str, dict]] = []

    async def first(payload: dict) -> None:
        seen.append(("first", payload))

    async def second(payload: dict) -> None:
        seen.append(("second", payload))

    dispatcher.register(LifecycleEvent.TENANT_PROVISIONED, "first", first)
    dispatcher.register(LifecycleEvent.TENANT_PROVISIONED, "second", second)
    outcomes = await dispatcher.dispatch(
        LifecycleEvent.TENANT_PROVISIONED, {"tenant_id": "t1"}
    )

    assert outcomes == [HandlerOutcome("first", True), HandlerOutcome("second", True)]
    assert sorted(name for name, _ in seen) == ["first", "second"]
    assert all(payload == {"tenant_id": "t1"} for _, payload in seen)


async def test_handlers_run_concurrently() -> None:
    """A slow handler does not delay the start of the others."""
    dispatcher = LifecycleEventDispatcher()
    started = asyncio.Event()

    async def waits_for_other(payload: dict) -> None:
        await asyncio.wait_for(started.wait(), timeout=1)

    async def signals(payload: dict) -> None:
        started.set()

    dispatcher.register(LifecycleEvent.RECORD_SAVED, "waits", waits_for_other)
    dispatcher.register(LifecycleEvent.RECORD_SAVED, "signals", signals)
    outcomes = await dispatcher.dispatch(LifecycleEvent.RECORD_SAVED, {})
    assert all(o.success for o in outcomes)


async def test_failing_handler_is_reported_not_raised() -> None:
    dispatcher = LifecycleEventDispatcher()
    calls: list[str] = []

    async def broken(payload: dict) -> None:
        raise RuntimeError("webhook down")

    async def healthy(payload: dict) -> None:
        calls.append("healthy")

    dispatcher.register(LifecycleEvent.TENANT_DELETED, "broken", broken)
    dispatcher.register(LifecycleEvent.TENANT_DELETED, "healthy", healthy)
    outcomes = await dispatcher.dispatch(LifecycleEvent.TENANT_DELETED, {})

    by_name = {o.name: o for o in outcomes}
    assert by_name["broken"].success is False
    assert by_name["broken"].error == "webhook down"
    assert by_name["healthy"].success is True
    assert calls == ["healthy"]


async def test_register_same_name_replaces_handler() -> None:
    dispatcher = LifecycleEventDispatcher()
    calls: list[str] = []

    async def old(payload: dict) -> None:
        calls.append("old")

    async def new(payload: dict) -> None:
        calls.append("new")

    dispatcher.register(LifecycleEvent.TENANT_DEACTIVATED, "audit", old)
    dispatcher.register(LifecycleEvent.TENANT_DEACTIVATED, "audit", new)
    await dispatcher.dispatch(LifecycleEvent.TENANT_DEACTIVATED, {})
    assert calls == ["new"]
    assert dispatcher.handler_names(LifecycleEvent.TENANT_DEACTIVATED) == ["audit"]


def test_unregister_and_clear() -> None:
    dispatcher = LifecycleEventDispatcher()

    async def handler(payload: dict) -> None:
        return None

    dispatcher.register(LifecycleEvent.TENANT_DELETED, "h", handler)
    assert dispatcher.has_handlers(LifecycleEvent.TENANT_DELETED)
    assert dispatcher.unregister(LifecycleEvent.TENANT_DELETED, "h") is True
    assert dispatcher.unregister(LifecycleEvent.TENANT_DELETED, "h") is False
    assert not dispatcher.has_handlers(LifecycleEvent.TENANT_DELETED)

    dispatcher.register(LifecycleEvent.RECORD_SAVED, "h", handler)
    dispatcher.clear()
    assert not dispatcher.has_handlers(LifecycleEvent.RECORD_SAVED)


def test_register_rejects_unknown_event_and_non_callable() -> None:
    dispatcher = LifecycleEventDispatcher()

    async def handler(payload: dict) -> None:
        return None

    with pytest.raises(TypeError):
        dispatcher.register("tenant.exploded", "h", handler)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        dispatcher.register(LifecycleEvent.TENANT_DELETED, "h", None)  # type: ignore[arg-type]
