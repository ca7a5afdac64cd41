"""Lifecycle event dispatch.

Services that emit lifecycle events receive a LifecycleEventDispatcher
instance; handlers are registered per event from a closed set. Handler
failures are logged and reported per handler, never raised to the emitter.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

LifecycleHandler = Callable[[dict[str, Any]], Awaitable[None]]


class LifecycleEvent(str, Enum):
    """Events emitted by the tenant lifecycle services."""

    TENANT_PROVISIONED = "tenant.provisioned"
    TENANT_DELETED = "tenant.deleted"
    TENANT_DEACTIVATED = "tenant.deactivated"
    RECORD_SAVED = "record.saved"


@dataclass(frozen=True)
class HandlerOutcome:
    """Result of running one handler for one dispatch."""

    name: str
    success: bool
    error: str | None = None


class LifecycleEventDispatcher:
    """Registry of named async handlers per LifecycleEvent."""

    def __init__(self) -> None:
        self._handlers: dict[LifecycleEvent, dict[str, LifecycleHandler]] = {}

    def register(
        self, event: LifecycleEvent, name: str, handler: LifecycleHandler
    ) -> None:
        """Register handler under name; re-registering a name replaces it."""
        if not isinstance(event, LifecycleEvent):
            raise TypeError(f"Unknown lifecycle event: {event!r}")
        if not callable(handler):
            raise TypeError(f"Handler for {event.value} -> {name} must be callable")
        self._handlers.setdefault(event, {})[name] = handler
        logger.debug("Registered lifecycle handler %s -> %s", event.value, name)

    def unregister(self, event: LifecycleEvent, name: str) -> bool:
        """Remove a handler. Returns True if it was registered."""
        removed = self._handlers.get(event, {}).pop(name, None)
        return removed is not None

    def has_handlers(self, event: LifecycleEvent) -> bool:
        return bool(self._handlers.get(event))

    def handler_names(self, event: LifecycleEvent) -> list[str]:
        return list(self._handlers.get(event, {}))

    def clear(self) -> None:
        self._handlers.clear()

    async def dispatch(
        self, event: LifecycleEvent, payload: dict[str, Any]
    ) -> list[HandlerOutcome]:
        """Run all handlers for event concurrently and return one outcome per handler."""
        handlers = list(self._handlers.get(event, {}).items())
        if not handlers:
            return []

        async def _run(name: str, handler: LifecycleHandler) -> HandlerOutcome:
            try:
                await handler(payload)
            except Exception as e:
                logger.exception(
                    "Lifecycle handler %s -> %s failed", event.value, name
                )
                return HandlerOutcome(name=name, success=False, error=str(e))
            return HandlerOutcome(name=name, success=True)

        return list(await asyncio.gather(*(_run(n, h) for n, h in handlers)))
