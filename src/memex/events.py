"""EventBus and change notifications for keeping the index current."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class ChangeType(Enum):
    """Kinds of event-store mutations the index listens for."""

    EVENT_RECORDED = "event_recorded"
    EVENT_UPDATED = "event_updated"


@dataclass(frozen=True, slots=True)
class EventChange:
    """Immutable record of an event-store mutation.

    Attributes:
        change_type: The kind of mutation that occurred.
        event_id: Id of the affected event.
        source: Component that made the change (importer name, ``"telegram"``, ...).
    """

    change_type: ChangeType
    event_id: str
    source: str | None = None


class EventBus:
    """Dispatches change notifications to registered handlers.

    Handlers are called sequentially in registration order.
    Exceptions are logged but never propagated; a failing handler
    leaves the index stale, it does not fail the write that emitted it.
    """

    def __init__(self) -> None:
        self._handlers: dict[ChangeType, list[Callable[..., Any]]] = {ct: [] for ct in ChangeType}

    def register(self, change_type: ChangeType, handler: Callable[..., Any]) -> None:
        """Append *handler* to the list for *change_type*."""
        self._handlers[change_type].append(handler)

    def unregister(self, change_type: ChangeType, handler: Callable[..., Any]) -> bool:
        """Remove first occurrence of *handler*. Return True if found."""
        handlers = self._handlers[change_type]
        try:
            handlers.remove(handler)
            return True
        except ValueError:
            return False

    async def emit(self, change: EventChange) -> None:
        """Dispatch *change* to all registered handlers for its type."""
        for handler in self._handlers[change.change_type]:
            try:
                await handler(change)
            except Exception:
                logger.warning(
                    "Handler %r failed for %s on %s",
                    handler,
                    change.change_type.value,
                    change.event_id,
                    exc_info=True,
                )

    @property
    def handler_count(self) -> int:
        """Total number of registered handlers across all change types."""
        return sum(len(h) for h in self._handlers.values())

    def clear(self) -> None:
        """Remove all registered handlers."""
        for handlers in self._handlers.values():
            handlers.clear()
