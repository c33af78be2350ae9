"""Emitter contract shared by every hoist component that reports progress."""

import typing as t
from abc import ABC, abstractmethod

from .models import BaseEvent

# Sync or async callable receiving one event model.
EventHandler = t.Callable[[BaseEvent], t.Any]


class BaseEmitter(ABC):
    """Sink for ``artifact.*`` and ``download.*`` events.

    Components take an emitter at construction and only ever call ``emit``;
    subscribing is left to whoever assembled them.
    """

    @abstractmethod
    def on(self, event_type: str, handler: EventHandler) -> None:
        """Register ``handler`` for events named ``event_type``."""
        pass

    @abstractmethod
    def off(self, event_type: str, handler: EventHandler) -> None:
        """Remove a handler registered with ``on``."""
        pass

    @abstractmethod
    async def emit(self, event_type: str, event_data: BaseEvent) -> None:
        """Deliver ``event_data`` to the handlers of ``event_type``."""
        pass
