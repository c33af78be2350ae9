"""Emitter used when nobody observes a provisioning run."""

from .base import BaseEmitter, EventHandler
from .models import BaseEvent


class NullEmitter(BaseEmitter):
    """Accepts subscriptions and events and drops them."""

    def on(self, event_type: str, handler: EventHandler) -> None:
        pass

    def off(self, event_type: str, handler: EventHandler) -> None:
        pass

    async def emit(self, event_type: str, event_data: BaseEvent) -> None:
        pass
