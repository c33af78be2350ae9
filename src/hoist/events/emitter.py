"""In-process event emitter fanning out to sync and async handlers."""

import inspect
import typing as t
from collections import defaultdict

from ..infrastructure.logging import get_logger
from .base import BaseEmitter, EventHandler
from .models import BaseEvent

if t.TYPE_CHECKING:
    import loguru


class EventEmitter(BaseEmitter):
    """Structured event sink handed to components at construction.

    Handlers run in subscription order. A failing handler is logged and never
    prevents the remaining handlers from running, so observers cannot break
    the pipeline they observe. Several sinks are composed by subscribing
    several handlers.
    """

    def __init__(self, logger: "loguru.Logger | None" = None) -> None:
        self._logger = logger or get_logger(__name__)
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def on(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def off(self, event_type: str, handler: EventHandler) -> None:
        try:
            self._handlers[event_type].remove(handler)
        except ValueError:
            self._logger.warning(f"Handler {handler} not found for event {event_type}")

    async def emit(self, event_type: str, event_data: BaseEvent) -> None:
        for handler in list(self._handlers.get(event_type, ())):
            if inspect.iscoroutinefunction(handler):
                try:
                    await handler(event_data)
                except Exception as exc:
                    self._logger.opt(exception=exc).error(
                        f"Async handler {handler} failed for event {event_type}"
                    )
                continue
            try:
                result = handler(event_data)
            except Exception:
                self._logger.exception(
                    f"Handler {handler} failed for event {event_type}"
                )
                continue
            if inspect.isawaitable(result):
                try:
                    await result
                except Exception as exc:
                    self._logger.opt(exception=exc).error(
                        f"Async handler {handler} failed for event {event_type}"
                    )
