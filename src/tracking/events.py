"""Outbound event delivery from the tracker to the host application.

Subscribers register per event type. A subscriber that raises is logged and
skipped so one faulty listener never breaks a tracking tick.
"""

from collections import defaultdict
from typing import Callable, DefaultDict, List, Type

from pydantic import BaseModel

from src.utils.logger import logger

Listener = Callable[[BaseModel], None]


class EventEmitter:
    """Synchronous publish/subscribe keyed by event class."""

    def __init__(self) -> None:
        self._listeners: DefaultDict[Type[BaseModel], List[Listener]] = defaultdict(list)

    def subscribe(self, event_type: Type[BaseModel], listener: Listener) -> Listener:
        """Register listener for event_type. Returns the listener (usable as a decorator)."""
        self._listeners[event_type].append(listener)
        return listener

    def unsubscribe(self, event_type: Type[BaseModel], listener: Listener) -> bool:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)
            return True
        return False

    def emit(self, event: BaseModel) -> None:
        """Deliver event to every listener of its exact type, in subscription order."""
        for listener in list(self._listeners.get(type(event), [])):
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"Listener {getattr(listener, '__name__', listener)!r} failed on {type(event).__name__}: {e}")
