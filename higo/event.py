"""A small topic-based event bus whose subscribers receive results on channels."""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

__all__ = ["EventBus", "EventData", "EventDataChannel", "EventHandler", "TIMEOUT_RESULT"]

TIMEOUT_RESULT = {"message": "timeout"}


@dataclass
class EventData:
    """A value delivered to a subscriber."""

    data: Any = None


class EventDataChannel:
    """A channel that carries :class:`EventData` from a publisher to a subscriber."""

    def __init__(self) -> None:
        self._queue: queue.Queue[EventData] = queue.Queue()

    def put(self, event_data: EventData) -> None:
        self._queue.put(event_data)

    def data(self, timeout: float) -> Any:
        """Wait up to ``timeout`` seconds for a value; on timeout return a message dict."""
        try:
            event = self._queue.get(timeout=timeout)
        except queue.Empty:
            return dict(TIMEOUT_RESULT)
        return event.data


class EventHandler:
    """Wraps a callable that produces the data of an event."""

    def __init__(self, fn: Callable[..., Any]) -> None:
        if not callable(fn):
            raise TypeError("handler kind error")
        self._fn = fn

    def call(self, *args: Any) -> Any:
        return self._fn(*args)


class EventBus:
    """Maps topics to subscriber channels and to the handler that answers them."""

    def __init__(self) -> None:
        self._subscribes: dict[str, list[EventDataChannel]] = {}
        self._handlers: dict[str, EventHandler] = {}
        self._lock = threading.Lock()

    def sub(self, topic: str, fn: Callable[..., Any]) -> EventDataChannel:
        """Subscribe to a topic; ``fn`` becomes the topic's handler."""
        handler = EventHandler(fn)
        channel = EventDataChannel()
        with self._lock:
            self._subscribes.setdefault(topic, []).append(channel)
            self._handlers[topic] = handler
        return channel

    def unsub(self, topic: str, channel: EventDataChannel) -> None:
        with self._lock:
            channels = self._subscribes.get(topic)
            if not channels or channel is None:
                return
            for position, candidate in enumerate(channels):
                if candidate is channel:
                    del channels[position]
                    break

    def pub(self, topic: str, channel: EventDataChannel, *args: Any) -> None:
        """Run the topic's handler in the background and send its result to ``channel``."""
        with self._lock:
            channels = self._subscribes.get(topic)
            if not channels or channel is None:
                return
            if not any(candidate is channel for candidate in channels):
                return
            handler = self._handlers[topic]

        def deliver() -> None:
            channel.put(EventData(handler.call(*args)))

        threading.Thread(target=deliver, daemon=True).start()