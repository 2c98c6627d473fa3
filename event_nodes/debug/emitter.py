"""
Debug Event Emission Layer.

Emitters deliver debug events to their destination: an in-memory buffer,
the logging system or user callbacks. Everything here is synchronous, in
step with the nodes that produce the events.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from itertools import count
from typing import Callable, Deque, Dict, List, Optional, Protocol, runtime_checkable

from event_nodes.util.const import DEFAULT_BUFFER_SIZE

from .config import DebugConfig
from .events import DebugEvent, DebugEventSeverity, DebugEventType

logger = logging.getLogger(__name__)


@runtime_checkable
class DebugEmitter(Protocol):
    """
    Protocol for debug event emitters.

    Emitters are responsible for delivering debug events to their
    final destination.
    """

    @property
    def name(self) -> str:
        """Unique name for this emitter."""
        ...

    def emit(self, event: DebugEvent) -> None:
        """
        Emit a single debug event.

        Args:
            event: The event to emit
        """
        ...

    def close(self) -> None:
        """Close the emitter and release resources."""
        ...


class EmitterRegistry:
    """
    Registry for managing multiple emitters.

    Every event that passes the DebugConfig filter gets the next sequence
    number and is handed to all registered emitters in registration order.
    A failing emitter is logged and does not affect the others.

    Example:
        buffer = BufferEmitter()
        registry = EmitterRegistry().register(buffer)
        node = EventNode(behavior, emitters=registry)
    """

    def __init__(self, config: Optional[DebugConfig] = None):
        self.config = config or DebugConfig()
        self._emitters: Dict[str, DebugEmitter] = {}
        self._sequence = count(1)
        if self.config.emit_to_log:
            self.register(LogEmitter(level=self.config.log_level))

    def register(self, emitter: DebugEmitter) -> "EmitterRegistry":
        """
        Register an emitter, replacing any emitter with the same name.

        Returns:
            Self for chaining
        """
        self._emitters[emitter.name] = emitter
        return self

    def unregister(self, name: str) -> "EmitterRegistry":
        self._emitters.pop(name, None)
        return self

    def get(self, name: str) -> Optional[DebugEmitter]:
        return self._emitters.get(name)

    @property
    def emitters(self) -> List[DebugEmitter]:
        """Get all registered emitters."""
        return list(self._emitters.values())

    def emit(self, event: DebugEvent) -> bool:
        """
        Emit an event to all registered emitters.

        Returns:
            True if the event passed the config filter
        """
        if not self.config.should_emit(event):
            return False

        event.sequence_number = next(self._sequence)
        for emitter in list(self._emitters.values()):
            try:
                emitter.emit(event)
            except Exception as e:
                logger.warning("Emitter %s failed: %s", emitter.name, e)
        return True

    def close_all(self) -> None:
        """Close all emitters."""
        for emitter in list(self._emitters.values()):
            try:
                emitter.close()
            except Exception as e:
                logger.warning("Emitter %s failed to close: %s", emitter.name, e)


class BufferEmitter:
    """
    Keep the most recent events in a bounded in-memory buffer.

    Meant for drivers and tests that want to inspect what happened
    during a run.
    """

    name = "buffer"

    def __init__(self, max_events: int = DEFAULT_BUFFER_SIZE):
        self._events: Deque[DebugEvent] = deque(maxlen=max_events)
        self._closed = False

    def emit(self, event: DebugEvent) -> None:
        if self._closed:
            return
        self._events.append(event)

    @property
    def events(self) -> List[DebugEvent]:
        return list(self._events)

    def of_type(self, event_type: DebugEventType) -> List[DebugEvent]:
        return [e for e in self._events if e.event_type == event_type]

    def clear(self) -> int:
        """Clear the buffer and return how many events were dropped."""
        cleared = len(self._events)
        self._events.clear()
        return cleared

    def close(self) -> None:
        self._closed = True

    def __len__(self) -> int:
        return len(self._events)


class LogEmitter:
    """
    Emit events to the logging system.

    Warnings and errors are logged at their own level; everything else at
    the configured level.

    Example:
        emitter = LogEmitter(logger_name="myapp.debug")
        emitter.emit(event)  # Logs to myapp.debug
    """

    name = "log"

    SEVERITY_TO_LEVEL = {
        DebugEventSeverity.WARN: logging.WARNING,
        DebugEventSeverity.ERROR: logging.ERROR,
    }

    def __init__(
        self,
        logger_name: str = "event_nodes.debug",
        level: str = "DEBUG",
        format_json: bool = False,
    ):
        self._logger = logging.getLogger(logger_name)
        self._level = logging.getLevelName(level.upper())
        if not isinstance(self._level, int):
            raise ValueError(f"Unknown log level: {level}")
        self._format_json = format_json
        self._closed = False

    def emit(self, event: DebugEvent) -> None:
        """Log an event."""
        if self._closed:
            return

        level = self.SEVERITY_TO_LEVEL.get(event.severity, self._level)

        if self._format_json:
            message = json.dumps(event.to_dict(), default=str)
        else:
            message = self._format_event(event)

        self._logger.log(level, message)

    def _format_event(self, event: DebugEvent) -> str:
        """Format an event for human-readable logging."""
        parts = [f"[{event.event_type.value}]", f"#{event.sequence_number}"]

        if event.node_id:
            parts.append(f"node={event.node_id}")

        if "duration_ms" in event.payload:
            parts.append(f"duration={event.payload['duration_ms']:.2f}ms")

        if "count" in event.payload:
            parts.append(f"listeners={event.payload['count']}")

        if "error_message" in event.payload:
            parts.append(f"error={event.payload['error_message']}")

        return " ".join(parts)

    def close(self) -> None:
        self._closed = True


class CallbackEmitter:
    """
    Emit events to registered callbacks.

    Example:
        def my_handler(event):
            print(f"Event: {event.event_type}")

        emitter = CallbackEmitter()
        emitter.add_callback(my_handler)
        emitter.emit(event)  # Calls my_handler
    """

    name = "callback"

    def __init__(self):
        self._callbacks: List[Callable[[DebugEvent], None]] = []
        self._closed = False

    def add_callback(self, callback: Callable[[DebugEvent], None]) -> "CallbackEmitter":
        """
        Add a callback.

        Returns:
            Self for chaining
        """
        self._callbacks.append(callback)
        return self

    def remove_callback(self, callback: Callable[[DebugEvent], None]) -> "CallbackEmitter":
        if callback in self._callbacks:
            self._callbacks.remove(callback)
        return self

    def emit(self, event: DebugEvent) -> None:
        """Call every callback; a failing callback is logged and skipped."""
        if self._closed:
            return
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception as e:
                logger.warning("Debug callback %r failed: %s", callback, e)

    def close(self) -> None:
        self._closed = True
        self._callbacks.clear()
