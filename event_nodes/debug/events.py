"""
Debug Event Type Definitions and Data Structures.

Every debug event raised by a node or the step driver conforms to
DebugEvent, so emitters and filters handle them uniformly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4


class DebugEventType(Enum):
    """
    Enumeration of all debug event types.

    Organized into categories:
    - Wiring: graph edges being recorded
    - Mailbox: messages entering or failing to enter a mailbox
    - Lifecycle: a node consuming one message
    - Propagation: notifications sent to listeners
    - Contract: behavior results that did not honor the action contract
    """

    # Wiring
    EDGE_ADDED = "edge_added"

    # Mailbox
    MESSAGE_ENQUEUED = "message_enqueued"
    MESSAGE_DROPPED = "message_dropped"
    MESSAGE_REJECTED = "message_rejected"

    # Lifecycle
    NODE_START = "node_start"
    NODE_END = "node_end"
    NODE_ERROR = "node_error"

    # Propagation
    NOTIFICATION_SENT = "notification_sent"

    # Contract
    CONTRACT_VIOLATION = "contract_violation"


class DebugEventSeverity(Enum):
    """
    Severity levels for debug events.

    - TRACE: Very detailed (every enqueue)
    - DEBUG: Per-step lifecycle information
    - INFO: General information
    - WARN: Dropped messages and contract violations
    - ERROR: Behavior faults and rejected messages
    """
    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [
    DebugEventSeverity.TRACE,
    DebugEventSeverity.DEBUG,
    DebugEventSeverity.INFO,
    DebugEventSeverity.WARN,
    DebugEventSeverity.ERROR,
]


@dataclass
class DebugEvent:
    """
    Unified debug event structure.

    Attributes:
        event_id: Unique identifier for this event
        event_type: Type of debug event
        severity: Severity level for filtering
        timestamp: When the event occurred (UTC)
        sequence_number: Order of emission, assigned by the EmitterRegistry
        node_id: ID of the node the event is about
        payload: Event-specific data
        tags: Additional tags for categorization
    """

    event_id: str = field(default_factory=lambda: uuid4().hex)
    event_type: DebugEventType = DebugEventType.NODE_START
    severity: DebugEventSeverity = DebugEventSeverity.DEBUG

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    sequence_number: int = 0

    node_id: Optional[str] = None

    payload: Dict[str, Any] = field(default_factory=dict)
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_id": self.event_id,
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "sequence_number": self.sequence_number,
            "node_id": self.node_id,
            "payload": self.payload,
            "tags": self.tags,
        }

    @property
    def is_error(self) -> bool:
        """Check if this is an error event."""
        return (
            self.severity == DebugEventSeverity.ERROR
            or self.event_type == DebugEventType.NODE_ERROR
        )


# Convenience factory functions for common event types
def edge_added_event(node_id: str, listener_id: str) -> DebugEvent:
    """Create an EDGE_ADDED event."""
    return DebugEvent(
        event_type=DebugEventType.EDGE_ADDED,
        severity=DebugEventSeverity.DEBUG,
        node_id=node_id,
        payload={"listener_id": listener_id},
    )


def message_enqueued_event(node_id: str, pending: int) -> DebugEvent:
    return DebugEvent(
        event_type=DebugEventType.MESSAGE_ENQUEUED,
        severity=DebugEventSeverity.TRACE,
        node_id=node_id,
        payload={"pending": pending},
    )


def message_dropped_event(node_id: str, capacity: int) -> DebugEvent:
    """Create a MESSAGE_DROPPED event."""
    return DebugEvent(
        event_type=DebugEventType.MESSAGE_DROPPED,
        severity=DebugEventSeverity.WARN,
        node_id=node_id,
        payload={"capacity": capacity, "policy": "drop_oldest"},
    )


def message_rejected_event(node_id: str, capacity: int) -> DebugEvent:
    return DebugEvent(
        event_type=DebugEventType.MESSAGE_REJECTED,
        severity=DebugEventSeverity.ERROR,
        node_id=node_id,
        payload={"capacity": capacity, "policy": "reject_newest"},
    )


def node_start_event(node_id: str, pending: int) -> DebugEvent:
    """Create a NODE_START event."""
    return DebugEvent(
        event_type=DebugEventType.NODE_START,
        severity=DebugEventSeverity.DEBUG,
        node_id=node_id,
        payload={"pending": pending},
    )


def node_end_event(node_id: str, notify: bool, duration_ms: float) -> DebugEvent:
    """Create a NODE_END event."""
    return DebugEvent(
        event_type=DebugEventType.NODE_END,
        severity=DebugEventSeverity.DEBUG,
        node_id=node_id,
        payload={"notify": notify, "duration_ms": duration_ms},
    )


def node_error_event(node_id: str, error: BaseException) -> DebugEvent:
    """Create a NODE_ERROR event."""
    return DebugEvent(
        event_type=DebugEventType.NODE_ERROR,
        severity=DebugEventSeverity.ERROR,
        node_id=node_id,
        payload={
            "error_type": type(error).__name__,
            "error_message": str(error),
        },
    )


def notification_sent_event(node_id: str, listener_ids: List[str]) -> DebugEvent:
    return DebugEvent(
        event_type=DebugEventType.NOTIFICATION_SENT,
        severity=DebugEventSeverity.DEBUG,
        node_id=node_id,
        payload={"listener_ids": listener_ids, "count": len(listener_ids)},
    )


def contract_violation_event(node_id: str, result: Any) -> DebugEvent:
    return DebugEvent(
        event_type=DebugEventType.CONTRACT_VIOLATION,
        severity=DebugEventSeverity.WARN,
        node_id=node_id,
        payload={
            "result_type": type(result).__name__,
            "error_message": "behavior result has no boolean 'notify' field; treated as notify=False",
        },
    )
