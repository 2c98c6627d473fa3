"""
Debug Configuration.

Controls which debug events an EmitterRegistry lets through and whether
they are mirrored to the logging system.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set

from .events import DebugEvent, DebugEventSeverity, DebugEventType


@dataclass
class DebugConfig:
    """
    Configuration for the debug system.

    Attributes:
        enabled: Master switch for debug functionality
        min_severity: Minimum severity level to emit
        include_event_types: If set, only include these event types
        exclude_event_types: Exclude these event types
        include_nodes: If set, only emit events about these node ids
        exclude_nodes: Don't emit events about these node ids
        emit_to_log: Also emit events to logging through a LogEmitter
        log_level: Log level name used by that LogEmitter for non-error events
    """

    enabled: bool = True

    min_severity: DebugEventSeverity = DebugEventSeverity.TRACE
    include_event_types: Optional[Set[DebugEventType]] = None
    exclude_event_types: Set[DebugEventType] = field(default_factory=set)
    include_nodes: Optional[Set[str]] = None
    exclude_nodes: Set[str] = field(default_factory=set)

    emit_to_log: bool = False
    log_level: str = "DEBUG"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DebugConfig":
        """
        Create a DebugConfig from a dictionary.

        Enum-valued fields accept their string values, e.g.
        ``{"min_severity": "warn", "exclude_event_types": ["message_enqueued"]}``.

        Args:
            data: Dictionary with configuration values

        Returns:
            DebugConfig instance
        """
        if not data:
            return cls()

        data = dict(data)
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown debug config keys: {sorted(unknown)}")

        for key in ("include_event_types", "exclude_event_types"):
            if data.get(key) is not None:
                data[key] = {
                    DebugEventType(et) if isinstance(et, str) else et
                    for et in data[key]
                }
        for key in ("include_nodes", "exclude_nodes"):
            if data.get(key) is not None:
                data[key] = set(data[key])

        if isinstance(data.get("min_severity"), str):
            data["min_severity"] = DebugEventSeverity(data["min_severity"])

        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the DebugConfig to a dictionary (for JSON serialization).

        Returns:
            Dictionary representation of the config
        """
        return {
            "enabled": self.enabled,
            "min_severity": self.min_severity.value,
            "include_event_types": (
                sorted(et.value for et in self.include_event_types)
                if self.include_event_types is not None else None
            ),
            "exclude_event_types": sorted(et.value for et in self.exclude_event_types),
            "include_nodes": sorted(self.include_nodes) if self.include_nodes is not None else None,
            "exclude_nodes": sorted(self.exclude_nodes),
            "emit_to_log": self.emit_to_log,
            "log_level": self.log_level,
        }

    def should_emit(self, event: DebugEvent) -> bool:
        """Check whether an event passes every filter of this config."""
        if not self.enabled:
            return False
        if event.severity.rank < self.min_severity.rank:
            return False
        if self.include_event_types is not None and event.event_type not in self.include_event_types:
            return False
        if event.event_type in self.exclude_event_types:
            return False
        if self.include_nodes is not None and event.node_id not in self.include_nodes:
            return False
        if event.node_id in self.exclude_nodes:
            return False
        return True


def default_config() -> DebugConfig:
    """Everything enabled, nothing mirrored to logs."""
    return DebugConfig()
