"""
Debug System Module

Debug event capture and emission for event nodes.

Key Components:
- events: Event type definitions and data structures
- config: Filtering and log mirroring options
- emitter: Event emission dispatchers
"""

from .events import (
    DebugEvent,
    DebugEventType,
    DebugEventSeverity,
)
from .config import (
    DebugConfig,
    default_config,
)
from .emitter import (
    DebugEmitter,
    EmitterRegistry,
    BufferEmitter,
    LogEmitter,
    CallbackEmitter,
)

__all__ = [
    # Events
    "DebugEvent",
    "DebugEventType",
    "DebugEventSeverity",
    # Config
    "DebugConfig",
    "default_config",
    # Emitter
    "DebugEmitter",
    "EmitterRegistry",
    "BufferEmitter",
    "LogEmitter",
    "CallbackEmitter",
]
