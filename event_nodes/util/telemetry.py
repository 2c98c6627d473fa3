import functools
import time
import logging

from event_nodes.util.const import SENSITIVE_KEYS

logger = logging.getLogger(__name__)


def _redact(value):
    """Recursively redact sensitive keys in nested structures."""
    try:
        if isinstance(value, dict):
            return {k: ("***" if str(k).lower() in SENSITIVE_KEYS else _redact(v)) for k, v in value.items()}
        if isinstance(value, list):
            return [_redact(v) for v in value]
        if isinstance(value, tuple):
            return tuple(_redact(v) for v in value)
    except Exception:
        # If anything goes wrong during redaction, fallback to original value
        return value
    return value


def actor_telemetry(func):
    """Wrap a behavior ``(node, message) -> action`` with timing and debug logs."""
    qualname = getattr(func, '__qualname__', type(func).__name__)
    if not callable(func):
        raise TypeError(f"Behavior {qualname} is not callable.")

    @functools.wraps(func)
    def wrapper(node, message):
        start_time = time.monotonic()
        logger.debug("Node %s:%s consuming %s with state %s",
                     qualname, node.node_id, _redact(message), _redact(node.state))
        try:
            return func(node, message)
        finally:
            execution_time = time.monotonic() - start_time
            logger.debug(f"{qualname}:{node.node_id} execution time: {execution_time:.4f} seconds")
            logger.debug("Node %s:%s state after: %s", qualname, node.node_id, _redact(node.state))

    return wrapper
