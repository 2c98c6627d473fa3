"""
Mailbox - FIFO buffer of pending messages for one node.

Unbounded unless a capacity is configured. A bounded mailbox applies its
overflow policy when full:

- reject_newest: the new message is refused with MailboxFull
- drop_oldest: the head is evicted and handed back to the caller

Blocking the sender is not offered since nothing could ever unblock it
in a single-threaded, step-driven graph.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Iterator, List, Optional, Tuple

from event_nodes.models.model_mailbox_config import MailboxConfig
from event_nodes.util.const import OVERFLOW_DROP_OLDEST


class MailboxFull(RuntimeError):
    """
    Raised when a bounded mailbox with reject_newest policy is full.

    When raised from propagation, ``node_ids`` lists every listener that
    rejected the notification and ``sender`` is the notifying node's id.
    """

    def __init__(self, capacity: int, message: Any = None, *,
                 node_ids: Optional[List[str]] = None, sender: Optional[str] = None):
        if node_ids:
            text = f"Mailbox full for listener(s) {', '.join(node_ids)} (capacity={capacity})"
        else:
            text = f"Mailbox is full (capacity={capacity})"
        super().__init__(text)
        self.capacity = capacity
        self.message = message
        self.node_ids = list(node_ids or [])
        self.sender = sender


class Mailbox:
    __slots__ = ("config", "_queue")

    def __init__(self, config: Optional[MailboxConfig] = None):
        self.config = MailboxConfig.from_value(config)
        self._queue: Deque[Any] = deque()

    @property
    def capacity(self) -> Optional[int]:
        return self.config.capacity

    @property
    def is_full(self) -> bool:
        return self.config.bounded and len(self._queue) >= self.config.capacity

    def put(self, message: Any) -> Tuple[bool, Any]:
        """
        Append a message.

        Returns:
            Tuple of (dropped, evicted). ``dropped`` is True when
            drop_oldest made room, and ``evicted`` is the message that was
            removed. None is a legal message, hence the flag.

        Raises:
            MailboxFull: when full and the policy is reject_newest
        """
        dropped, evicted = False, None
        if self.is_full:
            if self.config.overflow != OVERFLOW_DROP_OLDEST:
                raise MailboxFull(self.config.capacity, message)
            dropped, evicted = True, self._queue.popleft()
        self._queue.append(message)
        return dropped, evicted

    def get(self) -> Any:
        """Pop the oldest message. Raises IndexError when empty."""
        return self._queue.popleft()

    def snapshot(self) -> Tuple[Any, ...]:
        return tuple(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        bound = self.config.capacity if self.config.bounded else "unbounded"
        return f"Mailbox(pending={len(self._queue)}, capacity={bound})"
