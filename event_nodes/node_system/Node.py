import logging
import time
import uuid
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from event_nodes.debug.emitter import EmitterRegistry
from event_nodes.debug.events import (
    DebugEvent,
    contract_violation_event,
    edge_added_event,
    message_dropped_event,
    message_enqueued_event,
    message_rejected_event,
    node_end_event,
    node_error_event,
    node_start_event,
    notification_sent_event,
)
from event_nodes.models.model_actor_action import ActorAction
from event_nodes.models.model_mailbox_config import MailboxConfig
from event_nodes.node_system.Mailbox import Mailbox, MailboxFull
from event_nodes.util.telemetry import actor_telemetry

logger = logging.getLogger(__name__)

Behavior = Callable[["EventNode", Any], Any]


class NodeStatus(Enum):
    IDLE = "idle"            # Not acting; mailbox may hold messages
    REACTING = "reacting"    # Behavior is running for one message


class EventNode:
    """
    A reactive node: private state, a FIFO mailbox and a behavior that
    consumes one message per ``act()`` call.

    Nodes are wired with ``depends_on``: when ``a.depends_on(b)``, ``b``
    notifies ``a`` every time its behavior asks for propagation. The
    notification payload is the notifying node itself, so a listener
    inspects the sender (e.g. its ``state``) to decide how to react.

    Nothing happens on its own: ``notify`` only enqueues and ``act``
    processes exactly one message when the caller asks for it.
    """

    def __init__(self,
                 behavior: Behavior,
                 *,
                 node_id: Optional[str] = None,
                 state: Optional[Mapping[str, Any]] = None,
                 mailbox: Union[MailboxConfig, Dict[str, Any], None] = None,
                 emitters: Optional[EmitterRegistry] = None,
                 debug: bool = False):
        if not callable(behavior):
            raise TypeError(f"behavior must be callable, got {type(behavior).__name__}")
        self.node_id = node_id or uuid.uuid4().hex[:8]
        self.debug = debug
        self._behavior = actor_telemetry(behavior) if debug else behavior
        self._state: Dict[str, Any] = dict(state or {})
        self._mailbox = Mailbox(MailboxConfig.from_value(mailbox))
        self._dependencies: List["EventNode"] = []
        self._listeners: List["EventNode"] = []
        self._emitters = emitters
        self._status = NodeStatus.IDLE

    @property
    def behavior(self) -> Behavior:
        return self._behavior

    @property
    def state(self) -> Dict[str, Any]:
        """Live state dict. Only this node's behavior writes to it."""
        return self._state

    @property
    def dependencies(self) -> Tuple["EventNode", ...]:
        return tuple(self._dependencies)

    @property
    def listeners(self) -> Tuple["EventNode", ...]:
        return tuple(self._listeners)

    @property
    def mailbox(self) -> Tuple[Any, ...]:
        """Pending messages, oldest first."""
        return self._mailbox.snapshot()

    @property
    def mailbox_config(self) -> MailboxConfig:
        return self._mailbox.config

    @property
    def pending(self) -> int:
        return len(self._mailbox)

    @property
    def has_pending(self) -> bool:
        return len(self._mailbox) > 0

    @property
    def status(self) -> NodeStatus:
        return self._status

    def to_notify(self, node: "EventNode") -> None:
        """Register ``node`` as a listener. Self-loops and duplicates are allowed."""
        self._listeners.append(node)
        logger.debug("Node %s -> listener %s", self.node_id, node.node_id)
        self._emit(edge_added_event(self.node_id, node.node_id))

    def depends_on(self, node: "EventNode") -> None:
        """Declare that this node depends on ``node``; keeps both sides of the edge in sync."""
        self._dependencies.append(node)
        node.to_notify(self)

    def notify(self, message: Any) -> None:
        """
        Put a message in the mailbox without processing it.

        Raises:
            MailboxFull: if the mailbox is bounded, full and rejects new messages
        """
        try:
            dropped, _ = self._mailbox.put(message)
        except MailboxFull:
            logger.warning("Node %s mailbox full (capacity=%s), message rejected",
                           self.node_id, self._mailbox.capacity)
            self._emit(message_rejected_event(self.node_id, self._mailbox.capacity))
            raise

        if dropped:
            logger.warning("Node %s mailbox full (capacity=%s), oldest message dropped",
                           self.node_id, self._mailbox.capacity)
            self._emit(message_dropped_event(self.node_id, self._mailbox.capacity))
        self._emit(message_enqueued_event(self.node_id, len(self._mailbox)))

    def act(self) -> Optional[ActorAction]:
        """
        Consume the oldest pending message.

        Runs the behavior with ``(self, message)``; if the resulting action
        has ``notify`` set, every listener receives this node as a message,
        in registration order. Listeners are not run here.

        Returns:
            The ActorAction for this step, or None if the mailbox was empty.

        Raises:
            RuntimeError: if called with pending messages while this node's
                behavior is running
            MailboxFull: if one or more listeners rejected the notification;
                the others still received it
            Exception: whatever the behavior raised; the message stays consumed
        """
        if not self._mailbox:
            return None
        if self._status is NodeStatus.REACTING:
            raise RuntimeError(f"Node {self.node_id} is already reacting to a message")

        message = self._mailbox.get()
        self._emit(node_start_event(self.node_id, len(self._mailbox)))
        start_time = time.monotonic()
        self._status = NodeStatus.REACTING
        try:
            result = self._behavior(self, message)
        except Exception as e:
            logger.error("Node %s behavior failed: %s", self.node_id, e)
            self._emit(node_error_event(self.node_id, e))
            raise
        finally:
            self._status = NodeStatus.IDLE

        action, honored = ActorAction.coerce(result)
        if not honored:
            logger.warning(
                "Node %s behavior returned %s without a boolean 'notify'; not notifying",
                self.node_id, type(result).__name__
            )
            self._emit(contract_violation_event(self.node_id, result))

        duration_ms = (time.monotonic() - start_time) * 1000
        self._emit(node_end_event(self.node_id, action.notify, duration_ms))

        if action.notify:
            self._notify_listeners()
        return action

    def _notify_listeners(self) -> None:
        delivered: List[str] = []
        rejected: List[Tuple[str, MailboxFull]] = []
        for listener in list(self._listeners):
            try:
                listener.notify(self)
            except MailboxFull as e:
                rejected.append((listener.node_id, e))
            else:
                delivered.append(listener.node_id)

        if delivered:
            logger.debug("Node %s notified %d listener(s)", self.node_id, len(delivered))
            self._emit(notification_sent_event(self.node_id, delivered))
        if rejected:
            node_ids = [node_id for node_id, _ in rejected]
            first = rejected[0][1]
            raise MailboxFull(first.capacity, self, node_ids=node_ids, sender=self.node_id) from first

    def _emit(self, event: DebugEvent) -> None:
        if self._emitters is not None:
            self._emitters.emit(event)

    def __repr__(self) -> str:
        return (
            f"EventNode({self.node_id}, {self._status.value}, pending={len(self._mailbox)}, "
            f"listeners={len(self._listeners)}, dependencies={len(self._dependencies)})"
        )
