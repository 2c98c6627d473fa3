"""
event_nodes - a steppable graph of reactive, mailbox-buffered nodes.

Each EventNode owns private state and a behavior. Nodes declare
dependencies on each other; when a behavior returns an action with
``notify`` set, every dependent node receives the notifying node in its
mailbox and reacts the next time it is asked to ``act()``.

Example:
    def count_changes(node, event):
        changed = isinstance(event, EventNode) or (isinstance(event, dict) and event.get("change"))
        if changed:
            node.state["counter"] = node.state.get("counter", 0) + 1
            return {"notify": True}
        return {"notify": False}

    source = EventNode(count_changes, node_id="source")
    sink = EventNode(count_changes, node_id="sink")
    sink.depends_on(source)
"""

from event_nodes.models.model_actor_action import ActorAction, NOTIFY, SILENT
from event_nodes.models.model_mailbox_config import MailboxConfig
from event_nodes.node_system import EventNode, Mailbox, MailboxFull, NodeStatus, build_graph
from event_nodes.execution import DriverSummary, StepDriver

__all__ = [
    "ActorAction",
    "NOTIFY",
    "SILENT",
    "MailboxConfig",
    "EventNode",
    "Mailbox",
    "MailboxFull",
    "NodeStatus",
    "build_graph",
    "DriverSummary",
    "StepDriver",
]
