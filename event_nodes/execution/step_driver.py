"""
StepDriver - Explicit orchestration loop for a set of event nodes.

Nodes never run on their own: something has to call ``act()``. The
driver is that something for callers who do not want to hand-sequence
every step. It works in rounds: during a round each node that had a
pending message when the round started, in registration order, consumes
exactly one message. A node that only receives its first message during
a round acts in the next one.

Dependency cycles are legal, so a graph may never go idle. The step
budget bounds a run; exhausting it is reported, not raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from event_nodes.node_system.Mailbox import MailboxFull
from event_nodes.node_system.Node import EventNode, NodeStatus
from event_nodes.util.const import DEFAULT_MAX_STEPS
from event_nodes.util.graph_validator import run_all_validations

logger = logging.getLogger(__name__)


@dataclass
class DriverSummary:
    """Outcome of a run_until_idle() call."""
    steps: int = 0           # act() calls that consumed a message
    rounds: int = 0
    notifications: int = 0   # act() calls whose action requested propagation
    idle: bool = True        # False when the step budget ran out first


class StepDriver:
    """
    Round-robin stepping over a fixed set of nodes.

    Args:
        nodes: EventNode instances, or a mapping of node_id -> EventNode
        max_steps: Default step budget for run_until_idle()
        validate: Check edge symmetry and connectivity of the reachable
            graph before accepting it; errors raise ValueError, warnings
            are logged
    """

    def __init__(
        self,
        nodes: Union[Iterable[EventNode], Mapping[str, EventNode]],
        max_steps: int = DEFAULT_MAX_STEPS,
        validate: bool = False,
    ):
        if max_steps <= 0:
            raise ValueError(f"max_steps must be positive, got {max_steps}")
        self.max_steps = max_steps

        if isinstance(nodes, Mapping):
            items = list(nodes.items())
        else:
            items = [(node.node_id, node) for node in nodes]

        self.nodes: Dict[str, EventNode] = {}
        for node_id, node in items:
            if node_id in self.nodes:
                raise ValueError(f"Duplicate node id: {node_id}")
            self.nodes[node_id] = node

        self._steps = 0
        self._rounds = 0
        self._notifications = 0

        self.validation_errors: List[Dict[str, Any]] = []
        if validate:
            self.validate()

        logger.debug("StepDriver initialized: %d nodes", len(self.nodes))

    def validate(self) -> List[Dict[str, Any]]:
        """
        Run the graph validators over every node reachable from this driver.

        Returns:
            All reports (errors and warnings)

        Raises:
            ValueError: if any report has severity "error"
        """
        self.validation_errors = run_all_validations(list(self.nodes.values()))
        errors = [r for r in self.validation_errors if r["severity"] == "error"]
        for report in self.validation_errors:
            if report["severity"] != "error":
                logger.warning("Graph validation: %s", report["error_message"])
        if errors:
            details = "; ".join(r["error_message"] for r in errors)
            raise ValueError(f"Graph validation failed with {len(errors)} error(s): {details}")
        return self.validation_errors

    def add(self, node: EventNode, node_id: Optional[str] = None) -> None:
        """Append a node to the stepping order."""
        node_id = node_id or node.node_id
        if node_id in self.nodes:
            raise ValueError(f"Duplicate node id: {node_id}")
        self.nodes[node_id] = node

    def get_pending_nodes(self) -> List[str]:
        """Ids of nodes with at least one pending message."""
        return [node_id for node_id, node in self.nodes.items() if node.has_pending]

    def is_idle(self) -> bool:
        return not any(node.has_pending for node in self.nodes.values())

    def step(self, budget: Optional[int] = None) -> int:
        """
        Run one round.

        Args:
            budget: Stop the round after this many act() calls

        Returns:
            Number of nodes that consumed a message
        """
        acted = 0
        try:
            for node_id in self.get_pending_nodes():
                if budget is not None and acted >= budget:
                    break
                node = self.nodes[node_id]
                # Drained earlier in this round by another behavior calling act(),
                # or mid-behavior because step() was called from inside it
                if not node.has_pending or node.status is NodeStatus.REACTING:
                    continue
                # act() on an idle node with a pending message always consumes it,
                # so the step counts even if the behavior raises
                acted += 1
                self._steps += 1
                try:
                    action = node.act()
                except MailboxFull as e:
                    if e.sender == node.node_id:
                        self._notifications += 1
                    raise
                if action.notify:
                    self._notifications += 1
        finally:
            self._rounds += 1
        return acted

    def run_until_idle(self, max_steps: Optional[int] = None) -> DriverSummary:
        """
        Step until no node has a pending message or the budget runs out.

        Behavior exceptions propagate; the failing message stays consumed.

        Returns:
            DriverSummary for this run
        """
        budget = max_steps if max_steps is not None else self.max_steps
        summary = DriverSummary()
        notifications_before = self._notifications

        while not self.is_idle():
            if summary.steps >= budget:
                summary.idle = False
                logger.warning(
                    "Step budget of %d exhausted with pending messages on %s",
                    budget, self.get_pending_nodes()
                )
                break
            acted = self.step(budget - summary.steps)
            summary.steps += acted
            summary.rounds += 1
            if not acted:
                # Only nodes in the middle of their own behavior still hold messages
                summary.idle = False
                break

        summary.notifications = self._notifications - notifications_before
        logger.debug(
            "run_until_idle: %d steps in %d rounds, %d notifying, idle=%s",
            summary.steps, summary.rounds, summary.notifications, summary.idle
        )
        return summary

    def get_execution_summary(self) -> Dict[str, Any]:
        """Get a summary of the driver and node states."""
        return {
            "total": len(self.nodes),
            "steps": self._steps,
            "rounds": self._rounds,
            "notifications": self._notifications,
            "pending": {node_id: node.pending for node_id, node in self.nodes.items()},
            "states": {node_id: node.status.value for node_id, node in self.nodes.items()},
            "idle": self.is_idle(),
        }
