"""
Step-driven execution for event nodes.

Nodes only process messages when asked. StepDriver is the explicit
orchestration loop: it steps a fixed set of nodes in rounds until the
graph goes idle or a step budget runs out.
"""

from event_nodes.execution.step_driver import DriverSummary, StepDriver

__all__ = [
    "DriverSummary",
    "StepDriver",
]
