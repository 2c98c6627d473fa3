"""
Graph Validator - Consistency checks for wired event nodes.

Validators only report. They never rewire nodes, and cycles, self-loops
and duplicate registrations stay legal; the latter two are surfaced as
warnings because they change how many notifications a step produces.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, TYPE_CHECKING

from event_nodes.node_system import build_graph, collect_nodes

if TYPE_CHECKING:
    from event_nodes.node_system.Node import EventNode

logger = logging.getLogger(__name__)


def validate_symmetry(roots: Iterable['EventNode']) -> List[Dict[str, Any]]:
    """
    Check that dependencies and listeners mirror each other.

    For every pair (A, B), the number of times B appears in
    ``A.dependencies`` must equal the number of times A appears in
    ``B.listeners``. Edges created with ``to_notify`` alone break this.

    Args:
        roots: Nodes to start from; everything reachable is checked

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []
    nodes = collect_nodes(roots)

    depends = Counter()
    listens = Counter()
    for node in nodes:
        for dep in node.dependencies:
            depends[(id(node), id(dep))] += 1
        for listener in node.listeners:
            listens[(id(listener), id(node))] += 1

    by_id = {id(n): n for n in nodes}
    for pair in sorted(set(depends) | set(listens), key=lambda p: (by_id[p[0]].node_id, by_id[p[1]].node_id)):
        if depends[pair] == listens[pair]:
            continue
        dependent, dependency = by_id[pair[0]], by_id[pair[1]]
        errors.append({
            "type": "AsymmetricEdge",
            "severity": "error",
            "node_id": dependent.node_id,
            "error_message": (
                f"'{dependent.node_id}' lists '{dependency.node_id}' as dependency "
                f"{depends[pair]} time(s) but is registered as its listener {listens[pair]} time(s)"
            ),
            "dependency_count": depends[pair],
            "listener_count": listens[pair],
            "suggestion": "Create edges with depends_on() instead of to_notify().",
        })

    return errors


def validate_edge_connectivity(roots: Iterable['EventNode']) -> List[Dict[str, Any]]:
    """
    Report legal but noteworthy wiring.

    Checks:
    1. Self-loops (a node listening to itself)
    2. Duplicate listener registrations
    3. Distinct nodes sharing a node_id

    Returns:
        List of validation warnings
    """
    errors = []
    nodes = collect_nodes(roots)

    id_counts = Counter(node.node_id for node in nodes)
    for node_id, seen in id_counts.items():
        if seen > 1:
            errors.append({
                "type": "DuplicateNodeId",
                "severity": "warning",
                "node_id": node_id,
                "error_message": f"{seen} distinct nodes share node_id '{node_id}'",
            })

    graph = build_graph(nodes)
    for source, target in sorted(set(graph.edges())):
        multiplicity = graph.number_of_edges(source, target)
        if source == target:
            errors.append({
                "type": "SelfLoopEdge",
                "severity": "warning",
                "node_id": source,
                "error_message": f"Node '{source}' notifies itself",
            })
        if multiplicity > 1:
            errors.append({
                "type": "DuplicateListener",
                "severity": "warning",
                "node_id": source,
                "error_message": (
                    f"'{target}' is registered {multiplicity} times as listener of '{source}' "
                    f"and receives {multiplicity} notifications per propagation"
                ),
                "source": source,
                "target": target,
                "count": multiplicity,
            })
            logger.debug("Duplicate listener %s -> %s (x%d)", source, target, multiplicity)

    return errors


def run_all_validations(roots: Iterable['EventNode']) -> List[Dict[str, Any]]:
    """
    Run all graph validations.

    Returns:
        Combined list of all validation errors/warnings
    """
    roots = list(roots)
    errors = []
    errors.extend(validate_symmetry(roots))
    errors.extend(validate_edge_connectivity(roots))
    return errors
