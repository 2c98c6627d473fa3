from typing import Iterable, List

import networkx as nx

from event_nodes.node_system.Mailbox import Mailbox, MailboxFull
from event_nodes.node_system.Node import Behavior, EventNode, NodeStatus


def collect_nodes(roots: Iterable[EventNode]) -> List[EventNode]:
    """Every node reachable from ``roots`` through listeners or dependencies, in discovery order."""
    seen = {}
    queue = list(roots)
    while queue:
        node = queue.pop(0)
        if id(node) in seen:
            continue
        seen[id(node)] = node
        queue.extend(node.listeners)
        queue.extend(node.dependencies)
    return list(seen.values())


def build_graph(roots: Iterable[EventNode]) -> nx.MultiDiGraph:
    """
    Snapshot the notification topology as a networkx graph.

    Nodes are keyed by ``node_id``; there is one edge ``source -> listener``
    per listener registration, so duplicate registrations show up as
    parallel edges and self-loops as loops.
    """
    nodes = collect_nodes(roots)
    graph = nx.MultiDiGraph()
    for node in nodes:
        graph.add_node(node.node_id, node=node)
    for node in nodes:
        for listener in node.listeners:
            graph.add_edge(node.node_id, listener.node_id)
    return graph


__all__ = [
    "Behavior",
    "EventNode",
    "NodeStatus",
    "Mailbox",
    "MailboxFull",
    "collect_nodes",
    "build_graph",
]
