"""Flow graph: adjacency projection of message connections, plus path queries."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from umlflow.models import Connection


@dataclass(frozen=True)
class FlowEdge:
    to: str
    connection_id: str
    label: str = ""


@dataclass(frozen=True)
class FlowGraph:
    """Read-only snapshot keyed by source entity id.

    Adjacency lists keep connection insertion order; that order decides
    branch order during animation and tie-breaking in ``find_path``.
    """
    adjacency: Mapping[str, Tuple[FlowEdge, ...]] = field(default_factory=dict)
    nodes: Tuple[str, ...] = ()  # discovery order: from, then to, per connection
    connections: Mapping[str, Connection] = field(default_factory=dict)

    def outgoing(self, node_id: str) -> Tuple[FlowEdge, ...]:
        return self.adjacency.get(node_id, ())

    @property
    def edge_count(self) -> int:
        return sum(len(edges) for edges in self.adjacency.values())

    def connection(self, connection_id: str) -> Optional[Connection]:
        return self.connections.get(connection_id)

    def edge_between(self, from_id: str, to_id: str) -> Optional[FlowEdge]:
        return next((e for e in self.outgoing(from_id) if e.to == to_id), None)

    def source_nodes(self) -> List[str]:
        """Nodes that never appear as a target; the first node when every node has one."""
        targets = {e.to for edges in self.adjacency.values() for e in edges}
        sources = [n for n in self.nodes if n not in targets]
        if not sources and self.nodes:
            sources.append(self.nodes[0])
        return sources


def build_flow_graph(connections: Iterable) -> FlowGraph:
    """Build the adjacency snapshot; command markers (no ``from_id``) are skipped."""
    if connections is None:
        raise TypeError("connections must be an iterable, not None")

    adjacency: Dict[str, List[FlowEdge]] = {}
    nodes: Dict[str, None] = {}
    index: Dict[str, Connection] = {}
    for conn in connections:
        if not isinstance(conn, Connection) or conn.from_id is None:
            continue
        adjacency.setdefault(conn.from_id, []).append(
            FlowEdge(to=conn.to_id, connection_id=conn.id, label=conn.label)
        )
        nodes.setdefault(conn.from_id)
        nodes.setdefault(conn.to_id)
        index[conn.id] = conn

    return FlowGraph(
        adjacency=MappingProxyType({k: tuple(v) for k, v in adjacency.items()}),
        nodes=tuple(nodes),
        connections=MappingProxyType(index),
    )


def find_path(graph: FlowGraph, from_id: str, to_id: str) -> Optional[List[str]]:
    """Breadth-first shortest path by edge count, or None when unreachable."""
    if from_id == to_id:
        return [from_id]

    visited = set()
    queue = deque([(from_id, [from_id])])
    while queue:
        node_id, path = queue.popleft()
        if node_id in visited:
            continue
        visited.add(node_id)

        for edge in graph.outgoing(node_id):
            if edge.to == to_id:
                return path + [to_id]
            if edge.to not in visited:
                queue.append((edge.to, path + [edge.to]))
    return None


def preview_path(graph: FlowGraph, node_id: str) -> List[str]:
    """Depth-first pre-order of everything reachable, each node at most once."""
    visited = set()
    order: List[str] = []
    stack = [node_id]
    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        order.append(current)
        stack.extend(edge.to for edge in reversed(graph.outgoing(current)))
    return order
