"""Flow graph, path queries, visual effects and the traversal engine."""

from umlflow.animation.engine import AnimationEngine, AnimationState, AnimationStateError, CancellationToken
from umlflow.animation.flow_graph import FlowEdge, FlowGraph, build_flow_graph, find_path, preview_path

__all__ = [
    "AnimationEngine",
    "AnimationState",
    "AnimationStateError",
    "CancellationToken",
    "FlowEdge",
    "FlowGraph",
    "build_flow_graph",
    "find_path",
    "preview_path",
]
