"""Animation traversal engine.

Walks the flow graph depth-first and drives highlight/flow commands on a
canvas. All timing goes through ``await self._pause(...)``; each pause is a
suspension point after which the run's cancellation token is checked before
anything else becomes visible.
"""
from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from umlflow.animation.effects import flow_effect_for, pulse_effect_for, ripple_effect_for
from umlflow.animation.flow_graph import FlowEdge, FlowGraph, build_flow_graph, find_path, preview_path

if TYPE_CHECKING:
    from umlflow.canvas import Canvas

logger = logging.getLogger(__name__)

# Base delays in seconds at speed 1.0; every delay is divided by the current speed.
NODE_DELAY = 0.3
TERMINAL_DELAY = 0.5
BRANCH_PAUSE = 0.2
SOURCE_PAUSE = 1.0
FLOW_DURATION = 0.6
FLOW_HOLD = 0.1
PATH_STEP_DELAY = 0.3
CLICK_DELAY = 0.3

MIN_SPEED = 0.1
MAX_SPEED = 5.0

Sleep = Callable[[float], Awaitable[Any]]


class AnimationState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"  # cancelled, waiting for the run to unwind or a re-initialize


class AnimationStateError(RuntimeError):
    pass


class CancellationToken:
    """Cooperative cancellation flag owned by a single run."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class _Frame:
    node_id: str
    path: FrozenSet[str]  # ancestors including node_id; owned by this frame
    edges: Tuple[FlowEdge, ...]
    next_edge: int = 0
    child_done: bool = False


class AnimationEngine:
    def __init__(self, canvas: "Canvas", speed: float = 1.0, sleep: Optional[Sleep] = None) -> None:
        self.canvas = canvas
        self.speed = 1.0
        self.set_speed(speed)
        self._sleep: Sleep = sleep or asyncio.sleep
        self._connections: List = []
        self._graph = FlowGraph()
        self._state = AnimationState.IDLE
        self._token = CancellationToken()
        self._token.cancel()

    # ---------- state ----------
    @property
    def state(self) -> AnimationState:
        return self._state

    @property
    def is_animating(self) -> bool:
        return self._state == AnimationState.RUNNING

    @property
    def graph(self) -> FlowGraph:
        return self._graph

    def initialize(self, connections: Iterable) -> None:
        """Rebuild the flow graph from a new connection set."""
        if self._state == AnimationState.RUNNING:
            raise AnimationStateError("Cannot initialize while an animation is running")
        self._connections = list(connections)
        self._graph = build_flow_graph(self._connections)
        self._state = AnimationState.IDLE
        logger.debug("Flow graph rebuilt: %d nodes, %d edges", len(self._graph.nodes), self._graph.edge_count)

    def set_speed(self, speed: float) -> float:
        try:
            value = float(speed)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid animation speed %r", speed)
            return self.speed
        if math.isnan(value):
            logger.warning("Ignoring invalid animation speed %r", speed)
            return self.speed
        self.speed = max(MIN_SPEED, min(MAX_SPEED, value))
        return self.speed

    def stats(self) -> Dict[str, Any]:
        return {
            "state": self._state.value,
            "is_animating": self.is_animating,
            "speed": self.speed,
            "connection_count": len(self._connections),
            "node_count": len(self._graph.nodes),
        }

    # ---------- run lifecycle ----------
    def _begin_run(self, token: CancellationToken) -> None:
        # token is installed before any canvas call
        previous, self._token = self._token, token
        was_running = self._state == AnimationState.RUNNING
        previous.cancel()
        self._state = AnimationState.RUNNING
        if was_running:
            self.canvas.reset_flow_effects()
        self.canvas.clear_all_highlights()

    def _end_run(self, token: CancellationToken) -> None:
        # a superseded run must not touch its successor's state
        if token is self._token:
            self._state = AnimationState.IDLE

    def _clear_canvas(self, token: CancellationToken) -> None:
        if token is not self._token:
            return
        try:
            self.canvas.clear_all_highlights()
            self.canvas.reset_flow_effects()
        except Exception:
            logger.exception("Failed to clear canvas after animation fault")

    async def _run(self, action: str, body: Callable[[CancellationToken], Awaitable[None]]) -> None:
        token = CancellationToken()
        try:
            self._begin_run(token)
            await body(token)
        except asyncio.CancelledError:
            logger.info("Animation task cancelled during %s", action)
            token.cancel()
            self._clear_canvas(token)
            raise
        except Exception:
            logger.exception("Animation fault during %s", action)
            token.cancel()
            self._clear_canvas(token)
        finally:
            self._end_run(token)

    def stop_animation(self) -> None:
        """Cancel the current run and clear every visual effect. Idempotent."""
        self._token.cancel()
        if self._state == AnimationState.RUNNING:
            self._state = AnimationState.STOPPED
        self.canvas.clear_all_highlights()
        self.canvas.reset_flow_effects()

    async def _pause(self, base: float, token: CancellationToken) -> bool:
        """Sleep ``base / speed``; return False when the run was cancelled meanwhile."""
        if token.cancelled:
            return False
        await self._sleep(base / self.speed)
        return not token.cancelled

    # ---------- traversal ----------
    async def start_flow_animation(self, start_id: str) -> None:
        await self._run("flow animation", lambda token: self.animate_flow(start_id, token))

    async def animate_all_flows(self) -> None:
        async def body(token: CancellationToken) -> None:
            sources = self._graph.source_nodes()
            for source in sources:
                if token.cancelled:
                    break
                await self.animate_flow(source, token)
                if len(sources) > 1:
                    if not await self._pause(SOURCE_PAUSE, token):
                        break
                    self.canvas.clear_all_highlights()

        await self._run("all flows", body)

    async def animate_flow(self, start_id: str, token: CancellationToken) -> None:
        """Depth-first walk from ``start_id`` using an explicit frame stack."""
        stack: List[_Frame] = []
        root = await self._visit(start_id, frozenset(), token)
        if root is not None:
            stack.append(root)

        while stack:
            if token.cancelled:
                return
            frame = stack[-1]
            if frame.child_done:
                frame.child_done = False
                if len(frame.edges) > 1 and not await self._pause(BRANCH_PAUSE, token):
                    return
            if frame.next_edge >= len(frame.edges):
                stack.pop()
                if stack:
                    stack[-1].child_done = True
                continue

            edge = frame.edges[frame.next_edge]
            frame.next_edge += 1
            await self.animate_connection(edge.connection_id, token)
            if token.cancelled:
                return

            child = await self._visit(edge.to, frame.path, token)
            if child is None:
                frame.child_done = True
            else:
                stack.append(child)

    async def _visit(self, node_id: str, path: FrozenSet[str], token: CancellationToken) -> Optional[_Frame]:
        """Highlight a node; return its frame when it has edges left to walk."""
        if token.cancelled or node_id in path:
            return None
        self.canvas.highlight_object(node_id, "highlighted")
        if not await self._pause(NODE_DELAY, token):
            return None

        edges = self._graph.outgoing(node_id)
        if not edges:
            await self._pause(TERMINAL_DELAY, token)
            return None
        return _Frame(node_id=node_id, path=path | {node_id}, edges=edges)

    async def animate_connection(self, connection_id: str, token: CancellationToken) -> None:
        """Mark active, run the flow effect, then restore the resting style."""
        if token.cancelled:
            return
        self.canvas.highlight_connection(connection_id, "active")

        connection = self._graph.connection(connection_id)
        kind = connection.kind if connection else None
        resting = connection.style if connection else None
        effect = flow_effect_for(kind, self._connection_length(connection), self.speed, resting)
        self.canvas.apply_flow_effect(connection_id, effect)

        if not await self._pause(FLOW_DURATION, token):
            return
        if not await self._pause(FLOW_HOLD, token):
            return
        self.canvas.remove_connection_highlight(connection_id, "active")
        self.canvas.restore_connection_style(connection_id)

    def _connection_length(self, connection) -> float:
        if connection is None:
            return 0.0
        from_box = self.canvas.get_object_box(connection.from_id)
        to_box = self.canvas.get_object_box(connection.to_id)
        if from_box is None or to_box is None:
            return 0.0
        (x1, y1), (x2, y2) = from_box.center, to_box.center
        return math.hypot(x2 - x1, y2 - y1)

    # ---------- paths ----------
    def find_path(self, from_id: str, to_id: str) -> Optional[List[str]]:
        return find_path(self._graph, from_id, to_id)

    def preview_path(self, object_id: str) -> List[str]:
        return preview_path(self._graph, object_id)

    async def highlight_path(self, from_id: str, to_id: str) -> None:
        path = self.find_path(from_id, to_id)
        if not path or len(path) < 2:
            return

        async def body(token: CancellationToken) -> None:
            for current_id, next_id in zip(path, path[1:]):
                edge = self._graph.edge_between(current_id, next_id)
                if edge is None:
                    continue
                self.canvas.highlight_object(current_id, "highlighted")
                if not await self._pause(PATH_STEP_DELAY, token):
                    return
                self.canvas.highlight_connection(edge.connection_id, "active")
                if not await self._pause(PATH_STEP_DELAY, token):
                    return
            self.canvas.highlight_object(to_id, "highlighted")

        await self._run("path highlight", body)

    # ---------- one-shot effects ----------
    def create_ripple_effect(self, object_id: str) -> bool:
        box = self.canvas.get_object_box(object_id)
        if box is None:
            return False
        self.canvas.play_effect(object_id, ripple_effect_for(box, self.speed))
        return True

    def create_pulse_effect(self, object_id: str, duration: float = 1.0) -> bool:
        if self.canvas.get_object_box(object_id) is None:
            return False
        self.canvas.play_effect(object_id, pulse_effect_for(duration))
        return True
