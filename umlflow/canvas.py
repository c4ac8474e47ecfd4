"""Rendering collaborator: the canvas command interface and an in-memory SVG canvas.

The engine never reads visual state back. It only issues the commands in
``Canvas`` and queries entity boxes. ``SvgCanvas`` keeps its own visual-state
table, with resting styles captured once at render time, so restoring an
element never depends on whatever style it currently shows.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Set, Tuple
import xml.etree.ElementTree as ET

from umlflow.animation.effects import VisualEffect
from umlflow.models import Box, Connection, DiagramModel, Entity, EntityKind

logger = logging.getLogger(__name__)

CONNECTION_STROKE = "#415E72"
ACTIVE_CONNECTION_STYLE = {"stroke": "#C5B0CD", "stroke-width": "4", "marker-end": "url(#arrowhead-active)"}
HIGHLIGHTED_OBJECT_STYLE = {"stroke": "#415E72", "fill": "rgba(65, 94, 114, 0.1)", "stroke-width": "4"}

OBJECT_STYLES: Dict[EntityKind, Dict[str, str]] = {
    EntityKind.ACTOR: {"fill": "rgba(243, 226, 212, 0.3)", "stroke": "#415E72", "stroke-width": "2", "rx": "8"},
    EntityKind.PARTICIPANT: {"fill": "#ffffff", "stroke": "#415E72", "stroke-width": "2", "rx": "8"},
    EntityKind.DATABASE: {"fill": "rgba(197, 176, 205, 0.2)", "stroke": "#C5B0CD", "stroke-width": "2", "rx": "15"},
    EntityKind.ENTITY: {"fill": "rgba(243, 226, 212, 0.4)", "stroke": "#17313E", "stroke-width": "2", "rx": "8"},
    EntityKind.BOUNDARY: {"fill": "rgba(197, 176, 205, 0.3)", "stroke": "#415E72", "stroke-width": "2", "rx": "8"},
    EntityKind.CONTROL: {"fill": "rgba(23, 49, 62, 0.1)", "stroke": "#17313E", "stroke-width": "2", "rx": "8"},
    EntityKind.COLLECTIONS: {"fill": "rgba(65, 94, 114, 0.1)", "stroke": "#415E72", "stroke-width": "2", "rx": "12",
                             "stroke-dasharray": "5,3"},
    EntityKind.QUEUE: {"fill": "rgba(243, 226, 212, 0.5)", "stroke": "#C5B0CD", "stroke-width": "2", "rx": "6"},
}


class Canvas(Protocol):
    def render(self, model: DiagramModel) -> None: ...

    def clear(self) -> None: ...

    def highlight_object(self, object_id: str, style_class: str = "highlighted") -> None: ...

    def remove_highlight(self, object_id: str, style_class: str = "highlighted") -> None: ...

    def highlight_connection(self, connection_id: str, style_class: str = "active") -> None: ...

    def remove_connection_highlight(self, connection_id: str, style_class: str = "active") -> None: ...

    def clear_all_highlights(self) -> None: ...

    def update_connections(self) -> None: ...

    def get_object_box(self, object_id: str) -> Optional[Box]: ...

    def apply_flow_effect(self, connection_id: str, effect: VisualEffect) -> None: ...

    def restore_connection_style(self, connection_id: str) -> None: ...

    def reset_flow_effects(self) -> None: ...

    def play_effect(self, target_id: str, effect: VisualEffect) -> None: ...


@dataclass(frozen=True)
class CanvasCommand:
    name: str
    target: Optional[str] = None
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"name": self.name, "target": self.target, "detail": self.detail}


def edge_intersection(box: Box, center: Tuple[float, float],
                      toward: Tuple[float, float]) -> Tuple[float, float]:
    """Closest point where the ray from ``center`` to ``toward`` leaves ``box``."""
    cx, cy = center
    dx, dy = toward[0] - cx, toward[1] - cy
    left, right = box.x, box.x + box.width
    top, bottom = box.y, box.y + box.height

    hits: List[Tuple[float, float, float]] = []
    if dx != 0:
        for side in (left, right):
            t = (side - cx) / dx
            y = cy + dy * t
            if t >= 0 and top <= y <= bottom:
                hits.append((abs(t), side, y))
    if dy != 0:
        for side in (top, bottom):
            t = (side - cy) / dy
            x = cx + dx * t
            if t >= 0 and left <= x <= right:
                hits.append((abs(t), x, side))
    if not hits:
        return center
    _, x, y = min(hits)
    return x, y


class SvgCanvas:
    """In-memory canvas that records commands and can serialize to SVG."""

    def __init__(self, width: float = 800, height: float = 600,
                 listener: Optional[Callable[[CanvasCommand], None]] = None) -> None:
        self.width = width
        self.height = height
        self.commands: List[CanvasCommand] = []
        self.effects: List[Tuple[str, VisualEffect]] = []
        self.listener = listener
        self._entities: Dict[str, Entity] = {}
        self._connections: Dict[str, Connection] = {}
        self._object_classes: Dict[str, Set[str]] = {}
        self._connection_classes: Dict[str, Set[str]] = {}
        self._resting_styles: Dict[str, Dict[str, str]] = {}
        self._connection_styles: Dict[str, Dict[str, str]] = {}
        self._object_styles: Dict[str, Dict[str, str]] = {}
        self._active_effects: Dict[str, VisualEffect] = {}
        self._geometry: Dict[str, Tuple[float, float, float, float]] = {}

    # ---------- command log ----------
    def _record(self, name: str, target: Optional[str] = None, detail: Optional[str] = None) -> None:
        command = CanvasCommand(name, target, detail)
        self.commands.append(command)
        if self.listener is not None:
            self.listener(command)

    # ---------- lifecycle ----------
    def render(self, model: DiagramModel) -> None:
        self.clear()
        for entity in model.entities:
            self._entities[entity.id] = entity
            self._object_classes[entity.id] = set()
            self._object_styles[entity.id] = dict(OBJECT_STYLES.get(entity.kind, OBJECT_STYLES[EntityKind.PARTICIPANT]))
        for conn in model.messages:
            if conn.from_id not in self._entities or conn.to_id not in self._entities:
                continue
            self._connections[conn.id] = conn
            self._connection_classes[conn.id] = set()
            resting = {"stroke": CONNECTION_STROKE, "marker-end": "url(#arrowhead)"}
            resting.update(conn.style.to_css())
            self._resting_styles[conn.id] = resting
            self._connection_styles[conn.id] = dict(resting)
        self.update_connections()
        self._record("render", detail=f"{len(self._entities)} entities, {len(self._connections)} connections")

    def clear(self) -> None:
        self._entities.clear()
        self._connections.clear()
        self._object_classes.clear()
        self._connection_classes.clear()
        self._resting_styles.clear()
        self._connection_styles.clear()
        self._object_styles.clear()
        self._active_effects.clear()
        self._geometry.clear()
        self.effects.clear()
        self._record("clear")

    # ---------- highlighting ----------
    def highlight_object(self, object_id: str, style_class: str = "highlighted") -> None:
        self._record("highlight_object", object_id, style_class)
        if object_id not in self._entities:
            return
        self._object_classes[object_id].add(style_class)
        if style_class == "highlighted":
            self._object_styles[object_id].update(HIGHLIGHTED_OBJECT_STYLE)

    def remove_highlight(self, object_id: str, style_class: str = "highlighted") -> None:
        self._record("remove_highlight", object_id, style_class)
        if object_id not in self._entities:
            return
        self._object_classes[object_id].discard(style_class)
        if style_class == "highlighted":
            self._restore_object_style(object_id)

    def highlight_connection(self, connection_id: str, style_class: str = "active") -> None:
        self._record("highlight_connection", connection_id, style_class)
        if connection_id not in self._connections:
            return
        self._connection_classes[connection_id].add(style_class)
        if style_class == "active":
            self._connection_styles[connection_id].update(ACTIVE_CONNECTION_STYLE)

    def remove_connection_highlight(self, connection_id: str, style_class: str = "active") -> None:
        self._record("remove_connection_highlight", connection_id, style_class)
        if connection_id not in self._connections:
            return
        self._connection_classes[connection_id].discard(style_class)
        if style_class == "active":
            self._connection_styles[connection_id] = dict(self._resting_styles[connection_id])

    def clear_all_highlights(self) -> None:
        self._record("clear_all_highlights")
        for object_id, classes in self._object_classes.items():
            classes.difference_update({"highlighted", "selected", "focused"})
            self._restore_object_style(object_id)
        for connection_id, classes in self._connection_classes.items():
            classes.discard("active")
            self._connection_styles[connection_id] = dict(self._resting_styles[connection_id])
        self._active_effects.clear()

    def _restore_object_style(self, object_id: str) -> None:
        entity = self._entities[object_id]
        self._object_styles[object_id] = dict(OBJECT_STYLES.get(entity.kind, OBJECT_STYLES[EntityKind.PARTICIPANT]))

    # ---------- effects ----------
    def apply_flow_effect(self, connection_id: str, effect: VisualEffect) -> None:
        self._record("apply_flow_effect", connection_id, effect.effect_type.value)
        if connection_id not in self._connections:
            return
        self._active_effects[connection_id] = effect
        if effect.keyframes:
            self._connection_styles[connection_id].update(
                {k: str(v) for k, v in effect.keyframes[0].properties.items()}
            )

    def restore_connection_style(self, connection_id: str) -> None:
        self._record("restore_connection_style", connection_id)
        if connection_id not in self._connections:
            return
        self._active_effects.pop(connection_id, None)
        style = dict(self._resting_styles[connection_id])
        if "active" in self._connection_classes[connection_id]:
            style.update(ACTIVE_CONNECTION_STYLE)
        self._connection_styles[connection_id] = style

    def reset_flow_effects(self) -> None:
        self._record("reset_flow_effects")
        for connection_id in list(self._active_effects):
            self._connection_styles[connection_id] = dict(self._resting_styles[connection_id])
        self._active_effects.clear()

    def play_effect(self, target_id: str, effect: VisualEffect) -> None:
        self._record("play_effect", target_id, effect.effect_type.value)
        self.effects.append((target_id, effect))

    # ---------- queries ----------
    def get_object_box(self, object_id: str) -> Optional[Box]:
        entity = self._entities.get(object_id)
        return entity.box if entity is not None else None

    def object_classes(self, object_id: str) -> Set[str]:
        return set(self._object_classes.get(object_id, ()))

    def connection_classes(self, connection_id: str) -> Set[str]:
        return set(self._connection_classes.get(connection_id, ()))

    def connection_style(self, connection_id: str) -> Dict[str, str]:
        return dict(self._connection_styles.get(connection_id, {}))

    def active_effects(self) -> Dict[str, VisualEffect]:
        return dict(self._active_effects)

    def connection_geometry(self, connection_id: str) -> Optional[Tuple[float, float, float, float]]:
        return self._geometry.get(connection_id)

    # ---------- geometry ----------
    def update_connections(self) -> None:
        for connection_id, conn in self._connections.items():
            from_box = self._entities[conn.from_id].box
            to_box = self._entities[conn.to_id].box
            x1, y1 = edge_intersection(from_box, from_box.center, to_box.center)
            x2, y2 = edge_intersection(to_box, to_box.center, from_box.center)
            self._geometry[connection_id] = (x1, y1, x2, y2)

    # ---------- serialization ----------
    def to_svg(self) -> str:
        root = ET.Element("svg", xmlns="http://www.w3.org/2000/svg", version="1.1",
                          viewBox=f"0 0 {self.width:g} {self.height:g}")
        defs = ET.SubElement(root, "defs")
        for marker_id, fill in (("arrowhead", CONNECTION_STROKE), ("arrowhead-active", "#C5B0CD")):
            marker = ET.SubElement(defs, "marker", id=marker_id, markerWidth="10", markerHeight="7",
                                   refX="10", refY="3.5", orient="auto")
            ET.SubElement(marker, "path", d="M0,0 L10,3.5 L0,7 z", fill=fill)

        connections_group = ET.SubElement(root, "g", id="connections")
        for connection_id, conn in self._connections.items():
            x1, y1, x2, y2 = self._geometry[connection_id]
            group = ET.SubElement(connections_group, "g", {
                "class": "connection", "data-id": connection_id,
                "data-from": conn.from_id, "data-to": conn.to_id,
            })
            classes = " ".join(["connection-line"] + sorted(self._connection_classes[connection_id]))
            style = "; ".join(f"{k}: {v}" for k, v in self._connection_styles[connection_id].items())
            ET.SubElement(group, "line", {
                "class": classes, "x1": f"{x1:g}", "y1": f"{y1:g}", "x2": f"{x2:g}", "y2": f"{y2:g}",
                "style": style,
            })
            if conn.label:
                label = ET.SubElement(group, "text", {
                    "class": "connection-label",
                    "x": f"{(x1 + x2) / 2:g}", "y": f"{(y1 + y2) / 2 - 5:g}",
                })
                label.text = conn.label

        objects_group = ET.SubElement(root, "g", id="objects")
        for object_id, entity in self._entities.items():
            classes = " ".join(["uml-object"] + sorted(self._object_classes[object_id]))
            group = ET.SubElement(objects_group, "g", {
                "class": classes, "data-id": object_id, "data-kind": entity.kind.value,
                "transform": f"translate({entity.x:g}, {entity.y:g})",
            })
            rect_attrs = {"class": "object-rect", "x": "0", "y": "0",
                          "width": f"{entity.width:g}", "height": f"{entity.height:g}"}
            rect_attrs.update(self._object_styles[object_id])
            ET.SubElement(group, "rect", rect_attrs)
            text = ET.SubElement(group, "text", {
                "class": "object-text", "x": f"{entity.width / 2:g}", "y": f"{entity.height / 2:g}",
                "text-anchor": "middle",
            })
            text.text = entity.name

        return ET.tostring(root, encoding="unicode")
