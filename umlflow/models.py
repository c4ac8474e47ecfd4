"""Diagram model: entities, connections and command markers parsed from PlantUML."""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

ENTITY_MIN_WIDTH = 120
ENTITY_HEIGHT = 60


class EntityKind(str, Enum):
    """Participant kinds supported by the parser."""
    ACTOR = "actor"
    PARTICIPANT = "participant"
    ENTITY = "entity"
    DATABASE = "database"
    BOUNDARY = "boundary"
    CONTROL = "control"
    COLLECTIONS = "collections"
    QUEUE = "queue"


class ConnectionKind(str, Enum):
    """Normalized semantic category of an arrow."""
    SOLID = "solid"
    DASHED = "dashed"
    REVERSE_SOLID = "reverse_solid"
    REVERSE_DASHED = "reverse_dashed"
    DOUBLE = "double"
    REVERSE_DOUBLE = "reverse_double"
    DOTTED = "dotted"
    REVERSE_DOTTED = "reverse_dotted"
    DOTTED_LINE = "dotted_line"
    BREAK = "break"
    PARALLEL = "parallel"
    CIRCLE_START = "circle_start"
    CIRCLE_END = "circle_end"


def entity_size(name: str) -> Tuple[float, float]:
    """Minimum box size for a display name."""
    return float(max(len(name) * 8 + 40, ENTITY_MIN_WIDTH)), float(ENTITY_HEIGHT)


@dataclass
class LineStyle:
    """Stroke weight and dash pattern of a connection at rest."""
    stroke_width: float = 2.0
    stroke_dasharray: Optional[str] = None  # None = continuous line

    def to_css(self) -> Dict[str, str]:
        css = {"stroke-width": f"{self.stroke_width:g}"}
        if self.stroke_dasharray:
            css["stroke-dasharray"] = self.stroke_dasharray
        return css


@dataclass
class Box:
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2


@dataclass
class Entity:
    id: str
    name: str
    kind: EntityKind = EntityKind.PARTICIPANT
    x: float = 0.0
    y: float = 0.0
    width: float = float(ENTITY_MIN_WIDTH)
    height: float = float(ENTITY_HEIGHT)

    @classmethod
    def create(cls, entity_id: str, name: Optional[str] = None,
               kind: EntityKind = EntityKind.PARTICIPANT) -> "Entity":
        display = name or entity_id
        width, height = entity_size(display)
        return cls(id=entity_id, name=display, kind=kind, width=width, height=height)

    @property
    def box(self) -> Box:
        return Box(self.x, self.y, self.width, self.height)


@dataclass
class Connection:
    id: str
    from_id: str
    to_id: str
    label: str
    arrow: str
    kind: ConnectionKind
    style: LineStyle = field(default_factory=LineStyle)


@dataclass
class CommandMarker:
    """Activation/deactivation marker. Has no endpoints and never enters the flow graph."""
    id: str
    command: str  # activate | deactivate
    target: str
    label: str = ""

    @property
    def from_id(self) -> None:
        return None

    @property
    def to_id(self) -> None:
        return None


@dataclass
class Note:
    position: str  # left | right | over
    text: str
    target: Optional[str] = None


DiagramItem = Union[Connection, CommandMarker]


@dataclass
class DiagramModel:
    entities: List[Entity] = field(default_factory=list)
    connections: List[DiagramItem] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)

    def entity(self, entity_id: str) -> Optional[Entity]:
        return next((e for e in self.entities if e.id == entity_id), None)

    @property
    def messages(self) -> List[Connection]:
        return [c for c in self.connections if isinstance(c, Connection)]

    @property
    def commands(self) -> List[CommandMarker]:
        return [c for c in self.connections if isinstance(c, CommandMarker)]

    @property
    def is_empty(self) -> bool:
        return not self.entities

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        def convert(obj):
            if isinstance(obj, Enum):
                return obj.value
            if isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            if isinstance(obj, list):
                return [convert(i) for i in obj]
            return obj

        items = []
        for item in self.connections:
            data = convert(asdict(item))
            data["type"] = "command" if isinstance(item, CommandMarker) else "message"
            items.append(data)
        return {
            "entities": [convert(asdict(e)) for e in self.entities],
            "connections": items,
            "notes": [asdict(n) for n in self.notes],
            "statistics": {
                "entity_count": len(self.entities),
                "message_count": len(self.messages),
                "command_count": len(self.commands),
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
