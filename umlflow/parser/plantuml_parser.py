"""PlantUML parser: extract entities and connections from sequence-diagram text."""
from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional

from umlflow.models import (
    CommandMarker,
    Connection,
    ConnectionKind,
    DiagramModel,
    Entity,
    EntityKind,
    Note,
)
from umlflow.parser.patterns import (
    ACTIVATION_PATTERN,
    DECLARATION_PATTERNS,
    END_NOTE_PATTERN,
    NOTE_BLOCK_START,
    NOTE_PATTERNS,
    match_arrow,
    unquote,
    visual_weight,
)

logger = logging.getLogger(__name__)

LAYOUT_PADDING = 50


def _prepare_lines(text: str) -> List[str]:
    """Strip, drop blanks, block markers and comments, fold block notes into one line."""
    lines: List[str] = []
    in_comment = False
    note_header: Optional[str] = None
    note_body: List[str] = []

    for raw in text.split("\n"):
        line = raw.strip()
        if in_comment:
            if line.endswith("'/"):
                in_comment = False
            continue
        if line.startswith("/'"):
            in_comment = not (len(line) > 2 and line.endswith("'/"))
            continue
        if note_header is not None:
            if END_NOTE_PATTERN.match(line):
                lines.append(f"{note_header}: {' '.join(note_body)}")
                note_header, note_body = None, []
            elif line:
                note_body.append(line)
            continue
        if not line or line.startswith("@") or line.startswith("'"):
            continue
        if NOTE_BLOCK_START.match(line):
            note_header = line
            continue
        lines.append(line)

    if note_header is not None:
        # unterminated block note: keep what was collected
        lines.append(f"{note_header}: {' '.join(note_body)}")
    return lines


class PlantUMLParser:
    """Two-pass parser over the PlantUML sequence subset.

    The first pass registers entities (declarations win over inferred
    references because they are tried first on every line); the second pass
    emits connections and activation markers. Lines that match nothing are
    dropped without error.
    """

    def __init__(self) -> None:
        self._entities: Dict[str, Entity] = {}
        self._connections: List = []
        self._notes: List[Note] = []

    def reset(self) -> None:
        self._entities = {}
        self._connections = []
        self._notes = []

    def parse(self, text: str) -> DiagramModel:
        if text is None:
            raise TypeError("PlantUML text must be a string, not None")
        self.reset()

        lines = _prepare_lines(str(text))
        for line in lines:
            self._parse_declaration(line)
        for line in lines:
            self._parse_connection(line)

        model = DiagramModel(
            entities=list(self._entities.values()),
            connections=list(self._connections),
            notes=list(self._notes),
        )
        logger.debug(
            "Parsed %d entities, %d connections from %d lines",
            len(model.entities), len(model.connections), len(lines),
        )
        return model

    # ---------- first pass ----------
    def _parse_declaration(self, line: str) -> None:
        for pattern in DECLARATION_PATTERNS:
            match = pattern.regex.match(line)
            if match:
                if match.group("alias"):
                    self._add_entity(match.group("alias"), match.group("name").strip(), pattern.kind)
                else:
                    self._add_entity(match.group("bare"), match.group("bare"), pattern.kind)
                return

        for note_pattern in NOTE_PATTERNS:
            match = note_pattern.match(line)
            if match:
                target = match.groupdict().get("target")
                if target:
                    self._add_entity(target, target)
                self._notes.append(Note(
                    position=match.group("position"),
                    text=match.group("text").strip(),
                    target=target,
                ))
                return

        hit = match_arrow(line)
        if hit:
            _, match = hit
            left, right = unquote(match.group("left")), unquote(match.group("right"))
            self._add_entity(left, left)
            self._add_entity(right, right)
            return

        match = ACTIVATION_PATTERN.match(line)
        if match:
            target = match.group("target")
            self._add_entity(target, target)

    # ---------- second pass ----------
    def _parse_connection(self, line: str) -> None:
        hit = match_arrow(line)
        if hit:
            pattern, match = hit
            from_id, to_id = unquote(match.group("left")), unquote(match.group("right"))
            if pattern.reverse:
                from_id, to_id = to_id, from_id
            label = (match.group("label") or "").strip()
            self._add_connection(from_id, to_id, label, match.group("arrow"), pattern.kind)
            return

        match = ACTIVATION_PATTERN.match(line)
        if match:
            command, target = match.group("command"), match.group("target")
            self._connections.append(CommandMarker(
                id=f"command-{len(self._connections)}",
                command=command,
                target=target,
                label=f"{command} {target}",
            ))

    # ---------- helpers ----------
    def _add_entity(self, entity_id: str, name: Optional[str] = None,
                    kind: EntityKind = EntityKind.PARTICIPANT) -> Entity:
        existing = self._entities.get(entity_id)
        if existing is not None:
            return existing
        entity = Entity.create(entity_id, name or entity_id, kind)
        self._entities[entity_id] = entity
        return entity

    def _add_connection(self, from_id: str, to_id: str, label: str,
                        arrow: str, kind: ConnectionKind) -> Connection:
        self._add_entity(from_id, from_id)
        self._add_entity(to_id, to_id)
        connection = Connection(
            id=f"{from_id}-{to_id}-{len(self._connections)}",
            from_id=from_id,
            to_id=to_id,
            label=label,
            arrow=arrow,
            kind=kind,
            style=visual_weight(arrow, kind),
        )
        self._connections.append(connection)
        return connection


def parse_plantuml(text: str) -> DiagramModel:
    """Parse PlantUML text with a fresh parser instance."""
    return PlantUMLParser().parse(text)


def auto_layout(entities: List[Entity], canvas_width: float = 800,
                canvas_height: float = 600) -> List[Entity]:
    """Place entities on a square-ish grid, centered per cell and clamped to the canvas.

    Mutates and returns the same list.
    """
    if not entities:
        return entities

    usable_width = canvas_width - LAYOUT_PADDING * 2
    usable_height = canvas_height - LAYOUT_PADDING * 2
    cols = math.ceil(math.sqrt(len(entities)))
    rows = math.ceil(len(entities) / cols)
    cell_width = usable_width / cols
    cell_height = usable_height / rows

    for index, entity in enumerate(entities):
        col = index % cols
        row = index // cols
        x = LAYOUT_PADDING + col * cell_width + cell_width / 2 - entity.width / 2
        y = LAYOUT_PADDING + row * cell_height + cell_height / 2 - entity.height / 2
        entity.x = max(LAYOUT_PADDING, min(x, canvas_width - entity.width - LAYOUT_PADDING))
        entity.y = max(LAYOUT_PADDING, min(y, canvas_height - entity.height - LAYOUT_PADDING))

    return entities
