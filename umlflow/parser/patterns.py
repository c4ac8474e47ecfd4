"""Pattern catalog for the PlantUML sequence subset.

The order of every list in this module is the matching priority. The parser
walks them front to back and stops at the first hit, so an ambiguous line
always resolves the same way.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern

from umlflow.models import ConnectionKind, EntityKind, LineStyle

# Endpoint token: identifier or quoted display string.
_TOKEN = r'(?:"[^"]+"|\w+)'


@dataclass(frozen=True)
class DeclarationPattern:
    kind: EntityKind
    regex: Pattern[str]


@dataclass(frozen=True)
class ArrowPattern:
    arrow: str
    kind: ConnectionKind
    regex: Pattern[str]
    reverse: bool = False


def _declaration(kind: EntityKind) -> DeclarationPattern:
    keyword = kind.value
    regex = re.compile(
        rf'^{keyword}\s+"?(?P<name>[^"]+)"?\s+as\s+(?P<alias>\w+)'
        rf"|^{keyword}\s+(?P<bare>\w+)"
    )
    return DeclarationPattern(kind=kind, regex=regex)


def _arrow(arrow: str, kind: ConnectionKind, reverse: bool = False) -> ArrowPattern:
    regex = re.compile(
        rf"^(?P<left>{_TOKEN})\s*(?P<arrow>{re.escape(arrow)})\s*(?P<right>{_TOKEN})"
        r"\s*(?::\s*(?P<label>.*))?$"
    )
    return ArrowPattern(arrow=arrow, kind=kind, regex=regex, reverse=reverse)


DECLARATION_PATTERNS: List[DeclarationPattern] = [
    _declaration(EntityKind.ACTOR),
    _declaration(EntityKind.PARTICIPANT),
    _declaration(EntityKind.ENTITY),
    _declaration(EntityKind.DATABASE),
    _declaration(EntityKind.BOUNDARY),
    _declaration(EntityKind.CONTROL),
    _declaration(EntityKind.COLLECTIONS),
    _declaration(EntityKind.QUEUE),
]

NOTE_PATTERNS: List[Pattern[str]] = [
    re.compile(
        r"^note\s+(?P<position>left|right|over)\s+(?:of\s+)?(?P<target>\w+)"
        r"(?:\s*,\s*\w+)*\s*:\s*(?P<text>.*)$"
    ),
    re.compile(r"^note\s+(?P<position>left|right)\s*:\s*(?P<text>.*)$"),
]

# Opens a multi-line note; closed by END_NOTE_PATTERN.
NOTE_BLOCK_START = re.compile(
    r"^note\s+(?P<position>left|right|over)(?:\s+(?:of\s+)?(?P<target>\w+)(?:\s*,\s*\w+)*)?\s*$"
)
END_NOTE_PATTERN = re.compile(r"^end\s*note$")

ARROW_PATTERNS: List[ArrowPattern] = [
    _arrow("->", ConnectionKind.SOLID),
    _arrow("-->", ConnectionKind.DASHED),
    _arrow("<-", ConnectionKind.REVERSE_SOLID, reverse=True),
    _arrow("<--", ConnectionKind.REVERSE_DASHED, reverse=True),
    _arrow("->>", ConnectionKind.DOUBLE),
    _arrow("<<-", ConnectionKind.REVERSE_DOUBLE, reverse=True),
    _arrow("..>", ConnectionKind.DOTTED),
    _arrow("<..", ConnectionKind.REVERSE_DOTTED, reverse=True),
    _arrow("...", ConnectionKind.DOTTED_LINE),
    _arrow("\\\\", ConnectionKind.BREAK),
    _arrow("||", ConnectionKind.PARALLEL),
    _arrow("o|", ConnectionKind.CIRCLE_START),
    _arrow("|o", ConnectionKind.CIRCLE_END),
]

ACTIVATION_PATTERN = re.compile(r"^(?P<command>activate|deactivate)\s+(?P<target>\w+)")


def unquote(token: str) -> str:
    if len(token) >= 2 and token[0] == token[-1] == '"':
        return token[1:-1].strip()
    return token


def match_arrow(line: str) -> Optional[tuple]:
    """Return ``(pattern, match)`` for the first arrow that fits ``line``."""
    for pattern in ARROW_PATTERNS:
        match = pattern.regex.match(line)
        if match:
            return pattern, match
    return None


def visual_weight(arrow: str, kind: ConnectionKind) -> LineStyle:
    """Resting stroke style of a connection.

    The arrow token sets the base weight, then the connection kind escalates
    it: double/parallel/break widen the line, dotted variants thin it.
    """
    style = LineStyle(stroke_width=2.0, stroke_dasharray=None)

    if arrow in ("-->", "<--"):
        style.stroke_dasharray = "5,5"
    elif arrow in ("->>", "<<-"):
        style.stroke_width = 3.0
    elif arrow in ("..>", "<.."):
        style.stroke_dasharray = "2,3"
        style.stroke_width = 1.5
    elif arrow == "...":
        style.stroke_dasharray = "1,2"
        style.stroke_width = 1.0
    elif arrow == "\\\\":
        style.stroke_dasharray = "10,5"
        style.stroke_width = 2.5
    elif arrow == "||":
        style.stroke_width = 4.0

    if kind == ConnectionKind.DASHED:
        style.stroke_dasharray = "5,5"
    elif kind == ConnectionKind.DOTTED:
        style.stroke_dasharray = "2,3"
        style.stroke_width = max(style.stroke_width * 0.8, 1.0)
    elif kind == ConnectionKind.DOTTED_LINE:
        style.stroke_dasharray = "1,2"
        style.stroke_width = max(style.stroke_width * 0.6, 1.0)
    elif kind == ConnectionKind.DOUBLE:
        style.stroke_width = max(style.stroke_width * 1.5, 3.0)
    elif kind == ConnectionKind.BREAK:
        style.stroke_dasharray = "10,5"
        style.stroke_width = max(style.stroke_width * 1.2, 2.5)
    elif kind == ConnectionKind.PARALLEL:
        style.stroke_width = max(style.stroke_width * 2, 4.0)

    return style
