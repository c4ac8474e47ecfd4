"""Pydantic schemas for API."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DiagramRequest(BaseModel):
    """Diagram source given inline or by sample key; ``text`` wins when both are set."""
    text: Optional[str] = None
    sample: Optional[str] = None


class ParseResponse(BaseModel):
    entities: List[Dict[str, Any]]
    connections: List[Dict[str, Any]]
    notes: List[Dict[str, Any]]
    statistics: Dict[str, int]


class SampleSummary(BaseModel):
    key: str
    first_line: str


class SampleListResponse(BaseModel):
    samples: List[SampleSummary]


class SampleResponse(BaseModel):
    key: str
    text: str


class PathRequest(DiagramRequest):
    from_id: str
    to_id: str


class PathResponse(BaseModel):
    found: bool
    path: Optional[List[str]] = None


class PreviewRequest(DiagramRequest):
    entity_id: str


class PreviewResponse(BaseModel):
    entity_id: str
    order: List[str]


class AnimateRequest(DiagramRequest):
    start_id: Optional[str] = None  # None animates every source
    speed: float = Field(default=1.0, gt=0)


class CanvasCommandResponse(BaseModel):
    name: str
    target: Optional[str] = None
    detail: Optional[str] = None


class AnimateResponse(BaseModel):
    start_ids: List[str]
    commands: List[CanvasCommandResponse]
    simulated_seconds: float


class RenderResponse(BaseModel):
    svg_text: str
    statistics: Dict[str, int]
