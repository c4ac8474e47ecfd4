"""Diagram controller: the user-facing actions over parser, canvas and engine.

Each action returns exactly one ``Advisory`` describing its outcome, the way
the interactive page shows a single status message per click.
"""
from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from umlflow.animation.engine import CLICK_DELAY, AnimationEngine, AnimationStateError, Sleep
from umlflow.canvas import Canvas, SvgCanvas
from umlflow.models import DiagramModel
from umlflow.parser import PlantUMLParser, auto_layout, get_sample
from umlflow.utils.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# Range offered by the speed control; the engine itself accepts a wider one.
UI_MIN_SPEED = 0.5
UI_MAX_SPEED = 3.0


class SimulatedClock:
    """Drop-in ``sleep`` that records requested delays instead of waiting."""

    def __init__(self) -> None:
        self.elapsed = 0.0
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        self.elapsed += seconds
        await asyncio.sleep(0)


@dataclass
class Advisory:
    level: str  # info | success | warning | error
    message: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class DiagramController:
    def __init__(self, canvas: Optional[Canvas] = None, config: Optional[Settings] = None,
                 sleep: Optional[Sleep] = None) -> None:
        self.config = config or default_settings
        self.canvas = canvas if canvas is not None else SvgCanvas(self.config.canvas_width, self.config.canvas_height)
        self.parser = PlantUMLParser()
        self.engine = AnimationEngine(self.canvas, speed=self.config.animation_speed, sleep=sleep)
        self._sleep: Sleep = sleep or asyncio.sleep
        self.model: Optional[DiagramModel] = None

    @property
    def has_diagram(self) -> bool:
        return self.model is not None and not self.model.is_empty

    def generate_diagram(self, text: Optional[str]) -> Advisory:
        if not text or not text.strip():
            return Advisory("warning", "Please enter PlantUML code")

        model = self.parser.parse(text)
        if model.is_empty:
            return Advisory("error", "No entities found. Please check the PlantUML syntax")

        if self.engine.is_animating:
            self.engine.stop_animation()
        auto_layout(model.entities, self.config.canvas_width, self.config.canvas_height)
        try:
            self.canvas.render(model)
            self.engine.initialize(model.connections)
        except AnimationStateError:
            logger.exception("Engine refused a new diagram")
            return Advisory("error", "Animation still running, stop it before generating a new diagram")

        self.model = model
        logger.info("Diagram generated: %d entities, %d messages", len(model.entities), len(model.messages))
        return Advisory(
            "success",
            f"Diagram generated: {len(model.entities)} entities, {len(model.messages)} messages",
        )

    async def start_full_animation(self) -> Advisory:
        if not self.has_diagram:
            return Advisory("warning", "Generate a diagram first")
        await self.engine.animate_all_flows()
        return Advisory("info", "Flow animation finished")

    async def click_entity(self, entity_id: str) -> Advisory:
        """Ripple on the clicked entity, then animate the flow starting there."""
        if not self.has_diagram or self.model.entity(entity_id) is None:
            return Advisory("warning", f"Unknown entity: {entity_id}")
        self.engine.create_ripple_effect(entity_id)
        await self._sleep(CLICK_DELAY)
        await self.engine.start_flow_animation(entity_id)
        return Advisory("info", f"Flow animation from {entity_id} finished")

    async def highlight_path(self, from_id: str, to_id: str) -> Advisory:
        path = self.engine.find_path(from_id, to_id)
        if not path or len(path) < 2:
            return Advisory("warning", f"No path from {from_id} to {to_id}")
        await self.engine.highlight_path(from_id, to_id)
        return Advisory("info", " -> ".join(path))

    def stop(self) -> Advisory:
        self.engine.stop_animation()
        return Advisory("info", "Animation stopped")

    def reset(self) -> Advisory:
        self.engine.stop_animation()
        self.canvas.clear()
        self.model = None
        self.engine.initialize([])
        return Advisory("info", "Diagram reset")

    def load_sample(self, key: str) -> Advisory:
        return self.generate_diagram(get_sample(key, self.config.default_sample))

    def adjust_speed(self, speed: Any) -> Advisory:
        try:
            value = float(speed)
        except (TypeError, ValueError):
            value = math.nan
        if math.isnan(value):
            logger.warning("Ignoring invalid animation speed %r", speed)
            return Advisory("warning", f"Invalid speed: {speed}")
        applied = self.engine.set_speed(max(UI_MIN_SPEED, min(UI_MAX_SPEED, value)))
        return Advisory("info", f"Animation speed: {applied:g}x")

    def stats(self) -> Dict[str, Any]:
        model = self.model or DiagramModel()
        return {
            "entity_count": len(model.entities),
            "message_count": len(model.messages),
            "command_count": len(model.commands),
            "note_count": len(model.notes),
            "animation": self.engine.stats(),
        }
