"""Visual effect descriptors handed to the canvas during a traversal."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from umlflow.models import Box, ConnectionKind, LineStyle

FLOW_EFFECT_DURATION = 0.8  # seconds at speed 1.0
RIPPLE_DURATION = 0.8
PULSE_DURATION = 1.0


class EffectType(str, Enum):
    SOLID_FLOW = "solid_flow"
    DOTTED_FLOW = "dotted_flow"
    DASHED_FLOW = "dashed_flow"
    DOUBLE_FLOW = "double_flow"
    RIPPLE = "ripple"
    PULSE = "pulse"


class EasingFunction(str, Enum):
    LINEAR = "linear"
    EASE_OUT = "ease-out"
    EASE_IN_OUT = "ease-in-out"


@dataclass
class Keyframe:
    """Style properties at a point of the effect; offset runs 0.0 to 1.0."""
    offset: float
    properties: Dict[str, Any]


@dataclass
class VisualEffect:
    effect_type: EffectType
    duration: float
    easing: EasingFunction = EasingFunction.LINEAR
    keyframes: List[Keyframe] = field(default_factory=list)
    iterations: int = 1
    metadata: Dict[str, Any] = field(default_factory=dict)

    def final_properties(self) -> Dict[str, Any]:
        return dict(self.keyframes[-1].properties) if self.keyframes else {}


# Reverse and line variants animate like their base family.
_FLOW_FAMILY = {
    ConnectionKind.DOTTED: EffectType.DOTTED_FLOW,
    ConnectionKind.REVERSE_DOTTED: EffectType.DOTTED_FLOW,
    ConnectionKind.DOTTED_LINE: EffectType.DOTTED_FLOW,
    ConnectionKind.DASHED: EffectType.DASHED_FLOW,
    ConnectionKind.REVERSE_DASHED: EffectType.DASHED_FLOW,
    ConnectionKind.DOUBLE: EffectType.DOUBLE_FLOW,
    ConnectionKind.REVERSE_DOUBLE: EffectType.DOUBLE_FLOW,
}


def flow_effect_for(kind: Optional[ConnectionKind], length: float, speed: float = 1.0,
                    resting: Optional[LineStyle] = None) -> VisualEffect:
    """Marching-dash effect along a connection of the given on-screen length."""
    duration = FLOW_EFFECT_DURATION / speed
    effect_type = _FLOW_FAMILY.get(kind, EffectType.SOLID_FLOW)
    length = max(length, 1.0)

    if effect_type == EffectType.DOTTED_FLOW:
        keyframes = [
            Keyframe(0.0, {"stroke-dasharray": "3, 6", "stroke-linecap": "round",
                           "stroke-dashoffset": length}),
            Keyframe(1.0, {"stroke-dashoffset": -length}),
        ]
        easing = EasingFunction.LINEAR
    elif effect_type == EffectType.DASHED_FLOW:
        keyframes = [
            Keyframe(0.0, {"stroke-dasharray": "8, 6", "stroke-dashoffset": length}),
            Keyframe(1.0, {"stroke-dashoffset": -length}),
        ]
        easing = EasingFunction.LINEAR
    elif effect_type == EffectType.DOUBLE_FLOW:
        width = (resting.stroke_width if resting else 2.0) * 2
        keyframes = [
            Keyframe(0.0, {"stroke-width": width, "stroke-dasharray": f"{length * 0.2:g}, {length:g}",
                           "stroke-dashoffset": length}),
            Keyframe(1.0, {"stroke-dashoffset": 0}),
        ]
        easing = EasingFunction.LINEAR
    else:
        dash = max(length * 0.15, 20.0)
        keyframes = [
            Keyframe(0.0, {"stroke-dasharray": f"{dash:g}, {length:g}",
                           "stroke-dashoffset": length + dash,
                           "filter": "drop-shadow(0 0 3px currentColor)"}),
            Keyframe(1.0, {"stroke-dashoffset": 0}),
        ]
        easing = EasingFunction.EASE_OUT

    return VisualEffect(effect_type=effect_type, duration=duration, easing=easing,
                        keyframes=keyframes, metadata={"length": length})


def ripple_effect_for(box: Box, speed: float = 1.0) -> VisualEffect:
    """Expanding ring centered on an entity; radius grows to twice its larger side."""
    cx, cy = box.center
    radius = max(box.width, box.height) * 2
    return VisualEffect(
        effect_type=EffectType.RIPPLE,
        duration=RIPPLE_DURATION / speed,
        easing=EasingFunction.EASE_OUT,
        keyframes=[
            Keyframe(0.0, {"cx": cx, "cy": cy, "r": 0, "opacity": 0.7}),
            Keyframe(1.0, {"cx": cx, "cy": cy, "r": radius, "opacity": 0}),
        ],
    )


def pulse_effect_for(duration: float = PULSE_DURATION) -> VisualEffect:
    return VisualEffect(
        effect_type=EffectType.PULSE,
        duration=duration,
        easing=EasingFunction.EASE_IN_OUT,
        iterations=3,
        keyframes=[
            Keyframe(0.0, {"opacity": 1.0}),
            Keyframe(0.5, {"opacity": 0.6}),
            Keyframe(1.0, {"opacity": 1.0}),
        ],
    )
