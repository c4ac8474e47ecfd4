import pytest

from umlflow.animation.engine import AnimationEngine
from umlflow.app import SimulatedClock
from umlflow.canvas import SvgCanvas
from umlflow.parser import auto_layout, parse_plantuml


@pytest.fixture
def clock():
    return SimulatedClock()


@pytest.fixture
def make_engine(clock):
    """Build (engine, canvas, model) for a diagram, rendered and initialized."""

    def _make(text: str, speed: float = 1.0, canvas=None):
        model = parse_plantuml(text)
        auto_layout(model.entities)
        canvas = canvas if canvas is not None else SvgCanvas()
        canvas.render(model)
        engine = AnimationEngine(canvas, speed=speed, sleep=clock)
        engine.initialize(model.connections)
        return engine, canvas, model

    return _make
