import asyncio

import pytest

from umlflow.animation.effects import EffectType
from umlflow.animation.engine import CLICK_DELAY
from umlflow.app import Advisory, DiagramController, SimulatedClock
from umlflow.canvas import SvgCanvas
from umlflow.utils.config import Settings


@pytest.fixture
def controller(clock):
    return DiagramController(canvas=SvgCanvas(), config=Settings(), sleep=clock)


def test_generate_requires_text(controller):
    assert controller.generate_diagram("   ") == Advisory("warning", "Please enter PlantUML code")
    assert controller.generate_diagram(None).level == "warning"
    assert not controller.has_diagram


def test_generate_without_entities_is_an_error(controller):
    advisory = controller.generate_diagram("@startuml\nnot a diagram\n@enduml")

    assert advisory.level == "error"
    assert "No entities" in advisory.message


def test_generate_lays_out_and_renders(controller):
    advisory = controller.generate_diagram("A -> B: hi\nB --> A: ok\nactivate A")

    assert advisory == Advisory("success", "Diagram generated: 2 entities, 2 messages")
    assert controller.has_diagram
    assert controller.canvas.get_object_box("A").x >= 50
    assert controller.engine.graph.edge_count == 2


def test_full_animation_needs_a_diagram(controller):
    advisory = asyncio.run(controller.start_full_animation())

    assert advisory.level == "warning"


def test_full_animation_runs(controller, clock):
    controller.generate_diagram("A -> B")

    advisory = asyncio.run(controller.start_full_animation())

    assert advisory.level == "info"
    assert clock.elapsed > 0


def test_click_entity_ripples_then_animates(controller, clock):
    controller.generate_diagram("A -> B")

    advisory = asyncio.run(controller.click_entity("A"))

    assert advisory.level == "info"
    assert controller.canvas.effects[0][1].effect_type == EffectType.RIPPLE
    assert clock.delays[0] == CLICK_DELAY
    assert "highlighted" in controller.canvas.object_classes("B")


def test_click_unknown_entity(controller):
    controller.generate_diagram("A -> B")

    assert asyncio.run(controller.click_entity("Z")).level == "warning"


def test_highlight_path_advisory(controller):
    controller.generate_diagram("A -> B\nB -> C")

    assert asyncio.run(controller.highlight_path("A", "C")) == Advisory("info", "A -> B -> C")
    assert asyncio.run(controller.highlight_path("C", "A")).level == "warning"


def test_adjust_speed_uses_control_range(controller):
    assert controller.adjust_speed(10).message == "Animation speed: 3x"
    assert controller.engine.speed == 3.0
    controller.adjust_speed(0.1)
    assert controller.engine.speed == 0.5
    assert controller.adjust_speed("quick").level == "warning"
    assert controller.adjust_speed(float("nan")).level == "warning"
    assert controller.engine.speed == 0.5


def test_load_sample(controller):
    advisory = controller.load_sample("ecommerce")

    assert advisory.level == "success"
    assert controller.model.entity("ProductDB") is not None
    assert controller.load_sample("missing").level == "success"
    assert controller.model.entity("WebApp") is not None


def test_load_sample_falls_back_to_configured_sample(monkeypatch):
    monkeypatch.setenv("UMLFLOW_DEFAULT_SAMPLE", "microservice")
    controller = DiagramController(config=Settings(), sleep=SimulatedClock())

    assert controller.load_sample("missing").level == "success"
    assert controller.model.entity("InventoryService") is not None


def test_reset(controller):
    controller.generate_diagram("A -> B")

    assert controller.reset().message == "Diagram reset"
    assert not controller.has_diagram
    assert controller.canvas.get_object_box("A") is None
    assert controller.stats()["entity_count"] == 0


def test_stats(controller):
    controller.generate_diagram("note over A: hi\nA -> B\nactivate B")

    stats = controller.stats()

    assert stats["entity_count"] == 2
    assert stats["message_count"] == 1
    assert stats["command_count"] == 1
    assert stats["note_count"] == 1
    assert stats["animation"]["state"] == "idle"


def test_regenerate_stops_running_animation(controller):
    controller.generate_diagram("A -> B\nB -> C")

    async def scenario():
        task = asyncio.create_task(controller.start_full_animation())
        await asyncio.sleep(0)
        advisory = controller.generate_diagram("X -> Y")
        await task
        return advisory

    assert asyncio.run(scenario()).level == "success"
    assert controller.engine.graph.nodes == ("X", "Y")


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("UMLFLOW_CANVAS_WIDTH", "1200")
    monkeypatch.setenv("UMLFLOW_ANIMATION_SPEED", "2")

    config = Settings()
    controller = DiagramController(config=config, sleep=SimulatedClock())

    assert controller.canvas.width == 1200
    assert controller.engine.speed == 2.0
