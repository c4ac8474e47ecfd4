"""REST API server."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from umlflow.animation.flow_graph import build_flow_graph, find_path, preview_path
from umlflow.app import DiagramController, SimulatedClock
from umlflow.canvas import SvgCanvas
from umlflow.parser import SAMPLES, get_sample, parse_plantuml
from umlflow.schemas import (
    AnimateRequest,
    AnimateResponse,
    CanvasCommandResponse,
    DiagramRequest,
    ParseResponse,
    PathRequest,
    PathResponse,
    PreviewRequest,
    PreviewResponse,
    RenderResponse,
    SampleListResponse,
    SampleResponse,
    SampleSummary,
)
from umlflow.utils.config import settings

logger = logging.getLogger(__name__)

app = FastAPI(title="umlflow")


def _source_text(req: DiagramRequest) -> Optional[str]:
    if req.text is not None:
        return req.text
    if req.sample is not None:
        return get_sample(req.sample, settings.default_sample)
    return None


def _missing_source() -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Provide text or sample"})


def _controller(clock: Optional[SimulatedClock] = None) -> DiagramController:
    canvas = SvgCanvas(settings.canvas_width, settings.canvas_height)
    return DiagramController(canvas=canvas, sleep=clock or SimulatedClock())


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/parse", response_model=ParseResponse)
async def parse(req: DiagramRequest):
    text = _source_text(req)
    if text is None:
        return _missing_source()
    return parse_plantuml(text).to_dict()


@app.get("/api/samples", response_model=SampleListResponse)
async def samples():
    summaries = []
    for key, text in SAMPLES.items():
        first = next((ln.strip() for ln in text.splitlines() if ln.strip() and not ln.startswith("@")), "")
        summaries.append(SampleSummary(key=key, first_line=first))
    return SampleListResponse(samples=summaries)


@app.get("/api/samples/{key}", response_model=SampleResponse)
async def sample(key: str):
    if key not in SAMPLES:
        raise HTTPException(status_code=404, detail="Sample not found")
    return SampleResponse(key=key, text=SAMPLES[key])


@app.post("/api/path", response_model=PathResponse)
async def path(req: PathRequest):
    text = _source_text(req)
    if text is None:
        return _missing_source()
    graph = build_flow_graph(parse_plantuml(text).connections)
    result = find_path(graph, req.from_id, req.to_id)
    return PathResponse(found=result is not None, path=result)


@app.post("/api/preview", response_model=PreviewResponse)
async def preview(req: PreviewRequest):
    text = _source_text(req)
    if text is None:
        return _missing_source()
    model = parse_plantuml(text)
    if model.entity(req.entity_id) is None:
        return JSONResponse(status_code=404, content={"error": f"Unknown entity: {req.entity_id}"})
    graph = build_flow_graph(model.connections)
    return PreviewResponse(entity_id=req.entity_id, order=preview_path(graph, req.entity_id))


@app.post("/api/animate", response_model=AnimateResponse)
async def animate(req: AnimateRequest):
    """Run a traversal against an in-memory canvas and return its command trace."""
    text = _source_text(req)
    if text is None:
        return _missing_source()

    clock = SimulatedClock()
    controller = _controller(clock)
    advisory = controller.generate_diagram(text)
    if advisory.level in ("warning", "error"):
        return JSONResponse(status_code=400, content={"error": advisory.message})
    controller.engine.set_speed(req.speed)

    first_command = len(controller.canvas.commands)
    if req.start_id is not None:
        if controller.model.entity(req.start_id) is None:
            return JSONResponse(status_code=404, content={"error": f"Unknown entity: {req.start_id}"})
        start_ids = [req.start_id]
        await controller.click_entity(req.start_id)
    else:
        start_ids = controller.engine.graph.source_nodes()
        await controller.start_full_animation()

    commands = [CanvasCommandResponse(**c.to_dict()) for c in controller.canvas.commands[first_command:]]
    logger.info("Animation trace: %d commands, %.2fs simulated", len(commands), clock.elapsed)
    return AnimateResponse(start_ids=start_ids, commands=commands, simulated_seconds=round(clock.elapsed, 6))


@app.post("/api/render", response_model=RenderResponse)
async def render(req: DiagramRequest):
    text = _source_text(req)
    if text is None:
        return _missing_source()
    controller = _controller()
    advisory = controller.generate_diagram(text)
    if advisory.level in ("warning", "error"):
        return JSONResponse(status_code=400, content={"error": advisory.message})
    stats = controller.stats()
    return RenderResponse(
        svg_text=controller.canvas.to_svg(),
        statistics={k: v for k, v in stats.items() if k != "animation"},
    )
