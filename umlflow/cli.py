"""CLI interface."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

import typer

from umlflow.animation.flow_graph import build_flow_graph, find_path, preview_path
from umlflow.app import DiagramController, SimulatedClock
from umlflow.canvas import CanvasCommand, SvgCanvas
from umlflow.parser import get_sample, parse_plantuml, sample_keys
from umlflow.utils.config import settings
from umlflow.utils.file_utils import read_text_file, write_text_file

app = typer.Typer(add_completion=False)

FILE_OPTION = typer.Option(None, "--file", "-f", help="Path to a PlantUML file.", show_default=False)
TEXT_OPTION = typer.Option(None, "--text", "-t", help="Inline PlantUML text.")
SAMPLE_OPTION = typer.Option(None, "--sample", "-s", help="Built-in sample key.")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level.")):
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _load_text(file: Optional[str], text: Optional[str], sample: Optional[str]) -> str:
    if file:
        try:
            return read_text_file(file)
        except (FileNotFoundError, ValueError) as exc:
            raise typer.BadParameter(str(exc), param_hint="--file")
    if text is not None:
        return text
    if sample is not None:
        return get_sample(sample, settings.default_sample)
    raise typer.BadParameter("Provide --file, --text or --sample")


def _echo_command(command: CanvasCommand) -> None:
    typer.echo(json.dumps(command.to_dict()))


@app.command()
def parse(file: Optional[str] = FILE_OPTION, text: Optional[str] = TEXT_OPTION, sample: Optional[str] = SAMPLE_OPTION):
    """Parse a diagram and print the model as JSON."""
    typer.echo(parse_plantuml(_load_text(file, text, sample)).to_json())


@app.command()
def samples():
    """List built-in sample keys."""
    for key in sample_keys():
        typer.echo(key)


@app.command()
def preview(
    entity: str = typer.Option(..., "--entity", "-e", help="Entity id to start from."),
    file: Optional[str] = FILE_OPTION,
    text: Optional[str] = TEXT_OPTION,
    sample: Optional[str] = SAMPLE_OPTION,
):
    """Print every entity reachable from ENTITY in depth-first order."""
    graph = build_flow_graph(parse_plantuml(_load_text(file, text, sample)).connections)
    typer.echo(json.dumps(preview_path(graph, entity)))


@app.command()
def path(
    from_id: str = typer.Option(..., "--from", help="Source entity id."),
    to_id: str = typer.Option(..., "--to", help="Destination entity id."),
    file: Optional[str] = FILE_OPTION,
    text: Optional[str] = TEXT_OPTION,
    sample: Optional[str] = SAMPLE_OPTION,
):
    """Print the shortest message path between two entities."""
    graph = build_flow_graph(parse_plantuml(_load_text(file, text, sample)).connections)
    result = find_path(graph, from_id, to_id)
    if result is None:
        typer.echo(f"No path from {from_id} to {to_id}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(result))


@app.command()
def animate(
    start: Optional[str] = typer.Option(None, "--start", help="Entity to animate from; default animates every source."),
    speed: float = typer.Option(settings.animation_speed, "--speed", help="Animation speed multiplier."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Skip real delays."),
    file: Optional[str] = FILE_OPTION,
    text: Optional[str] = TEXT_OPTION,
    sample: Optional[str] = SAMPLE_OPTION,
):
    """Run the flow animation and stream canvas commands as JSON lines."""
    source = _load_text(file, text, sample)
    clock = SimulatedClock() if dry_run else None
    canvas = SvgCanvas(settings.canvas_width, settings.canvas_height)
    controller = DiagramController(canvas=canvas, sleep=clock)

    advisory = controller.generate_diagram(source)
    if advisory.level in ("warning", "error"):
        typer.echo(advisory.message, err=True)
        raise typer.Exit(code=1)
    controller.engine.set_speed(speed)

    canvas.listener = _echo_command
    if start is not None:
        advisory = asyncio.run(controller.click_entity(start))
    else:
        advisory = asyncio.run(controller.start_full_animation())
    if advisory.level == "warning":
        typer.echo(advisory.message, err=True)
        raise typer.Exit(code=1)
    if clock is not None:
        typer.echo(f"Simulated {clock.elapsed:.2f}s", err=True)


@app.command()
def render(
    output_name: str = typer.Option("diagram", "--output-name"),
    file: Optional[str] = FILE_OPTION,
    text: Optional[str] = TEXT_OPTION,
    sample: Optional[str] = SAMPLE_OPTION,
):
    """Lay out a diagram and write it as SVG under the output directory."""
    controller = DiagramController()
    advisory = controller.generate_diagram(_load_text(file, text, sample))
    if advisory.level in ("warning", "error"):
        typer.echo(advisory.message, err=True)
        raise typer.Exit(code=1)
    target = write_text_file(settings.output_dir, f"{output_name}.svg", controller.canvas.to_svg())
    typer.echo(json.dumps({"svg_path": str(target), **{k: v for k, v in controller.stats().items() if k != "animation"}}, indent=2))


if __name__ == "__main__":
    app()
