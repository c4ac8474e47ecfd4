"""PlantUML sequence-diagram parsing."""

from umlflow.parser.plantuml_parser import PlantUMLParser, auto_layout, parse_plantuml
from umlflow.parser.samples import SAMPLES, get_sample, sample_keys

__all__ = [
    "PlantUMLParser",
    "auto_layout",
    "parse_plantuml",
    "SAMPLES",
    "get_sample",
    "sample_keys",
]
