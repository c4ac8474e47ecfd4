"""umlflow: PlantUML sequence-diagram parsing and flow animation."""

__version__ = "0.1.0"
