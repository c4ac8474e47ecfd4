"""File utilities."""
from __future__ import annotations

from pathlib import Path


def ensure_dir(path: str) -> Path:
    """Ensure directory exists and return Path."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def read_text_file(path: str) -> str:
    """Read a diagram source file as UTF-8.

    Raises FileNotFoundError for a missing path and ValueError when the file
    is not valid UTF-8 text.
    """
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Missing file: {path}")
    try:
        return p.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        raise ValueError(f"Not a UTF-8 text file: {p.name}")


def write_text_file(directory: str, name: str, content: str) -> Path:
    """Write ``content`` to ``directory/name``, creating the directory first."""
    target = ensure_dir(directory) / name
    target.write_text(content, encoding="utf-8")
    return target
