"""Test fixtures for tinhorn.

- Test doubles for the section and encoder collaborators
- Templates and data files used by the CLI integration tests
"""

from pathlib import Path
from typing import Any

from tinhorn.content import as_content
from tinhorn.encoding import Encoder

FIXTURES_DIR = Path(__file__).parent
TEMPLATES_DIR = FIXTURES_DIR / "templates"
DATA_DIR = FIXTURES_DIR / "data"


class RecordingSection:
    """Section stand-in that records every render_once call.

    Each call writes ``body`` followed by the escaped rendering of the
    content it was given.
    """

    def __init__(self, body: str = "") -> None:
        self.body = body
        self.calls: list[Any] = []

    def render_once(self, value: Any, encoder: Encoder) -> None:
        self.calls.append(value)
        encoder.write_unescaped(self.body)
        as_content(value).render_escaped(encoder)


class FailingEncoder(Encoder):
    """Encoder that accepts a number of writes and then fails."""

    def __init__(self, allowed_writes: int = 0) -> None:
        self.allowed_writes = allowed_writes
        self.parts: list[str] = []

    def write_unescaped(self, text: str) -> None:
        if len(self.parts) >= self.allowed_writes:
            raise OSError("disk full")
        self.parts.append(text)
