"""Output sinks for rendering.

An encoder is the single write destination of one render call. Content
adapters only ever call the three write operations below; any exception an
encoder raises aborts the render and propagates unchanged to the caller.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, TextIO

from markupsafe import escape

from tinhorn.errors import EncoderError

logger = logging.getLogger(__name__)


class Encoder(ABC):
    """Abstract write destination for rendered output.

    Attributes:
        markdown_extensions: Python-Markdown extensions used when a value
            is rendered in markdown mode
    """

    markdown_extensions: tuple[str, ...] = ()

    @abstractmethod
    def write_unescaped(self, text: str) -> None:
        """Write text exactly as given."""

    def write_escaped(self, text: str) -> None:
        """Write text with HTML-significant characters entity-escaped.

        ``&``, ``<``, ``>``, ``"`` and ``'`` are escaped. The value is coerced
        to a plain ``str`` first, so pre-marked ``Markup`` strings are escaped
        like any other text.
        """
        self.write_unescaped(str(escape(str(text))))

    def format_unescaped(self, value: Any) -> None:
        """Write a number (or any value with a safe ``format``) unescaped."""
        self.write_unescaped(format(value))

    def reserve(self, capacity: int) -> None:
        """Receive an advisory size hint before rendering starts.

        The default ignores it. Implementations must never let the hint
        change what gets written.
        """


class StringEncoder(Encoder):
    """Collects output in memory.

    Usage:
        encoder = StringEncoder()
        section.render_once(content, encoder)
        text = encoder.finish()
    """

    def __init__(
        self,
        capacity: int = 0,
        markdown_extensions: tuple[str, ...] = (),
    ) -> None:
        self._parts: list[str] = []
        self.capacity = capacity
        self.markdown_extensions = markdown_extensions

    def write_unescaped(self, text: str) -> None:
        self._parts.append(text)

    def reserve(self, capacity: int) -> None:
        # Python strings cannot be pre-sized; the hint is kept for diagnostics
        self.capacity = max(self.capacity, capacity)

    def finish(self) -> str:
        """Return everything written so far."""
        return "".join(self._parts)


class StreamEncoder(Encoder):
    """Writes output straight to a text stream.

    Stream failures are raised as EncoderError. Nothing already written is
    rolled back.
    """

    def __init__(
        self,
        stream: TextIO,
        markdown_extensions: tuple[str, ...] = (),
    ) -> None:
        self.stream = stream
        self.markdown_extensions = markdown_extensions
        self.written = 0

    def write_unescaped(self, text: str) -> None:
        try:
            self.stream.write(text)
        except OSError as e:
            logger.debug("Stream write failed after %d characters: %s", self.written, e)
            raise EncoderError(f"Failed to write output: {e}") from e
        self.written += len(text)
