"""Mustache-style template compiler and section renderer.

Templates compile once into a flat, immutable tuple of blocks. Each block is
the literal text preceding a tag plus the tag itself; a section tag records
how many of the following blocks belong to it (its closing tag included).
Rendering walks the blocks and hands every tag to the content protocol, which
recurses back into ``Section.render_once`` for nested sections.

Supported tags:
    {{name}}              escaped variable
    {{{name}}} {{&name}}  unescaped variable
    {{#name}}...{{/name}} section
    {{^name}}...{{/name}} inverse section
    {{! comment }}        dropped
    {{.}}                 the current content itself

A compiled template holds no per-render state and can be shared between
threads.
"""

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, TextIO

from tinhorn.content import Content, as_content
from tinhorn.encoding import Encoder, StreamEncoder, StringEncoder
from tinhorn.errors import TemplateError
from tinhorn.fields import field_hash

logger = logging.getLogger(__name__)

# Tag name referring to the current content instead of one of its fields
IMPLICIT_ITERATOR = "."

_TAG_RE = re.compile(
    r"\{\{\{\s*(?P<raw>.*?)\s*\}\}\}"
    r"|\{\{(?P<sigil>[#^/!&]?)\s*(?P<name>.*?)\s*\}\}",
    re.DOTALL,
)


class Tag(Enum):
    """Kind of tag that ends a block."""

    ESCAPED = "escaped"
    UNESCAPED = "unescaped"
    SECTION = "section"
    INVERSE = "inverse"
    CLOSING = "closing"
    TAIL = "tail"


@dataclass(frozen=True)
class Block:
    """Literal text followed by one tag.

    Attributes:
        html: Text written verbatim before the tag
        tag: Tag kind
        name: Tag name (empty for CLOSING/TAIL text holders)
        hash: Precomputed field_hash of name
        children: Number of blocks nested under a SECTION/INVERSE tag
    """

    html: str
    tag: Tag
    name: str = ""
    hash: int = 0
    children: int = 0


@dataclass(frozen=True)
class Section:
    """Immutable view over a run of compiled blocks.

    Attributes:
        template: Owning template, used for capacity hints
        start: Index of the first block
        end: Index one past the last block
    """

    template: "Template"
    start: int
    end: int

    def render_once(self, value: Any, encoder: Encoder) -> None:
        """Render this section's blocks once against a content value."""
        content = as_content(value)
        blocks = self.template.blocks
        index = self.start

        while index < self.end:
            block = blocks[index]
            index += 1

            if block.html:
                encoder.write_unescaped(block.html)

            if block.tag is Tag.ESCAPED:
                if block.name == IMPLICIT_ITERATOR:
                    content.render_escaped(encoder)
                else:
                    content.render_field_escaped(block.hash, block.name, encoder)
            elif block.tag is Tag.UNESCAPED:
                if block.name == IMPLICIT_ITERATOR:
                    content.render_unescaped(encoder)
                else:
                    content.render_field_unescaped(block.hash, block.name, encoder)
            elif block.tag is Tag.SECTION or block.tag is Tag.INVERSE:
                nested = Section(self.template, index, index + block.children)
                index += block.children
                self._render_nested(content, block, nested, encoder)

    @staticmethod
    def _render_nested(
        content: Content, block: Block, nested: "Section", encoder: Encoder
    ) -> None:
        if block.tag is Tag.SECTION:
            if block.name == IMPLICIT_ITERATOR:
                content.render_section(nested, encoder)
            else:
                content.render_field_section(block.hash, block.name, nested, encoder)
        elif block.name == IMPLICIT_ITERATOR:
            content.render_inverse(nested, encoder)
        else:
            content.render_field_inverse(block.hash, block.name, nested, encoder)


def compile_blocks(source: str) -> tuple[Block, ...]:
    """Compile template source into blocks.

    Args:
        source: Template text

    Returns:
        Tuple of blocks in document order

    Raises:
        TemplateError: On an unclosed tag or section, a mismatched or stray
            closing tag, or an empty tag name
    """
    blocks: list[Block] = []
    # (block index, name, offset) of every open section
    open_sections: list[tuple[int, str, int]] = []
    pending = ""
    position = 0

    for match in _TAG_RE.finditer(source):
        text = source[position:match.start()]
        _check_text(text, position)
        pending += text
        position = match.end()

        if match.group("raw") is not None:
            tag, name = Tag.UNESCAPED, match.group("raw")
        else:
            sigil = match.group("sigil")
            name = match.group("name")
            if sigil == "!":
                continue
            tag = {
                "": Tag.ESCAPED,
                "&": Tag.UNESCAPED,
                "#": Tag.SECTION,
                "^": Tag.INVERSE,
                "/": Tag.CLOSING,
            }[sigil]

        if not name:
            raise TemplateError("Empty tag name", match.start())

        if tag is Tag.CLOSING:
            if not open_sections:
                raise TemplateError(f"Closing tag {name!r} without open section", match.start())
            opened_at, opened_name, opened_offset = open_sections.pop()
            if opened_name != name:
                raise TemplateError(
                    f"Closing tag {name!r} does not match section {opened_name!r} "
                    f"opened at offset {opened_offset}",
                    match.start(),
                )
            blocks.append(Block(pending, Tag.CLOSING))
            blocks[opened_at] = replace(
                blocks[opened_at], children=len(blocks) - opened_at - 1
            )
        else:
            if tag in (Tag.SECTION, Tag.INVERSE):
                open_sections.append((len(blocks), name, match.start()))
            blocks.append(Block(pending, tag, name, field_hash(name)))
        pending = ""

    tail = source[position:]
    _check_text(tail, position)
    pending += tail

    if open_sections:
        _, name, offset = open_sections[-1]
        raise TemplateError(f"Unclosed section {name!r}", offset)

    if pending:
        blocks.append(Block(pending, Tag.TAIL))

    return tuple(blocks)


def _check_text(text: str, offset: int) -> None:
    unclosed = text.find("{{")
    if unclosed != -1:
        raise TemplateError("Unclosed tag", offset + unclosed)


class Template:
    """A compiled template.

    Usage:
        template = Template("Hello, {{name}}!")
        template.render({"name": "World"})
    """

    def __init__(self, source: str) -> None:
        """Compile template source.

        Args:
            source: Template text

        Raises:
            TemplateError: If the source is malformed
        """
        self.source = source
        self.blocks = compile_blocks(source)
        self._capacity_hint = sum(
            len(block.html.encode("utf-8", "surrogatepass")) for block in self.blocks
        )
        logger.debug(
            "Compiled template (%d blocks, %d literal bytes)",
            len(self.blocks),
            self._capacity_hint,
        )

    @classmethod
    def from_file(cls, path: Path, encoding: str = "utf-8") -> "Template":
        """Compile a template read from a file."""
        return cls(path.read_text(encoding=encoding))

    def capacity_hint(self) -> int:
        """Byte length of the template's literal text."""
        return self._capacity_hint

    def section(self) -> Section:
        """Section spanning the whole template."""
        return Section(self, 0, len(self.blocks))

    def render_with(self, value: Any, encoder: Encoder) -> None:
        """Render into an existing encoder.

        The encoder is pre-sized from the root content's hint alone. Record
        hints already include the template's literal text.

        Encoder errors propagate; output written before the failure stays.
        """
        content = as_content(value)
        capacity = content.capacity_hint(self)
        encoder.reserve(capacity)
        logger.debug("Rendering template (capacity hint %d)", capacity)
        self.section().render_once(content, encoder)

    def render(self, value: Any, markdown_extensions: tuple[str, ...] = ()) -> str:
        """Render to a string.

        Args:
            value: Root content (any value ``as_content`` accepts)
            markdown_extensions: Python-Markdown extensions for markdown fields

        Returns:
            Rendered text
        """
        encoder = StringEncoder(markdown_extensions=markdown_extensions)
        self.render_with(value, encoder)
        return encoder.finish()

    def render_to_writer(
        self,
        value: Any,
        writer: TextIO,
        markdown_extensions: tuple[str, ...] = (),
    ) -> None:
        """Render straight to a text stream."""
        self.render_with(value, StreamEncoder(writer, markdown_extensions=markdown_extensions))

    def render_to_file(
        self,
        value: Any,
        path: Path,
        encoding: str = "utf-8",
        markdown_extensions: tuple[str, ...] = (),
    ) -> Path:
        """Render to a file, creating parent directories as needed.

        Returns:
            Path to the written file
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding=encoding) as f:
            self.render_to_writer(value, f, markdown_extensions=markdown_extensions)
        logger.info("Wrote rendered template to %s", path)
        return path
