"""The content protocol: how application data supplies values to templates.

Every value that takes part in rendering is seen through a ``Content``
adapter. The base class carries the defaults: a value is truthy, contributes
nothing as a variable, runs a section once when truthy, and has no fields.
Adapters override only what differs, so a tag that does not apply to a value
renders nothing instead of failing.

Adapters borrow the wrapped value for the duration of a render. They never
copy, mutate or retain it.

Usage:
    from tinhorn import Template

    Template("{{#items}}<li>{{name}}</li>{{/items}}").render(
        {"items": [{"name": "A"}, {"name": "B"}]}
    )
"""

from collections.abc import Mapping, Sequence
from functools import singledispatch
from numbers import Number
from typing import TYPE_CHECKING, Any

from tinhorn.encoding import Encoder
from tinhorn.markup import encode_markdown

if TYPE_CHECKING:
    from tinhorn.template import Section, Template

# Advisory size of a rendered boolean or number
SCALAR_CAPACITY_HINT = 5


class Content:
    """Base adapter carrying the default behavior of every operation."""

    def is_truthy(self) -> bool:
        """Whether a plain section runs for this value."""
        return True

    def capacity_hint(self, template: "Template") -> int:
        """Rough number of bytes this value adds when rendered with a template.

        Only used to pre-size output; the value never affects what is
        written.
        """
        return 0

    def render_escaped(self, encoder: Encoder) -> None:
        """Render as a variable, escaping HTML."""

    def render_unescaped(self, encoder: Encoder) -> None:
        """Render as a variable with no escaping."""
        self.render_escaped(encoder)

    def render_markup(self, encoder: Encoder) -> None:
        """Render as a variable after markdown conversion; never escaped."""
        self.render_escaped(encoder)

    def render_section(self, section: "Section", encoder: Encoder) -> None:
        """Render a section with this value as its content."""
        if self.is_truthy():
            section.render_once(self, encoder)

    def render_inverse(self, section: "Section", encoder: Encoder) -> None:
        """Render an inverse section: runs only when this value is falsy."""
        if not self.is_truthy():
            section.render_once(self, encoder)

    def render_field_escaped(self, hash: int, name: str, encoder: Encoder) -> None:
        """Render a named field as an escaped variable."""

    def render_field_unescaped(self, hash: int, name: str, encoder: Encoder) -> None:
        """Render a named field as an unescaped variable."""

    def render_field_section(
        self, hash: int, name: str, section: "Section", encoder: Encoder
    ) -> None:
        """Render a named field as a section."""

    def render_field_inverse(
        self, hash: int, name: str, section: "Section", encoder: Encoder
    ) -> None:
        """Render a named field as an inverse section."""


@singledispatch
def as_content(value: Any) -> Content:
    """Attach the content adapter matching a value's type.

    Unregistered types get the bare defaults: truthy, no text, no fields.
    Register new adapters with ``as_content.register(SomeType)``.
    """
    return Content()


@as_content.register
def _(value: Content) -> Content:
    return value


class TextContent(Content):
    """Adapter for ``str``."""

    def __init__(self, value: str) -> None:
        self.value = value

    def is_truthy(self) -> bool:
        return len(self.value) != 0

    def capacity_hint(self, template: "Template") -> int:
        return len(self.value.encode("utf-8", "surrogatepass"))

    def render_escaped(self, encoder: Encoder) -> None:
        encoder.write_escaped(self.value)

    def render_unescaped(self, encoder: Encoder) -> None:
        encoder.write_unescaped(self.value)

    def render_markup(self, encoder: Encoder) -> None:
        encode_markdown(self.value, encoder)


class BoolContent(Content):
    """Adapter for ``bool``."""

    def __init__(self, value: bool) -> None:
        self.value = value

    def is_truthy(self) -> bool:
        return self.value

    def capacity_hint(self, template: "Template") -> int:
        return SCALAR_CAPACITY_HINT

    def render_escaped(self, encoder: Encoder) -> None:
        # Nothing to escape
        encoder.write_unescaped("true" if self.value else "false")


class NumberContent(Content):
    """Adapter for ints, floats and any other ``numbers.Number``."""

    def __init__(self, value: Number) -> None:
        self.value = value

    def is_truthy(self) -> bool:
        return self.value != 0

    def capacity_hint(self, template: "Template") -> int:
        return SCALAR_CAPACITY_HINT

    def render_escaped(self, encoder: Encoder) -> None:
        # Nothing to escape
        encoder.format_unescaped(self.value)


class Optional(Content):
    """A value that may be absent.

    Bare ``None`` is treated as an absent optional. Wrap explicitly when a
    present value should render its section exactly once instead of using
    its own section behavior (a present list is not iterated).
    """

    def __init__(self, value: Any = None, present: bool | None = None) -> None:
        self.value = value
        self.present = value is not None if present is None else present

    @classmethod
    def absent(cls) -> "Optional":
        return cls(None, present=False)

    def is_truthy(self) -> bool:
        return self.present

    def capacity_hint(self, template: "Template") -> int:
        if self.present:
            return as_content(self.value).capacity_hint(template)
        return 0

    def render_escaped(self, encoder: Encoder) -> None:
        if self.present:
            as_content(self.value).render_escaped(encoder)

    def render_unescaped(self, encoder: Encoder) -> None:
        if self.present:
            as_content(self.value).render_unescaped(encoder)

    def render_markup(self, encoder: Encoder) -> None:
        if self.present:
            as_content(self.value).render_markup(encoder)

    def render_section(self, section: "Section", encoder: Encoder) -> None:
        if self.present:
            section.render_once(self.value, encoder)


class Fallible(Content):
    """Outcome of an operation that either produced a value or failed.

    A failure behaves exactly like an absent value. Its error is kept on the
    adapter for the caller but is never exposed to templates.
    """

    def __init__(self, value: Any = None, error: BaseException | None = None) -> None:
        self.value = value
        self.error = error

    @classmethod
    def success(cls, value: Any) -> "Fallible":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "Fallible":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def is_truthy(self) -> bool:
        return self.ok

    def capacity_hint(self, template: "Template") -> int:
        if self.ok:
            return as_content(self.value).capacity_hint(template)
        return 0

    def render_escaped(self, encoder: Encoder) -> None:
        if self.ok:
            as_content(self.value).render_escaped(encoder)

    def render_unescaped(self, encoder: Encoder) -> None:
        if self.ok:
            as_content(self.value).render_unescaped(encoder)

    def render_markup(self, encoder: Encoder) -> None:
        if self.ok:
            as_content(self.value).render_markup(encoder)

    def render_section(self, section: "Section", encoder: Encoder) -> None:
        if self.ok:
            section.render_once(self.value, encoder)


class SequenceContent(Content):
    """Adapter for lists, tuples and other non-string sequences.

    A section runs once per element, in order, with the element as content.
    Sequences have no scalar rendering.
    """

    def __init__(self, value: Sequence[Any]) -> None:
        self.value = value

    def is_truthy(self) -> bool:
        return len(self.value) != 0

    def render_section(self, section: "Section", encoder: Encoder) -> None:
        for item in self.value:
            section.render_once(item, encoder)


class MappingContent(Content):
    """Adapter for string-keyed mappings (``dict``, ``OrderedDict``, ...).

    Field lookups use the literal key; the precomputed hash is ignored. A
    missing key renders nothing, whereas a key mapped to ``None`` is an
    absent value (its inverse section runs).
    """

    def __init__(self, value: Mapping[str, Any]) -> None:
        self.value = value

    def is_truthy(self) -> bool:
        return len(self.value) != 0

    def render_field_escaped(self, hash: int, name: str, encoder: Encoder) -> None:
        if name in self.value:
            as_content(self.value[name]).render_escaped(encoder)

    def render_field_unescaped(self, hash: int, name: str, encoder: Encoder) -> None:
        if name in self.value:
            as_content(self.value[name]).render_unescaped(encoder)

    def render_field_section(
        self, hash: int, name: str, section: "Section", encoder: Encoder
    ) -> None:
        if name in self.value:
            as_content(self.value[name]).render_section(section, encoder)

    def render_field_inverse(
        self, hash: int, name: str, section: "Section", encoder: Encoder
    ) -> None:
        if name in self.value:
            as_content(self.value[name]).render_inverse(section, encoder)


as_content.register(str, TextContent)
as_content.register(bool, BoolContent)
as_content.register(Number, NumberContent)
as_content.register(Sequence, SequenceContent)
as_content.register(Mapping, MappingContent)


@as_content.register(type(None))
def _(value: None) -> Content:
    return Optional.absent()


@as_content.register
def _(value: BaseException) -> Content:
    return Fallible.failure(value)


@as_content.register(bytes)
@as_content.register(bytearray)
def _(value: bytes) -> Content:
    # Raw bytes are not text and not a sequence of values
    return Content()
