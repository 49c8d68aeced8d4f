"""Content adapters for user-defined record types.

Decorating a dataclass with ``@renderable`` registers an adapter for it. The
field table is built and every field name hashed once, at decoration time,
so a render only pays for a dictionary probe per tag.

Field behavior is tuned through dataclass field metadata:

    @renderable
    @dataclass
    class Post:
        title: str
        body: str = field(metadata=field_options(markdown=True))
        slug: str = field(metadata=field_options(rename="id"))
        draft_notes: str = field(default="", metadata=field_options(skip=True))
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from tinhorn.content import Content, as_content
from tinhorn.encoding import Encoder
from tinhorn.fields import FieldSpec, FieldTable, Hasher, field_hash

if TYPE_CHECKING:
    from tinhorn.template import Section, Template

logger = logging.getLogger(__name__)

FIELD_OPTIONS_KEY = "tinhorn"

T = TypeVar("T", bound=type)


@dataclass(frozen=True)
class FieldOptions:
    """Per-field rendering options.

    Attributes:
        markdown: Render variable tags through markdown conversion
        skip: Hide the field from templates
        rename: Template name to use instead of the attribute name
    """

    markdown: bool = False
    skip: bool = False
    rename: str | None = None


def field_options(
    *,
    markdown: bool = False,
    skip: bool = False,
    rename: str | None = None,
) -> dict[str, FieldOptions]:
    """Build dataclass field metadata carrying rendering options."""
    return {FIELD_OPTIONS_KEY: FieldOptions(markdown=markdown, skip=skip, rename=rename)}


def build_field_table(cls: type, hasher: Hasher = field_hash) -> FieldTable:
    """Build the field table for a dataclass type.

    Args:
        cls: Dataclass type
        hasher: Field name hash function

    Returns:
        Table of the template-visible fields

    Raises:
        TypeError: If cls is not a dataclass
        ValueError: If two fields end up with the same template name
    """
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"{cls.__name__} must be a dataclass to be renderable")

    specs: list[FieldSpec] = []
    seen: set[str] = set()
    for f in dataclasses.fields(cls):
        options = f.metadata.get(FIELD_OPTIONS_KEY, FieldOptions())
        if options.skip:
            continue
        name = options.rename or f.name
        if name in seen:
            raise ValueError(f"Duplicate template field name {name!r} on {cls.__name__}")
        seen.add(name)
        specs.append(
            FieldSpec(name=name, attr=f.name, hash=hasher(name), markdown=options.markdown)
        )

    return FieldTable(specs)


class RecordContent(Content):
    """Adapter for an instance of a ``@renderable`` type.

    Records are always truthy and have no scalar rendering. Named fields are
    resolved through the type's field table; unknown names render nothing.
    """

    def __init__(self, value: Any, table: FieldTable) -> None:
        self.value = value
        self.table = table

    def _field(self, hash: int, name: str) -> tuple[FieldSpec, Content] | None:
        spec = self.table.lookup(hash, name)
        if spec is None:
            return None
        return spec, as_content(getattr(self.value, spec.attr))

    def capacity_hint(self, template: "Template") -> int:
        hint = template.capacity_hint()
        for spec in self.table:
            hint += as_content(getattr(self.value, spec.attr)).capacity_hint(template)
        return hint

    def render_field_escaped(self, hash: int, name: str, encoder: Encoder) -> None:
        found = self._field(hash, name)
        if found is None:
            return
        spec, field = found
        if spec.markdown:
            field.render_markup(encoder)
        else:
            field.render_escaped(encoder)

    def render_field_unescaped(self, hash: int, name: str, encoder: Encoder) -> None:
        found = self._field(hash, name)
        if found is None:
            return
        spec, field = found
        if spec.markdown:
            field.render_markup(encoder)
        else:
            field.render_unescaped(encoder)

    def render_field_section(
        self, hash: int, name: str, section: "Section", encoder: Encoder
    ) -> None:
        found = self._field(hash, name)
        if found is not None:
            found[1].render_section(section, encoder)

    def render_field_inverse(
        self, hash: int, name: str, section: "Section", encoder: Encoder
    ) -> None:
        found = self._field(hash, name)
        if found is not None:
            found[1].render_inverse(section, encoder)


def renderable(cls: T) -> T:
    """Class decorator making a dataclass usable as template content.

    The class itself is returned unchanged apart from a ``__tinhorn_fields__``
    attribute holding its field table.
    """
    table = build_field_table(cls)
    cls.__tinhorn_fields__ = table  # type: ignore[attr-defined]

    def adapter(value: Any) -> Content:
        return RecordContent(value, table)

    as_content.register(cls, adapter)
    logger.debug("Registered renderable %s (%d fields)", cls.__name__, len(table))
    return cls
