"""tinhorn - logic-less Mustache-style templates over a content protocol.

Application data reaches templates through ``Content`` adapters: built-in
ones for text, booleans, numbers, optional and fallible values, sequences and
string-keyed mappings, plus ``@renderable`` for dataclasses. Field names are
hashed once when a template compiles, so lookups stay cheap across repeated
renders of the same template.
"""

from tinhorn.content import (
    Content,
    Fallible,
    MappingContent,
    Optional,
    SequenceContent,
    TextContent,
    as_content,
)
from tinhorn.encoding import Encoder, StreamEncoder, StringEncoder
from tinhorn.errors import EncoderError, TemplateError, TinhornError
from tinhorn.fields import FieldTable, field_hash
from tinhorn.record import field_options, renderable
from tinhorn.template import Section, Template

__version__ = "0.1.0"

__all__ = [
    "Content",
    "Encoder",
    "EncoderError",
    "Fallible",
    "FieldTable",
    "MappingContent",
    "Optional",
    "Section",
    "SequenceContent",
    "StreamEncoder",
    "StringEncoder",
    "Template",
    "TemplateError",
    "TextContent",
    "TinhornError",
    "as_content",
    "field_hash",
    "field_options",
    "renderable",
]
