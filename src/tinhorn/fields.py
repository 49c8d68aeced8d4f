"""Field name hashing and hash-first field dispatch.

Templates hash every tag name once, at compile time. Record adapters hash
their field names once, when the type is registered. At render time a lookup
is a dictionary probe on the hash followed by a literal name comparison inside
the (almost always single-entry) bucket, so a hash collision can never render
the wrong field.
"""

import hashlib
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

Hasher = Callable[[str], int]


def field_hash(name: str) -> int:
    """Return the stable 64-bit hash of a field name.

    Uses an 8-byte BLAKE2b digest so values are identical across processes
    (unlike the salted built-in ``hash``).

    Args:
        name: Literal field name as written in the template

    Returns:
        Unsigned 64-bit integer
    """
    digest = hashlib.blake2b(name.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "little")


@dataclass(frozen=True)
class FieldSpec:
    """One template-visible field of a record type.

    Attributes:
        name: Name templates use to reach the field
        attr: Attribute read from the record instance
        hash: Precomputed hash of ``name``
        markdown: Render variable tags for this field as markdown
    """

    name: str
    attr: str
    hash: int
    markdown: bool = False


class FieldTable:
    """Hash-keyed lookup table over the visible fields of one record type."""

    def __init__(self, fields: Iterable[FieldSpec]) -> None:
        self._fields = tuple(fields)
        self._buckets: dict[int, list[FieldSpec]] = {}
        for spec in self._fields:
            self._buckets.setdefault(spec.hash, []).append(spec)

    @classmethod
    def from_names(
        cls,
        names: Iterable[str],
        hasher: Hasher = field_hash,
    ) -> "FieldTable":
        """Build a table where every template name reads the same attribute."""
        return cls(FieldSpec(name=name, attr=name, hash=hasher(name)) for name in names)

    def lookup(self, hash: int, name: str) -> FieldSpec | None:
        """Find the field for a tag.

        Args:
            hash: Hash of the tag name computed by the template compiler
            name: Literal tag name, compared case-sensitively

        Returns:
            Matching field spec, or None on a miss
        """
        bucket = self._buckets.get(hash)
        if not bucket:
            return None
        for spec in bucket:
            if spec.name == name:
                return spec
        return None

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)
