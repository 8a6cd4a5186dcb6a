"""Resource identity and the query kinds held by the registry.

Every query or table known to the engine is addressed by a human-readable
*name* and a stable 64-bit *id* derived from that name.  The id is what the
dependency graph stores; the name is what users type.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from querygraph.parser.frontend import ResolvedQuery

NodeId = int
"""Unsigned 64-bit resource identity."""

NODE_ID_BITS = 64
MAX_NODE_ID = (1 << NODE_ID_BITS) - 1


def validate_resource_name(name: str) -> str:
    """Return *name* stripped of surrounding whitespace.

    Raises
    ------
    ValueError
        If the name is empty once stripped.
    """
    if not isinstance(name, str):
        raise ValueError(f"Resource name must be a string, got {type(name).__name__}")
    cleaned = name.strip()
    if not cleaned:
        raise ValueError("Resource name must not be empty.")
    return cleaned


def resource_id(name: str) -> NodeId:
    """Derive the stable :data:`NodeId` for *name*.

    The id is the 8-byte BLAKE2b digest of the UTF-8 encoded name, read as a
    big-endian unsigned integer.  Identical names always produce identical
    ids across processes and platforms.
    """
    digest = hashlib.blake2b(name.encode("utf-8"), digest_size=NODE_ID_BITS // 8).digest()
    return int.from_bytes(digest, "big")


# ---------------------------------------------------------------------------
# Query kinds
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawQuery:
    """An un-parsed query entry: a resource name and its query text."""

    name: str
    text: str


@dataclass(frozen=True, slots=True)
class Query:
    """A transformation defined by query text.

    ``dependencies`` holds the sorted, deduplicated names of every table or
    query the text reads from.
    """

    id: NodeId
    name: str
    resolved: ResolvedQuery = field(compare=False, repr=False)
    dependencies: tuple[str, ...] = ()

    @property
    def is_table(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class TableQuery:
    """A pre-existing source table referenced by a query but never defined.

    Table stubs are leaves: they have no dependencies of their own.
    """

    id: NodeId
    name: str

    @property
    def dependencies(self) -> tuple[str, ...]:
        return ()

    @property
    def is_table(self) -> bool:
        return True


QueryKind = Union[Query, TableQuery]
