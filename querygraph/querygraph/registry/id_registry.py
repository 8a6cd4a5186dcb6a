"""Bidirectional mapping between resource names and their numeric ids."""

from __future__ import annotations

from collections.abc import Iterator

from querygraph.models.resource import NodeId


class IdCollisionError(Exception):
    """Raised when two different names hash to the same resource id.

    Attributes
    ----------
    name:
        The name being inserted.
    existing_name:
        The name that already owns ``resource_id``.
    resource_id:
        The contested id.
    """

    def __init__(self, name: str, existing_name: str, resource_id: NodeId) -> None:
        self.name = name
        self.existing_name = existing_name
        self.resource_id = resource_id
        super().__init__(
            f"Resource id collision: '{name}' and '{existing_name}' both map to id {resource_id}"
        )


class ResourceIdMap:
    """Forward (name -> id) and reverse (id -> name) lookups kept in sync."""

    def __init__(self) -> None:
        self._by_name: dict[str, NodeId] = {}
        self._by_id: dict[NodeId, str] = {}

    def check(self, name: str, resource_id: NodeId) -> None:
        """Raise :class:`IdCollisionError` if *resource_id* belongs to another name."""
        existing = self._by_id.get(resource_id)
        if existing is not None and existing != name:
            raise IdCollisionError(name, existing, resource_id)

    def insert(self, name: str, resource_id: NodeId) -> None:
        """Insert both directions of the mapping.

        Re-inserting an existing pair is a no-op.  If *name* is already
        mapped to a different id, the stale reverse entry is dropped.
        """
        self.check(name, resource_id)
        previous = self._by_name.get(name)
        if previous is not None and previous != resource_id:
            del self._by_id[previous]
        self._by_name[name] = resource_id
        self._by_id[resource_id] = name

    def get_id(self, name: str) -> NodeId | None:
        return self._by_name.get(name)

    def get_name(self, resource_id: NodeId) -> str | None:
        return self._by_id.get(resource_id)

    def names(self) -> list[str]:
        return list(self._by_name)

    def ids(self) -> list[NodeId]:
        return list(self._by_id)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_name)

    def __len__(self) -> int:
        return len(self._by_name)

    def __repr__(self) -> str:
        return f"ResourceIdMap({len(self)} entries)"
