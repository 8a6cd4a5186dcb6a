"""The query registry: every known query and table stub, keyed by name.

Queries are ingested in batches.  Each entry is rendered, parsed and
resolved by the front end; the tables it reads become its dependencies.
Once a batch is stored, any dependency that does not name a known query is
registered as a :class:`~querygraph.models.resource.TableQuery` leaf.

Typical usage::

    collection = QueryCollection()
    report = collection.register([RawQuery("q1", "SELECT * FROM arcana")])
    collection.edges()   # [(id("arcana"), id("q1"))]
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field

from querygraph.loader.template import UnresolvedVariableError, extract_ref_names, render_template
from querygraph.models.resource import (
    NodeId,
    Query,
    QueryKind,
    RawQuery,
    TableQuery,
    resource_id,
    validate_resource_name,
)
from querygraph.parser.frontend import (
    QueryFrontEndError,
    QueryResolveError,
    SourceSchema,
    parse_and_resolve,
)
from querygraph.registry.id_registry import IdCollisionError, ResourceIdMap

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions & results
# ---------------------------------------------------------------------------


class QueryNameError(QueryFrontEndError):
    """Raised for an entry whose name is empty or not a string."""


class RegistrationError(Exception):
    """Raised by a strict registration when any entry failed the front end."""

    def __init__(self, failures: Mapping[str, QueryFrontEndError]) -> None:
        self.failures = dict(failures)
        names = ", ".join(sorted(self.failures))
        super().__init__(f"{len(self.failures)} queries failed to register: {names}")


@dataclass
class RegistrationReport:
    """Per-batch outcome of :meth:`QueryCollection.register`."""

    registered: list[str] = field(default_factory=list)
    replaced: list[str] = field(default_factory=list)
    discovered_tables: list[str] = field(default_factory=list)
    failures: dict[str, QueryFrontEndError] = field(default_factory=dict)
    # ref() targets that name no registered query, keyed by referring query.
    unresolved_refs: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


class QueryCollection:
    """Registry of queries and table stubs with name <-> id lookups.

    The query map and the id map always hold the same set of names.  Entries
    are never removed; re-registering a name replaces its entry.

    Parameters
    ----------
    dialect:
        Dialect the query text is written in (``None`` = generic SQL).
    schema:
        Optional source schema every query must resolve against.
    variables:
        Values for ``{{ var('...') }}`` macros.
    """

    def __init__(
        self,
        *,
        dialect: str | None = None,
        schema: SourceSchema | None = None,
        variables: Mapping[str, str] | None = None,
    ) -> None:
        self.dialect = dialect
        self.schema = schema
        self.variables = dict(variables or {})
        self._queries: dict[str, QueryKind] = {}
        self._ids = ResourceIdMap()

    # -- ingestion --

    def prepare_query(self, name: str, text: str) -> Query:
        """Render, parse and resolve one entry into a :class:`Query`.

        Raises
        ------
        QueryFrontEndError
            If the text cannot be rendered, parsed, or resolved.
        """
        try:
            rendered = render_template(text, self.variables)
        except UnresolvedVariableError as exc:
            raise QueryResolveError(text[:200], str(exc)) from exc

        resolved = parse_and_resolve(rendered, dialect=self.dialect, schema=self.schema)
        return Query(
            id=resource_id(name),
            name=name,
            resolved=resolved,
            dependencies=tuple(resolved.referenced_tables()),
        )

    def register(self, raw_queries: Iterable[RawQuery], *, strict: bool = False) -> RegistrationReport:
        """Ingest a batch of raw queries.

        Entries the front end rejects are left out of the registry and
        reported in :attr:`RegistrationReport.failures`.  With
        ``strict=True`` any such failure raises :class:`RegistrationError`
        and nothing in the batch is stored.

        Entries with an empty or non-string name are failures like any other,
        reported under the name as given.

        Raises
        ------
        RegistrationError
            In strict mode, if any entry failed.
        IdCollisionError
            If an incoming name hashes to an id owned by another name.  The
            registry is left unchanged.
        """
        report = RegistrationReport()
        parsed: dict[str, Query] = {}
        refs: dict[str, list[str]] = {}

        for raw in raw_queries:
            try:
                name = validate_resource_name(raw.name)
            except ValueError as exc:
                key = str(raw.name)
                logger.warning("Dropping query '%s': %s", key, exc)
                report.failures[key] = QueryNameError(str(raw.text)[:200], str(exc))
                continue

            try:
                parsed[name] = self.prepare_query(name, raw.text)
                refs[name] = extract_ref_names(raw.text)
                report.failures.pop(name, None)
            except QueryFrontEndError as exc:
                logger.warning("Dropping query '%s': %s", name, exc.reason)
                parsed.pop(name, None)
                report.failures[name] = exc

        if strict and report.failures:
            raise RegistrationError(report.failures)

        new_tables = self._plan_table_stubs(parsed)
        self._check_collisions(list(parsed.values()) + new_tables)

        for name, query in parsed.items():
            if name in self._queries:
                logger.info("Replacing existing entry '%s'", name)
                report.replaced.append(name)
            self._ids.insert(name, query.id)
            self._queries[name] = query
            report.registered.append(name)

        for table in new_tables:
            logger.debug("Discovered source table '%s'", table.name)
            self._ids.insert(table.name, table.id)
            self._queries[table.name] = table
            report.discovered_tables.append(table.name)

        for name in parsed:
            missing = [r for r in refs.get(name, []) if not isinstance(self._queries.get(r), Query)]
            if missing:
                logger.warning("Query '%s' refs undefined queries: %s", name, missing)
                report.unresolved_refs[name] = missing

        logger.info(
            "Registered %d queries (%d failed, %d new tables); registry holds %d entries",
            len(report.registered),
            len(report.failures),
            len(report.discovered_tables),
            len(self._queries),
        )
        return report

    def _plan_table_stubs(self, incoming: Mapping[str, Query]) -> list[TableQuery]:
        """Return stubs for every dependency that will not name a known entry."""
        known = set(self._queries) | set(incoming)
        stored = [q for q in self._queries.values() if isinstance(q, Query) and q.name not in incoming]
        missing: set[str] = set()
        for query in stored + list(incoming.values()):
            missing.update(dep for dep in query.dependencies if dep not in known)
        return [TableQuery(id=resource_id(name), name=name) for name in sorted(missing)]

    def _check_collisions(self, entries: list[QueryKind]) -> None:
        seen: dict[NodeId, str] = {}
        for entry in entries:
            self._ids.check(entry.name, entry.id)
            other = seen.setdefault(entry.id, entry.name)
            if other != entry.name:
                raise IdCollisionError(entry.name, other, entry.id)

    # -- lookups --

    def get(self, name: str) -> QueryKind | None:
        return self._queries.get(name)

    def get_id(self, name: str) -> NodeId | None:
        return self._ids.get_id(name)

    def get_name(self, node_id: NodeId) -> str | None:
        return self._ids.get_name(node_id)

    def get_query_dependencies(self, name: str) -> list[NodeId]:
        """Return the ids of everything *name* depends on (``[]`` if unknown)."""
        entry = self._queries.get(name)
        if entry is None:
            return []
        dep_ids: list[NodeId] = []
        for dep in entry.dependencies:
            dep_id = self._ids.get_id(dep)
            if dep_id is not None:
                dep_ids.append(dep_id)
        return dep_ids

    def queries(self) -> list[Query]:
        return [q for q in self._queries.values() if isinstance(q, Query)]

    def tables(self) -> list[TableQuery]:
        return [t for t in self._queries.values() if isinstance(t, TableQuery)]

    def ids(self) -> list[NodeId]:
        return self._ids.ids()

    def edges(self) -> list[tuple[NodeId, NodeId]]:
        """Every ``(dependency_id, dependent_id)`` pair, ordered by dependent name."""
        edges: list[tuple[NodeId, NodeId]] = []
        for name in sorted(self._queries):
            entry = self._queries[name]
            for dep_id in self.get_query_dependencies(name):
                edges.append((dep_id, entry.id))
        return edges

    def values(self) -> list[QueryKind]:
        return list(self._queries.values())

    def items(self) -> list[tuple[str, QueryKind]]:
        return list(self._queries.items())

    def __getitem__(self, name: str) -> QueryKind:
        return self._queries[name]

    def __contains__(self, name: object) -> bool:
        return name in self._queries

    def __iter__(self) -> Iterator[str]:
        return iter(self._queries)

    def __len__(self) -> int:
        return len(self._queries)

    def __repr__(self) -> str:
        return f"QueryCollection({len(self.queries())} queries, {len(self.tables())} tables)"
