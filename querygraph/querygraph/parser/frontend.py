"""Query-language front end backed by SQLGlot.

Turns raw query text into a :class:`ResolvedQuery` -- the parsed statement
plus the names of every table it reads from.  When a source schema is
supplied, column references are bound against it so that queries touching
unknown columns are rejected up front instead of at execution time.

Typical usage::

    resolved = parse_and_resolve("SELECT name FROM employees WHERE age > 35")
    resolved.referenced_tables()        # ["employees"]
    translate(resolved, "duckdb")       # dialect-specific SQL text
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

import sqlglot
from sqlglot import exp
from sqlglot.errors import ErrorLevel, ParseError, SqlglotError
from sqlglot.optimizer.qualify import qualify
from sqlglot.optimizer.scope import build_scope

logger = logging.getLogger(__name__)

SourceSchema = Mapping[str, Mapping[str, str]]
"""``table -> {column: type}`` mapping used to bind column references."""


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class QueryFrontEndError(Exception):
    """Base class for every failure raised while turning text into a query."""

    def __init__(self, query_fragment: str, reason: str) -> None:
        self.query_fragment = query_fragment
        self.reason = reason
        super().__init__(reason)


class QueryParseError(QueryFrontEndError):
    """Raised when query text cannot be parsed into a single statement."""


class QueryResolveError(QueryFrontEndError):
    """Raised when a parsed query cannot be bound against the source schema."""


class QueryTranslateError(QueryFrontEndError):
    """Raised when a resolved query cannot be rendered in a target dialect."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ResolvedQuery:
    """A parsed, optionally schema-bound, query statement.

    ``tables`` is the deduplicated, sorted set of table names the statement
    reads from; CTE names and sub-query aliases are excluded.
    """

    text: str
    expression: exp.Expression = field(compare=False, repr=False)
    tables: tuple[str, ...] = ()
    dialect: str | None = None

    def referenced_tables(self) -> list[str]:
        return list(self.tables)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _qualified_table_name(table: exp.Table) -> str:
    """Return ``catalog.db.name`` for a table node, omitting missing parts."""
    parts = [table.catalog, table.db, table.name]
    return ".".join(p for p in parts if p)


def _collect_cte_names(ast: exp.Expression) -> set[str]:
    cte_names: set[str] = set()
    for cte_node in ast.find_all(exp.CTE):
        if cte_node.alias:
            cte_names.add(cte_node.alias)
    return cte_names


def _extract_tables(ast: exp.Expression) -> tuple[str, ...]:
    tables: set[str] = set()

    root_scope = build_scope(ast)
    if root_scope is None:
        # Statements without a query scope (DDL, DML) are walked directly.
        # Only an unqualified name can refer to a CTE.
        cte_names = _collect_cte_names(ast)
        for table in ast.find_all(exp.Table):
            if not table.name:
                continue
            if not table.db and not table.catalog and table.name in cte_names:
                continue
            tables.add(_qualified_table_name(table))
    else:
        # CTE and derived-table references resolve to child scopes, so every
        # exp.Table source left here is a real table.
        for scope in root_scope.traverse():
            for source in scope.sources.values():
                if isinstance(source, exp.Table) and source.name:
                    tables.add(_qualified_table_name(source))

    return tuple(sorted(tables))


def _fragment(text: str) -> str:
    return text[:200]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_and_resolve(
    text: str,
    *,
    dialect: str | None = None,
    schema: SourceSchema | None = None,
) -> ResolvedQuery:
    """Parse *text* and resolve the tables it depends on.

    Parameters
    ----------
    text:
        Exactly one query statement.
    dialect:
        SQLGlot dialect name to read *text* as.  ``None`` selects the
        generic dialect.
    schema:
        Optional source schema.  When given, every column reference must
        bind to a column of a table in the schema.

    Returns
    -------
    ResolvedQuery
        The parsed statement and its referenced table names.

    Raises
    ------
    QueryParseError
        If *text* is empty, malformed, or holds more than one statement.
    QueryResolveError
        If *schema* is given and a reference cannot be bound to it.
    """
    if not text or not text.strip():
        raise QueryParseError(_fragment(text or ""), "Query text is empty.")

    try:
        statements = [
            s for s in sqlglot.parse(text, read=dialect, error_level=ErrorLevel.RAISE) if s is not None
        ]
    except ParseError as exc:
        raise QueryParseError(_fragment(text), f"Failed to parse query: {exc}") from exc

    if len(statements) != 1:
        raise QueryParseError(
            _fragment(text),
            f"Expected exactly one statement, found {len(statements)}.",
        )

    ast = statements[0]
    tables = _extract_tables(ast)

    if schema is not None:
        try:
            ast = qualify(
                ast.copy(),
                dialect=dialect,
                schema={k: dict(v) for k, v in schema.items()},
                validate_qualify_columns=True,
            )
        except SqlglotError as exc:
            raise QueryResolveError(_fragment(text), f"Failed to resolve query: {exc}") from exc

    return ResolvedQuery(text=text, expression=ast, tables=tables, dialect=dialect)


def translate(resolved: ResolvedQuery, target_dialect: str, *, pretty: bool = False) -> str:
    """Render *resolved* as SQL text in *target_dialect*.

    Only used when queries are eventually executed; the graph core never
    calls it.
    """
    try:
        return resolved.expression.sql(dialect=target_dialect, pretty=pretty)
    except SqlglotError as exc:
        logger.warning(
            "Translation to %s failed: %s",
            target_dialect,
            exc,
        )
        raise QueryTranslateError(_fragment(resolved.text), f"Failed to translate query: {exc}") from exc
