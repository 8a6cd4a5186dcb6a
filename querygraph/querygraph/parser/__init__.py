"""Query-language front end."""

from querygraph.parser.frontend import (
    QueryFrontEndError,
    QueryParseError,
    QueryResolveError,
    QueryTranslateError,
    ResolvedQuery,
    SourceSchema,
    parse_and_resolve,
    translate,
)

__all__ = [
    "QueryFrontEndError",
    "QueryParseError",
    "QueryResolveError",
    "QueryTranslateError",
    "ResolvedQuery",
    "SourceSchema",
    "parse_and_resolve",
    "translate",
]
