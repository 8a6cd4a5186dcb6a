"""Render ``{{ var('...') }}`` and ``{{ ref('...') }}`` macros in query text.

``var()`` folds a project variable into the text before parsing; ``ref()``
names another resource explicitly and renders as that resource's bare name,
so the front end then discovers it as an ordinary table reference.  Both
single- and double-quoted arguments and arbitrary whitespace inside the
braces are supported.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

# Breakdown:
#   \{\{\s*             -- literal opening braces and optional whitespace
#   (var|ref)\s*\(\s*   -- macro name (group 1) and its opening parenthesis
#   (?:'([^']+)'        -- single-quoted argument (group 2)
#   |"([^"]+)")         -- OR double-quoted argument (group 3)
#   \s*\)\s*\}\}        -- closing parenthesis and braces
_MACRO_PATTERN = re.compile(r"\{\{\s*(var|ref)\s*\(\s*(?:'([^']+)'|\"([^\"]+)\")\s*\)\s*\}\}")


class UnresolvedVariableError(Exception):
    """Raised when ``{{ var('...') }}`` names a variable that is not defined."""

    def __init__(self, variable: str, available: list[str]) -> None:
        self.variable = variable
        self.available = available
        super().__init__(
            f"Unresolved variable: '{variable}'. Available variables: {available}"
        )


def render_template(text: str, variables: Mapping[str, str] | None = None) -> str:
    """Replace every macro in *text*.

    Parameters
    ----------
    text:
        Raw query text potentially containing ``var()``/``ref()`` macros.
    variables:
        Values for ``var()`` lookups.

    Returns
    -------
    str
        Text with every macro substituted.

    Raises
    ------
    UnresolvedVariableError
        If a ``var()`` argument does not exist in *variables*.
    """
    lookup = variables or {}

    def _replace(match: re.Match[str]) -> str:
        macro = match.group(1)
        # Exactly one of the two argument groups is set.
        argument: str = match.group(2) or match.group(3)
        if macro == "ref":
            return argument
        if argument not in lookup:
            raise UnresolvedVariableError(argument, sorted(lookup))
        return str(lookup[argument])

    return _MACRO_PATTERN.sub(_replace, text)


def extract_ref_names(text: str) -> list[str]:
    """Return resource names referenced via ``ref()`` in first-seen order."""
    seen: set[str] = set()
    names: list[str] = []
    for match in _MACRO_PATTERN.finditer(text):
        if match.group(1) != "ref":
            continue
        name = match.group(2) or match.group(3)
        if name not in seen:
            seen.add(name)
            names.append(name)
    return names
