"""Unit tests for querygraph.loader.template."""

from __future__ import annotations

import pytest

from querygraph.loader.template import (
    UnresolvedVariableError,
    extract_ref_names,
    render_template,
)


class TestRenderTemplate:
    def test_var_substitution(self):
        sql = "SELECT * FROM employees WHERE location != '{{ var('city') }}'"
        assert render_template(sql, {"city": "Melbourne"}) == (
            "SELECT * FROM employees WHERE location != 'Melbourne'"
        )

    def test_ref_renders_bare_name(self):
        sql = 'SELECT * FROM {{ ref("q1") }} JOIN {{ref(\'rituals\')}} ON 1 = 1'
        assert render_template(sql) == "SELECT * FROM q1 JOIN rituals ON 1 = 1"

    def test_whitespace_variants(self):
        assert render_template("{{   var ( 'x' )   }}", {"x": "1"}) == "1"

    def test_missing_variable(self):
        with pytest.raises(UnresolvedVariableError) as exc_info:
            render_template("SELECT {{ var('limit') }}", {"other": "1"})
        assert exc_info.value.variable == "limit"
        assert exc_info.value.available == ["other"]

    def test_text_without_macros_unchanged(self):
        sql = "SELECT '{{ not a macro }}' AS x"
        assert render_template(sql, {}) == sql


class TestExtractRefNames:
    def test_first_seen_order_deduplicated(self):
        sql = "{{ ref('b') }} {{ ref('a') }} {{ ref('b') }} {{ var('a') }}"
        assert extract_ref_names(sql) == ["b", "a"]

    def test_no_refs(self):
        assert extract_ref_names("SELECT 1") == []
