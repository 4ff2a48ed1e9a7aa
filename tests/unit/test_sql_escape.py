"""
Unit Tests for SQL Literal Escaping
===================================
"""

import pytest

from product_search.utils.sql import escape_literal


class TestEscapeLiteral:
    def test_plain_value_is_quoted(self):
        assert escape_literal("eco_friendly") == "'eco_friendly'"

    def test_single_quote_is_doubled(self):
        assert escape_literal("o'brien") == "'o''brien'"

    def test_injection_attempt_stays_one_literal(self):
        """A closing quote cannot terminate the literal early."""
        escaped = escape_literal("x'); drop table products; --")

        assert escaped == "'x''); drop table products; --'"
        # Only the outer quotes are unpaired
        inner = escaped[1:-1]
        assert inner.count("'") % 2 == 0

    def test_control_characters_are_stripped(self):
        assert escape_literal("a\x00b\x1fc\x7f") == "'abc'"

    def test_backslash_is_kept(self):
        assert escape_literal("a\\b") == "'a\\b'"

    def test_empty_string(self):
        assert escape_literal("") == "''"

    def test_non_string_raises(self):
        with pytest.raises(TypeError):
            escape_literal(5)  # type: ignore[arg-type]
