"""Tests for quad tokens and token literals."""

import pytest
from quadtokens.exceptions import BadInputError
from quadtokens.tokens import (
    QuadToken,
    expand_root,
    format_token_literal,
    is_token_literal,
    parse_token_literal,
    truncate_cells,
)


class TestQuadToken:
    """Tests for QuadToken."""

    def test_str(self):
        """Test partial tokens carry the trailing marker."""
        assert str(QuadToken("ABA", partial=True)) == "ABA*"
        assert str(QuadToken("ABA")) == "ABA"

    def test_level(self):
        """Test level equals identifier length."""
        assert QuadToken("ABCD").level == 4

    def test_parse(self):
        """Test parsing single tokens."""
        assert QuadToken.parse("CAA*") == QuadToken("CAA", partial=True)
        assert QuadToken.parse("CAA") == QuadToken("CAA")

    def test_parse_malformed(self):
        """Test malformed tokens are rejected."""
        for text in ["", "*", "ABX", "ab", "A*B", "AB**"]:
            with pytest.raises(BadInputError):
                QuadToken.parse(text)

    def test_parse_malformed_has_cause(self):
        """Test a malformed token reports the expected alphabet."""
        with pytest.raises(BadInputError) as exc_info:
            QuadToken.parse("ABX")
        assert isinstance(exc_info.value.cause, ValueError)
        assert exc_info.value.__cause__ is exc_info.value.cause
        assert "ABCD" in str(exc_info.value.cause)

    def test_ordering(self):
        """Test tokens sort by cell, then covered before partial."""
        tokens = [QuadToken("B", True), QuadToken("A"), QuadToken("B")]
        assert sorted(tokens) == [QuadToken("A"), QuadToken("B"), QuadToken("B", True)]


class TestTokenLiteral:
    """Tests for the bracketed token literal."""

    def test_is_token_literal(self):
        """Test detection of raw literals."""
        assert is_token_literal("[ABA*]")
        assert is_token_literal("  [ABA*]")
        assert not is_token_literal("1 2")

    def test_parse(self):
        """Test parsing the documented literal."""
        tokens = parse_token_literal("[ABA* CAA* AAAAAB*]")
        assert tokens == [
            QuadToken("AAAAAB", True),
            QuadToken("ABA", True),
            QuadToken("CAA", True),
        ]

    def test_parse_commas_and_duplicates(self):
        """Test commas separate tokens and duplicates are dropped."""
        tokens = parse_token_literal("[AB, AB, CD*]")
        assert tokens == [QuadToken("AB"), QuadToken("CD", True)]

    def test_parse_empty(self):
        """Test an empty literal has no tokens."""
        assert parse_token_literal("[]") == []

    def test_parse_unterminated(self):
        """Test a literal without closing bracket is rejected."""
        with pytest.raises(BadInputError):
            parse_token_literal("[ABA* CAA*")

    def test_parse_bad_token(self):
        """Test a bad token inside a literal is rejected."""
        with pytest.raises(BadInputError):
            parse_token_literal("[ABA* XYZ]")

    def test_errors_carry_cause(self):
        """Test literal errors carry the failing detail as their cause."""
        with pytest.raises(BadInputError) as exc_info:
            parse_token_literal("[ABA* XYZ]")
        assert isinstance(exc_info.value.cause, ValueError)
        assert "token 1" in str(exc_info.value.cause)
        assert "'XYZ'" in str(exc_info.value)

        with pytest.raises(BadInputError) as exc_info:
            parse_token_literal("[ABA* CAA*")
        assert "closing ']'" in str(exc_info.value.cause)

    def test_format(self):
        """Test formatting tokens as a literal."""
        tokens = [QuadToken("ABA", True), QuadToken("CAA")]
        assert format_token_literal(tokens) == "[ABA* CAA]"

    def test_format_parses_back(self):
        """Test a formatted literal parses to the same tokens."""
        tokens = parse_token_literal("[ABA* CAA* AAAAAB*]")
        assert parse_token_literal(format_token_literal(tokens)) == tokens


class TestHelpers:
    """Tests for token helpers."""

    def test_expand_root(self):
        """Test the root cell becomes its four children."""
        tokens = expand_root([QuadToken("")])
        assert tokens == [QuadToken("A"), QuadToken("B"), QuadToken("C"), QuadToken("D")]

    def test_expand_root_keeps_others(self):
        """Test non-root tokens pass through."""
        tokens = [QuadToken("AB", True)]
        assert expand_root(tokens) == tokens

    def test_truncate_cells(self):
        """Test truncation keeps prefixes and drops duplicates."""
        cells = ["ABCD", "ABCA", "AB", "C"]
        assert truncate_cells(cells, 3) == ["AB", "ABC", "C"]

    def test_truncate_cells_is_ancestor(self):
        """Test every truncated cell is a prefix of its source."""
        cells = ["ABCDABCD", "DDDA", "B"]
        for length in range(1, 9):
            truncated = truncate_cells(cells, length)
            for cell in cells:
                assert cell[:length] in truncated
                assert cell.startswith(cell[:length])
