"""
Quad tokens and the raw token literal.

A quad token is a cell identifier plus a flag telling whether the cell is
fully covered by the shape or only partially overlaps it. Partial cells
are written with a trailing ``*``:

    [ABA* CAA* AAAAAB*]

A literal in this form is consumed verbatim at index time, bypassing the
matcher, so the stored value of a field can be fed back in unchanged.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List
import re

from .exceptions import BadInputError
from .grid import CELL_SYMBOLS, ROOT_CELL


PARTIAL_MARKER = "*"

_SEPARATORS = re.compile(r"[\s,]+")
_CELL_PATTERN = re.compile(f"^[{CELL_SYMBOLS}]+$")


@dataclass(frozen=True, order=True)
class QuadToken:
    """A cell identifier tagged as covered or partial."""
    cell: str
    partial: bool = False

    @property
    def level(self) -> int:
        """Depth of the cell (length of its identifier)."""
        return len(self.cell)

    def __str__(self) -> str:
        if self.partial:
            return self.cell + PARTIAL_MARKER
        return self.cell

    @classmethod
    def parse(cls, text: str) -> QuadToken:
        """
        Parse a single token such as ``ABA*`` or ``CAA``.

        Raises:
            BadInputError: if the token is empty or uses unknown symbols
        """
        partial = text.endswith(PARTIAL_MARKER)
        cell = text[:-1] if partial else text
        if not _CELL_PATTERN.match(cell):
            reason = ValueError(
                f"expected symbols from {CELL_SYMBOLS!r} with an optional trailing "
                f"{PARTIAL_MARKER!r}"
            )
            raise BadInputError(f"Malformed quad token {text!r}", cause=reason) from reason
        return cls(cell, partial)


def is_token_literal(value: str) -> bool:
    """Check if a field value is a raw token literal rather than a shape."""
    return value.lstrip().startswith("[")


def parse_token_literal(value: str) -> List[QuadToken]:
    """
    Parse a bracketed token literal.

    Tokens may be separated by spaces or commas. Duplicates are dropped
    and the result is sorted.

    Raises:
        BadInputError: if the literal is not bracketed or a token is malformed
    """
    text = value.strip()
    if not (text.startswith("[") and text.endswith("]")):
        missing = "opening '['" if not text.startswith("[") else "closing ']'"
        reason = ValueError(f"missing {missing}")
        raise BadInputError(f"Malformed token literal {value!r}", cause=reason) from reason

    tokens = set()
    parts = [part for part in _SEPARATORS.split(text[1:-1]) if part]
    for position, part in enumerate(parts):
        try:
            tokens.add(QuadToken.parse(part))
        except BadInputError as e:
            reason = ValueError(f"token {position} ({part!r}): {e.cause}")
            raise BadInputError(f"Malformed token literal {value!r}", cause=reason) from e
    return sorted(tokens)


def format_token_literal(tokens: Iterable[QuadToken]) -> str:
    """Format tokens as a literal accepted by parse_token_literal."""
    return "[" + " ".join(str(token) for token in tokens) + "]"


def expand_root(tokens: Iterable[QuadToken]) -> List[QuadToken]:
    """
    Replace a root cell token by its four children.

    The root has an empty identifier, which cannot be stored as a term or
    written in a literal.
    """
    expanded = []
    for token in tokens:
        if token.cell == ROOT_CELL:
            expanded.extend(QuadToken(symbol, token.partial) for symbol in CELL_SYMBOLS)
        else:
            expanded.append(token)
    return expanded


def truncate_cells(cells: Iterable[str], length: int) -> List[str]:
    """
    Truncate cells to at most length symbols.

    Each result is an ancestor-or-self of the cells it came from; shorter
    cells pass through unchanged.

    Returns:
        Sorted, deduplicated list of truncated cells
    """
    return sorted({cell[:length] for cell in cells})
