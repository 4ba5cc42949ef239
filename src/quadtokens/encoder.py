"""
Index-time encoding of shapes into quad token fields.

A record produces one primary field holding every matched cell and one
auxiliary field per configured resolution holding the cells truncated to
that length. Coarse lookups then hit a small, deduplicated term set
instead of scanning full-resolution tokens.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
import logging

from .capabilities import TokenProducer
from .config import QuadFieldConfig, aux_field_name
from .grid import SpatialGrid
from .matcher import MatchResult, match_shape
from .shapes import parse_shape
from .tokens import (
    QuadToken,
    expand_root,
    format_token_literal,
    is_token_literal,
    parse_token_literal,
    truncate_cells,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldSet:
    """
    The fields produced for one record.

    Handed to the host engine once and never modified.
    """

    name: str
    tokens: Tuple[QuadToken, ...] = ()
    stored_value: Optional[str] = None
    aux: Mapping[int, Tuple[str, ...]] = field(default_factory=dict)
    prefix: Optional[str] = None

    def __post_init__(self):
        # Read-only copy of the auxiliary terms
        object.__setattr__(self, "aux", MappingProxyType(dict(self.aux)))

    @property
    def is_empty(self) -> bool:
        return not self.tokens

    def primary_terms(self) -> List[str]:
        """Distinct cell identifiers of the primary field."""
        return sorted({token.cell for token in self.tokens})

    def fields(self) -> Dict[str, List[str]]:
        """Map each field name to its indexed terms."""
        fields = {self.name: self.primary_terms()}
        for resolution, cells in self.aux.items():
            fields[aux_field_name(self.prefix, resolution)] = list(cells)
        return fields


class QuadTokenEncoder(TokenProducer):
    """Turns shape or token literals into primary and auxiliary fields."""

    def __init__(self, grid: SpatialGrid, config: QuadFieldConfig, name: str):
        """
        Initialize the encoder.

        Args:
            grid: Grid used to match shapes
            config: Field configuration (resolutions, prefix, storage)
            name: Name of the primary field
        """
        self.grid = grid
        self.config = config
        self.name = name

    def field_names(self) -> List[str]:
        return [self.name] + list(self.config.aux_field_names().values())

    def create_fields(self, value: str) -> FieldSet:
        """
        Encode an external value.

        Token literals are reused as-is; anything else is parsed as a
        shape and matched against the grid.

        Raises:
            BadInputError: if the value cannot be parsed
        """
        if is_token_literal(value):
            tokens = parse_token_literal(value)
            logger.debug("Reusing %d literal tokens for %s", len(tokens), self.name)
            return self.encode_tokens(tokens)

        shape = parse_shape(value)
        return self.encode_match(match_shape(self.grid, shape))

    def encode_match(self, match: MatchResult) -> FieldSet:
        """Encode every covered and boundary cell of a match."""
        return self.encode_tokens(match.tokens())

    def encode_tokens(self, tokens: Iterable[QuadToken]) -> FieldSet:
        """
        Build the field set for a token list.

        Args:
            tokens: Cells to index

        Returns:
            FieldSet with sorted primary tokens and truncated auxiliary terms
        """
        tokens = tuple(sorted(set(expand_root(tokens))))
        cells = {token.cell for token in tokens}

        aux = {
            resolution: tuple(truncate_cells(cells, resolution))
            for resolution in self.config.resolutions
        }
        stored = format_token_literal(tokens) if self.config.stored else None

        logger.debug(
            "Encoded %d tokens for %s (%s)",
            len(tokens),
            self.name,
            ", ".join(f"{r}:{len(terms)}" for r, terms in aux.items()) or "no aux fields",
        )
        return FieldSet(
            name=self.name,
            tokens=tokens,
            stored_value=stored,
            aux=aux,
            prefix=self.config.prefix,
        )
