"""
Query-time translation of shapes into weighted term queries.

The query shape is matched like an indexed shape, then every level turns
into term clauses:

- boundary cells are looked up in the primary field, which stores every
  boundary cell along each indexed shape's path, with a neutral boost
- covered cells are looked up in the auxiliary field of their level and
  boosted by how coarse the level is, since a shared coarse cover is rare
  and specific evidence

All clauses are optional (SHOULD), so a document's score is the sum of
the boosts of the clauses it matches.
"""

from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass
from typing import Collection, Dict, Iterable, List, Mapping, Optional, Set, Tuple
import logging

from .capabilities import QueryProducer
from .config import QuadFieldConfig, aux_field_name
from .exceptions import ConfigurationError
from .grid import SpatialGrid
from .matcher import MatchResult, match_shape
from .shapes import Shape, parse_shape
from .tokens import expand_root, is_token_literal, parse_token_literal


logger = logging.getLogger(__name__)

# Added to (depth - level) for cover clauses
COVER_BOOST = 2


def cover_boost(depth: int, level: int) -> float:
    """Boost of a cover clause at a level for a match of the given depth."""
    return float((depth - level) + COVER_BOOST)


class Query:
    """A disjunction of weighted term clauses."""

    clauses: Tuple[TermsClause, ...] = ()

    def score(self, doc_fields: Mapping[str, Iterable[str]]) -> float:
        """
        Score a document given its indexed terms per field.

        Returns:
            Sum of the boosts of matching clauses (0.0 when none match)
        """
        terms = {name: set(values) for name, values in doc_fields.items()}
        return sum(
            clause.boost
            for clause in self.clauses
            if clause.matches(terms.get(clause.field, ()))
        )


@dataclass(frozen=True)
class TermsClause:
    """Matches documents holding any of the terms in a field."""
    field: str
    terms: Tuple[str, ...]
    boost: float = 1.0

    def matches(self, doc_terms: Collection[str]) -> bool:
        return any(term in doc_terms for term in self.terms)

    def __str__(self) -> str:
        text = f"{self.field}:({' '.join(self.terms)})"
        if self.boost != 1.0:
            text += f"^{self.boost:g}"
        return text


@dataclass(frozen=True)
class BooleanQuery(Query):
    """SHOULD-only boolean query over term clauses."""
    clauses: Tuple[TermsClause, ...]

    def fields(self) -> List[str]:
        return sorted({clause.field for clause in self.clauses})

    def __str__(self) -> str:
        return " ".join(str(clause) for clause in self.clauses)


@dataclass(frozen=True)
class MatchNoDocsQuery(Query):
    """Query produced for shapes that match no cells."""

    def __str__(self) -> str:
        return "MatchNoDocs"


def mostly_within(
    match: MatchResult,
    resolutions: Optional[Collection[int]] = None,
) -> MatchResult:
    """
    Rearrange a match for "mostly within" querying.

    - a root cover becomes the four level-1 covers
    - covers at levels without an auxiliary field are demoted to boundary
      cells of their level, so they are still matched in the primary field
    - empty levels are dropped from clause generation by the builder

    Args:
        match: Match of the query shape
        resolutions: Levels that have an auxiliary field (None means all)
    """
    covers: Dict[int, Set[str]] = defaultdict(set)
    intersects: Dict[int, Set[str]] = defaultdict(set)
    for token in expand_root(match.tokens()):
        demote = resolutions is not None and token.level not in resolutions
        if token.partial or demote:
            intersects[token.level].add(token.cell)
        else:
            covers[token.level].add(token.cell)

    return MatchResult.from_sets(
        covers,
        intersects,
        best_fit_level=match.best_fit_level,
        target_level=match.target_level,
    )


def build_query_from_match(
    match: MatchResult,
    field_name: str,
    prefix: Optional[str],
    resolutions: Optional[Collection[int]] = None,
) -> Query:
    """
    Assemble the weighted boolean query for a match.

    Args:
        match: Match of the query shape
        field_name: Primary field name
        prefix: Auxiliary field name prefix
        resolutions: Levels with an auxiliary field (None means every level)

    Returns:
        BooleanQuery, or MatchNoDocsQuery when the match is empty
    """
    if resolutions is None and not prefix:
        raise ConfigurationError("A field prefix is required to query cover levels")

    transformed = mostly_within(match, resolutions)
    depth = max(match.depth, transformed.depth)

    clauses: List[TermsClause] = []
    for level in transformed.levels:
        if level.intersects:
            clauses.append(TermsClause(field_name, tuple(sorted(level.intersects))))
        if level.covers:
            clauses.append(
                TermsClause(
                    aux_field_name(prefix, level.level),
                    tuple(sorted(level.covers)),
                    boost=cover_boost(depth, level.level),
                )
            )

    if not clauses:
        return MatchNoDocsQuery()
    return BooleanQuery(tuple(clauses))


def build_query(
    grid: SpatialGrid,
    shape: Shape,
    field_name: str,
    prefix: Optional[str],
    resolutions: Optional[Collection[int]] = None,
) -> Query:
    """
    Convenience function to match a query shape and build its query.

    Args:
        grid: Grid the indexed fields were encoded with
        shape: Query shape
        field_name: Primary field name
        prefix: Auxiliary field name prefix
        resolutions: Levels with an auxiliary field (None means every level)
    """
    return build_query_from_match(match_shape(grid, shape), field_name, prefix, resolutions)


class QuadQueryBuilder(QueryProducer):
    """Builds field queries for a quad token field."""

    def __init__(self, grid: SpatialGrid, config: QuadFieldConfig, field_name: str):
        self.grid = grid
        self.config = config
        self.field_name = field_name

    def field_query(self, value: str) -> Query:
        """
        Build the "mostly within" query for a shape or token literal.

        Raises:
            BadInputError: if the value cannot be parsed
        """
        if is_token_literal(value):
            match = MatchResult.from_tokens(parse_token_literal(value))
        else:
            match = match_shape(self.grid, parse_shape(value))

        query = build_query_from_match(
            match,
            self.field_name,
            self.config.prefix,
            self.config.resolutions,
        )
        logger.debug("QUERY: %s", query)
        return query
