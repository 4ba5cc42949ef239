"""
quadtokens: spatial indexing with hierarchical quad-cell terms.

This package converts 2-D shapes into quad-tree cell identifiers that a
text search engine can index as ordinary terms, and converts query shapes
into weighted boolean term queries approximating spatial overlap.
"""

__version__ = "0.1.0"

from .grid import Rectangle, SpatialGrid, CELL_SYMBOLS
from .shapes import Relation, Shape, Point, Box, GeometryShape, parse_shape
from .tokens import QuadToken, parse_token_literal, format_token_literal
from .matcher import LevelMatch, MatchResult, GridMatcher, match_shape
from .config import QuadFieldConfig, aux_field_name
from .encoder import FieldSet, QuadTokenEncoder
from .query import (
    Query,
    TermsClause,
    BooleanQuery,
    MatchNoDocsQuery,
    QuadQueryBuilder,
    build_query,
    mostly_within,
)
from .field import QuadTreeField
from .duckdb_index import DuckDBTermIndex
from .exceptions import (
    QuadTokenError,
    BadInputError,
    UnsupportedOperationError,
    ConfigurationError,
)

__all__ = [
    "Rectangle",
    "SpatialGrid",
    "CELL_SYMBOLS",
    "Relation",
    "Shape",
    "Point",
    "Box",
    "GeometryShape",
    "parse_shape",
    "QuadToken",
    "parse_token_literal",
    "format_token_literal",
    "LevelMatch",
    "MatchResult",
    "GridMatcher",
    "match_shape",
    "QuadFieldConfig",
    "aux_field_name",
    "FieldSet",
    "QuadTokenEncoder",
    "Query",
    "TermsClause",
    "BooleanQuery",
    "MatchNoDocsQuery",
    "QuadQueryBuilder",
    "build_query",
    "mostly_within",
    "QuadTreeField",
    "DuckDBTermIndex",
    "QuadTokenError",
    "BadInputError",
    "UnsupportedOperationError",
    "ConfigurationError",
]
