"""
Quad tree field adapter for a search engine schema.

Syntax for the field input:

(1) Quad tokens, reused verbatim:
    [ABA* CAA* AAAAAB*]

(2) Point: X Y
    1.23 4.56

(3) Box: XMin YMin XMax YMax
    1.23 4.56 7.87 8.90

(4) WKT
    POLYGON((...))
"""

from __future__ import annotations
from typing import Any, List, Mapping, Optional

from .config import QuadFieldConfig
from .encoder import FieldSet, QuadTokenEncoder
from .exceptions import ConfigurationError, UnsupportedOperationError
from .grid import SpatialGrid
from .query import QuadQueryBuilder, Query


class QuadTreeField:
    """
    Spatial field composed of a token producer and a query producer.

    The field yields one primary field plus one auxiliary field per
    configured resolution, which is why it reports itself as a poly field.
    """

    is_poly_field = True

    def __init__(
        self,
        name: str,
        config: Optional[QuadFieldConfig] = None,
        grid: Optional[SpatialGrid] = None,
    ):
        """
        Initialize the field.

        Args:
            name: Primary field name
            config: Field configuration (no auxiliary fields if None)
            grid: Grid to match shapes on (SpatialGrid.default() if None)
        """
        self.name = name
        self.config = config or QuadFieldConfig()
        self.grid = grid or SpatialGrid.default()

        for resolution in self.config.resolutions:
            if resolution > self.grid.max_depth:
                raise ConfigurationError(
                    f"Resolution {resolution} exceeds grid max depth {self.grid.max_depth}"
                )

        self.encoder = QuadTokenEncoder(self.grid, self.config, name)
        self.query_builder = QuadQueryBuilder(self.grid, self.config, name)

    @classmethod
    def from_args(
        cls,
        name: str,
        args: Mapping[str, str],
        grid: Optional[SpatialGrid] = None,
    ) -> QuadTreeField:
        """Build a field from schema string arguments."""
        return cls(name, QuadFieldConfig.from_args(args), grid)

    def field_names(self) -> List[str]:
        return self.encoder.field_names()

    def create_fields(self, value: str) -> FieldSet:
        return self.encoder.create_fields(value)

    def field_query(self, value: str) -> Query:
        return self.query_builder.field_query(value)

    def range_query(
        self,
        lower: Optional[str],
        upper: Optional[str],
        include_lower: bool = True,
        include_upper: bool = True,
    ) -> Query:
        return self.query_builder.range_query(lower, upper, include_lower, include_upper)

    def spatial_query(self, options: Any) -> Query:
        return self.query_builder.spatial_query(options)

    def sort_field(self, reverse: bool = False) -> Any:
        raise UnsupportedOperationError(f"Sorting not supported on QuadTreeField {self.name}")

    def write(self, fields: FieldSet) -> Optional[str]:
        """External (display) value of a record: the stored token literal."""
        return fields.stored_value
