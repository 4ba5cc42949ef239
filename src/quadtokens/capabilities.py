"""
Capability interfaces at the search-engine boundary.

A spatial field is composed from two narrow capabilities rather than
inheriting from an engine field type: one that produces index tokens and
one that builds queries.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, List, Optional

from .exceptions import UnsupportedOperationError

if TYPE_CHECKING:
    from .encoder import FieldSet
    from .query import Query


class TokenProducer(ABC):
    """Produces the indexed fields of a record at index time."""

    @abstractmethod
    def create_fields(self, value: str) -> FieldSet:
        """
        Convert an external field value into indexable fields.

        Args:
            value: Shape literal or raw token literal

        Returns:
            FieldSet with primary and auxiliary tokens
        """
        pass

    @abstractmethod
    def field_names(self) -> List[str]:
        """Names of every field create_fields may produce."""
        pass


class QueryProducer(ABC):
    """
    Builds queries against fields produced by a TokenProducer.

    Only field queries are required. Range queries, generic spatial
    queries and sorting are refused by default.
    """

    @abstractmethod
    def field_query(self, value: str) -> Query:
        """
        Build a query for an external value.

        Args:
            value: Shape literal or raw token literal

        Returns:
            Query over the produced fields
        """
        pass

    def range_query(
        self,
        lower: Optional[str],
        upper: Optional[str],
        include_lower: bool = True,
        include_upper: bool = True,
    ) -> Query:
        raise UnsupportedOperationError("Range queries are not supported on quad token fields")

    def spatial_query(self, options: Any) -> Query:
        raise UnsupportedOperationError("Spatial option queries are not supported on quad token fields")

    def sort_field(self, reverse: bool = False) -> Any:
        raise UnsupportedOperationError("Sorting is not supported on quad token fields")
