"""
Shape matcher using a cover-or-split strategy.

This module decomposes the grid world around a shape and records, for
every level, the cells the shape fully covers and the boundary cells it
only partially overlaps.
"""

from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple
import logging

from .grid import CELL_SYMBOLS, ROOT_CELL, Rectangle, SpatialGrid
from .shapes import Relation, Shape
from .tokens import QuadToken


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LevelMatch:
    """Cells recorded at one depth level."""

    level: int
    covers: FrozenSet[str] = frozenset()
    intersects: FrozenSet[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.covers and not self.intersects

    def tokens(self) -> List[QuadToken]:
        """Covered and partial cells of this level as sorted tokens."""
        tokens = [QuadToken(cell) for cell in self.covers]
        tokens.extend(QuadToken(cell, partial=True) for cell in self.intersects)
        return sorted(tokens)


@dataclass(frozen=True)
class MatchResult:
    """
    Per-level match of a shape against the grid.

    levels[d] holds the cells recorded at depth d. Level 0 only ever holds
    the root cell, as a cover, when the shape covers the whole world.
    """

    levels: Tuple[LevelMatch, ...] = ()

    best_fit_level: int = 0
    """Shallowest level whose cells are no larger than the shape's bounding box."""

    target_level: int = 0
    """Level at which boundary cells were recorded as leaves."""

    @classmethod
    def from_sets(
        cls,
        covers: Mapping[int, Iterable[str]],
        intersects: Mapping[int, Iterable[str]],
        best_fit_level: int = 0,
        target_level: int = 0,
    ) -> MatchResult:
        """
        Build a result from per-level cell collections.

        Levels between 0 and the deepest recorded level are always present,
        possibly empty.
        """
        recorded = [level for level, cells in covers.items() if cells]
        recorded.extend(level for level, cells in intersects.items() if cells)
        if not recorded:
            return cls((), best_fit_level, target_level)

        levels = tuple(
            LevelMatch(
                level,
                frozenset(covers.get(level, ())),
                frozenset(intersects.get(level, ())),
            )
            for level in range(max(recorded) + 1)
        )
        return cls(levels, best_fit_level, target_level)

    @classmethod
    def from_tokens(cls, tokens: Iterable[QuadToken]) -> MatchResult:
        """Group raw tokens by level, without consulting any grid."""
        covers: Dict[int, Set[str]] = defaultdict(set)
        intersects: Dict[int, Set[str]] = defaultdict(set)
        for token in tokens:
            target = intersects if token.partial else covers
            target[token.level].add(token.cell)

        result = cls.from_sets(covers, intersects)
        return cls(result.levels, 0, result.depth)

    @property
    def depth(self) -> int:
        """Deepest level with a recorded cell."""
        return len(self.levels) - 1 if self.levels else 0

    @property
    def is_empty(self) -> bool:
        return all(level.is_empty for level in self.levels)

    def level(self, depth: int) -> LevelMatch:
        """Return the match at a depth, empty when nothing was recorded there."""
        if 0 <= depth < len(self.levels):
            return self.levels[depth]
        return LevelMatch(depth)

    def covers(self) -> Set[str]:
        """All covered cells across levels."""
        return {cell for level in self.levels for cell in level.covers}

    def intersects(self) -> Set[str]:
        """All boundary cells across levels."""
        return {cell for level in self.levels for cell in level.intersects}

    def tokens(self) -> List[QuadToken]:
        """Every recorded cell as a sorted token list."""
        return sorted(token for level in self.levels for token in level.tokens())


@dataclass
class MatchStats:
    """Statistics collected during matching."""

    cells_visited: int = 0
    cells_pruned: int = 0
    cells_covered: int = 0
    boundary_leaves: int = 0
    max_depth_reached: int = 0


class GridMatcher:
    """
    Matcher for shapes using a cover-or-split strategy.

    The matcher walks the quad tree from the root:
    1. Cells disjoint from the shape are pruned
    2. Cells inside the shape are recorded as covers and not split further
    3. Other cells are recorded as boundary cells and split until the
       target level is reached

    A matcher keeps the statistics of its last run, so use one instance
    per thread; the grid itself can be shared.
    """

    def __init__(self, grid: SpatialGrid):
        """
        Initialize the matcher.

        Args:
            grid: Grid to decompose
        """
        self.grid = grid
        self.stats = MatchStats()

    def match(self, shape: Shape, extra_depth: Optional[int] = None) -> MatchResult:
        """
        Match a shape against the grid.

        Args:
            shape: Shape to decompose
            extra_depth: Levels past the best fit to descend (grid default if None)

        Returns:
            MatchResult with covers and boundary cells per level
        """
        self.stats = MatchStats()  # Reset stats
        if extra_depth is None:
            extra_depth = self.grid.extra_depth

        best_fit = self.grid.best_fit_level(shape.bbox_area(self.grid.world))
        target = self.grid.target_level(best_fit, extra_depth)

        covers: Dict[int, Set[str]] = defaultdict(set)
        intersects: Dict[int, Set[str]] = defaultdict(set)
        if not shape.is_empty:
            self._match_cell(shape, ROOT_CELL, self.grid.world, 0, target, covers, intersects)

        result = MatchResult.from_sets(covers, intersects, best_fit, target)
        logger.debug(
            "Matched %r: best_fit=%d target=%d visited=%d covered=%d leaves=%d",
            shape,
            best_fit,
            target,
            self.stats.cells_visited,
            self.stats.cells_covered,
            self.stats.boundary_leaves,
        )
        return result

    def _match_cell(
        self,
        shape: Shape,
        cell: str,
        box: Rectangle,
        depth: int,
        target: int,
        covers: Dict[int, Set[str]],
        intersects: Dict[int, Set[str]],
    ) -> None:
        """
        Record a cell and recurse into its children if needed.

        Args:
            shape: Shape being matched
            cell: Identifier of the current cell
            box: Rectangle of the current cell
            depth: Current depth (length of cell)
            target: Depth at which boundary cells become leaves
            covers: Per-level covered cells (updated in place)
            intersects: Per-level boundary cells (updated in place)
        """
        self.stats.cells_visited += 1

        relation = shape.relate(box, self.grid.world)
        if relation is Relation.DISJOINT:
            self.stats.cells_pruned += 1
            return

        self.stats.max_depth_reached = max(self.stats.max_depth_reached, depth)

        if relation is Relation.CONTAINS:
            # A covered cell subsumes all of its descendants
            covers[depth].add(cell)
            self.stats.cells_covered += 1
            return

        if depth > 0:
            intersects[depth].add(cell)

        if depth >= target:
            self.stats.boundary_leaves += 1
            return

        for symbol, child_box in zip(CELL_SYMBOLS, box.subdivide()):
            self._match_cell(
                shape, cell + symbol, child_box, depth + 1, target, covers, intersects
            )


def match_shape(
    grid: SpatialGrid,
    shape: Shape,
    extra_depth: Optional[int] = None,
) -> MatchResult:
    """
    Convenience function to match a shape.

    Args:
        grid: Grid to decompose
        shape: Shape to match
        extra_depth: Levels past the best fit to descend (grid default if None)

    Returns:
        MatchResult for the shape
    """
    return GridMatcher(grid).match(shape, extra_depth)
