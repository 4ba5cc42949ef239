"""
Field configuration.

The schema supplies string arguments (for example
``resolutions="5, 10" prefix="geo_"``); QuadFieldConfig validates them
once at setup so that no document is indexed against an invalid schema.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple
import re

from .exceptions import ConfigurationError


_SEPARATORS = re.compile(r"[\s,]+")
_TRUE_VALUES = ("true", "yes", "on", "1")


def aux_field_name(prefix: str, resolution: int) -> str:
    """
    Name of the auxiliary field for a resolution.

    Resolutions are zero-padded to two digits, e.g. ``geo_05``.
    """
    return f"{prefix}{resolution:02d}"


@dataclass(frozen=True)
class QuadFieldConfig:
    """Configuration for a quad token field."""

    resolutions: Tuple[int, ...] = ()
    """Truncation lengths, one auxiliary field each (ascending)."""

    prefix: Optional[str] = None
    """Name prefix of the auxiliary fields; required with resolutions."""

    stored: bool = True
    """Store the token literal as the field's display value."""

    def __post_init__(self):
        try:
            resolutions = tuple(sorted({int(r) for r in self.resolutions}))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid resolutions {self.resolutions!r}") from e
        object.__setattr__(self, "resolutions", resolutions)

        for resolution in resolutions:
            if resolution < 1:
                raise ConfigurationError(f"Resolutions must be at least 1, got {resolution}")
        if resolutions and not self.prefix:
            raise ConfigurationError("Missing prefix for resolution fields")

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> QuadFieldConfig:
        """
        Build a configuration from schema string arguments.

        Args:
            args: Mapping with optional ``resolutions``, ``prefix`` and ``stored``

        Raises:
            ConfigurationError: if a value is malformed or prefix is missing
        """
        resolutions: Tuple[int, ...] = ()
        raw = args.get("resolutions")
        if raw is not None:
            if not args.get("prefix"):
                raise ConfigurationError("Missing prefix for resolution fields")
            try:
                resolutions = tuple(int(part) for part in _SEPARATORS.split(raw.strip()) if part)
            except ValueError as e:
                raise ConfigurationError(f"Invalid resolutions {raw!r}") from e

        stored = str(args.get("stored", "true")).strip().lower() in _TRUE_VALUES
        return cls(resolutions=resolutions, prefix=args.get("prefix"), stored=stored)

    def aux_field_names(self) -> Dict[int, str]:
        """Map each resolution to its auxiliary field name."""
        return {r: aux_field_name(self.prefix, r) for r in self.resolutions}
