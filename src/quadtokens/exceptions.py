"""
Exception hierarchy for quad token indexing and querying.

Every failure in this package is a contract violation by the caller
(bad literal, unsupported operation or invalid schema), so nothing here
is retried internally.
"""

from typing import Optional


class QuadTokenError(Exception):
    """Base exception for all quadtokens errors."""
    pass


class BadInputError(QuadTokenError, ValueError):
    """A shape or token literal could not be parsed."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.cause = cause


class UnsupportedOperationError(QuadTokenError, NotImplementedError):
    """The requested query or sort operation is not provided by the field."""
    pass


class ConfigurationError(QuadTokenError, ValueError):
    """The field or grid configuration is structurally invalid."""
    pass
