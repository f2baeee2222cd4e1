"""Exception types raised by apipulse."""

from typing import List


class ApiPulseError(Exception):
    """Base class for all apipulse errors."""


class ConfigurationError(ApiPulseError, ValueError):
    """Raised when a load test configuration violates one or more constraints."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ExportError(ApiPulseError):
    """Raised when results cannot be written to disk."""
