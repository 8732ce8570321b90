"""Exception hierarchy for api-doc-reader.

Resources and operations that simply do not apply (no marker, hidden,
no HTTP verb) are skipped, never raised. These exceptions are reserved
for input that cannot be interpreted as API metadata at all.
"""

from typing import Any


class ApiDocError(Exception):
    """Base class for all api-doc-reader errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({details})"


class TypeResolutionError(ApiDocError):
    """A declared type cannot be resolved to a schema or a definition name."""


class DiscoveryError(ApiDocError):
    """A resource location cannot be imported."""


class ConfigError(ApiDocError):
    """The configuration file is missing or invalid."""
