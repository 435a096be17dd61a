"""Core domain logic for the ERPNext bridge.

This package contains zero external dependencies: domain models, the
error normalizer, deterministic naming, and the port the adapters
implement. All HTTP and protocol handling lives in the adapters package.
"""

from .errors import ConfigurationError, ERPNextError
from .models import (
    ConnectionConfig,
    ErrorContext,
    FieldDefinition,
    PropertyOverride,
    RecordRef,
    Workflow,
)
from .normalizer import ErrorNormalizer

__all__ = [
    "ConfigurationError",
    "ConnectionConfig",
    "ERPNextError",
    "ErrorContext",
    "ErrorNormalizer",
    "FieldDefinition",
    "PropertyOverride",
    "RecordRef",
    "Workflow",
]
