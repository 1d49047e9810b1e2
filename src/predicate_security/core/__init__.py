"""Core data types shared by every predicate-security component."""
from __future__ import annotations

from predicate_security.core.errors import (
    AmbiguousGroupNameError,
    ConfigurationError,
    DuplicateGroupNameError,
    PolicyConfigError,
    PredicateSecurityError,
    RegistryFrozenError,
    TypeMismatchError,
    UnknownGroupError,
)
from predicate_security.core.permission_value import PermissionValue

__all__ = [
    "AmbiguousGroupNameError",
    "ConfigurationError",
    "DuplicateGroupNameError",
    "PermissionValue",
    "PolicyConfigError",
    "PredicateSecurityError",
    "RegistryFrozenError",
    "TypeMismatchError",
    "UnknownGroupError",
]
