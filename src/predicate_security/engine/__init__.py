"""Permission resolution engine."""
from __future__ import annotations

from predicate_security.engine.resolver import (
    Decision,
    GlobalPermissionResolver,
    GlobalPermissions,
    PermissionResolutionEngine,
    UserKeyExtractor,
)

__all__ = [
    "Decision",
    "GlobalPermissionResolver",
    "GlobalPermissions",
    "PermissionResolutionEngine",
    "UserKeyExtractor",
]
