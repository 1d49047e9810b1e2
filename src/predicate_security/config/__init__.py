"""Declarative policy documents and the loader that builds filters from them."""
from __future__ import annotations

from predicate_security.config.loader import PolicyLoader, resolve_reference
from predicate_security.config.schema import (
    SUPPORTED_VERSIONS,
    GroupDeclaration,
    PolicyDocument,
)

__all__ = [
    "SUPPORTED_VERSIONS",
    "GroupDeclaration",
    "PolicyDocument",
    "PolicyLoader",
    "resolve_reference",
]
