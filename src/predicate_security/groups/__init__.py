"""Relational groups and the registry that owns them."""
from __future__ import annotations

from predicate_security.groups.group import Group, MatchPredicate, PermissionMap
from predicate_security.groups.registry import GroupRegistry

__all__ = [
    "Group",
    "GroupRegistry",
    "MatchPredicate",
    "PermissionMap",
]
