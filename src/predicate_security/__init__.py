"""predicate-security: relational permission filtering for Python collections.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import predicate_security as ps
>>> security = ps.PredicateFilter()
>>> _ = security.add_group("owner", dict, lambda doc, user: doc["owner"] == user)
>>> _ = security.add_permission("owner", "edit", ps.PermissionValue.ALLOW)
>>> security.filter([{"owner": "ann"}, {"owner": "bob"}], "edit", "ann")
[{'owner': 'ann'}]
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ---------------------------------------------------------------------------
# Core
# ---------------------------------------------------------------------------
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

# ---------------------------------------------------------------------------
# Groups and expressions
# ---------------------------------------------------------------------------
from predicate_security.groups.group import Group
from predicate_security.groups.registry import GroupRegistry
from predicate_security.expressions import (
    Expression,
    ExpressionRenderer,
    ExpressionVisitor,
)

# ---------------------------------------------------------------------------
# Engine and filter
# ---------------------------------------------------------------------------
from predicate_security.engine.resolver import Decision, PermissionResolutionEngine
from predicate_security.filter import PredicateFilter

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
from predicate_security.config.loader import PolicyLoader
from predicate_security.config.schema import GroupDeclaration, PolicyDocument

__all__ = [
    "__version__",
    # Core
    "AmbiguousGroupNameError",
    "ConfigurationError",
    "DuplicateGroupNameError",
    "PermissionValue",
    "PolicyConfigError",
    "PredicateSecurityError",
    "RegistryFrozenError",
    "TypeMismatchError",
    "UnknownGroupError",
    # Groups and expressions
    "Expression",
    "ExpressionRenderer",
    "ExpressionVisitor",
    "Group",
    "GroupRegistry",
    # Engine and filter
    "Decision",
    "PermissionResolutionEngine",
    "PredicateFilter",
    # Configuration
    "GroupDeclaration",
    "PolicyDocument",
    "PolicyLoader",
]
