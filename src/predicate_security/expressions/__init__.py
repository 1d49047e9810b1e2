"""Decision expression algebra and visitors."""
from __future__ import annotations

from predicate_security.expressions.nodes import (
    FALSE,
    TRUE,
    AllOf,
    AnyOf,
    Constant,
    Expression,
    GroupMatch,
    Not,
    all_of,
    any_of,
    constant,
    negate,
)
from predicate_security.expressions.visitor import (
    ExpressionRenderer,
    ExpressionVisitor,
    collect_groups,
)

__all__ = [
    "FALSE",
    "TRUE",
    "AllOf",
    "AnyOf",
    "Constant",
    "Expression",
    "ExpressionRenderer",
    "ExpressionVisitor",
    "GroupMatch",
    "Not",
    "all_of",
    "any_of",
    "collect_groups",
    "constant",
    "negate",
]
