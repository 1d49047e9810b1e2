"""Visitors over decision expressions.

:class:`ExpressionVisitor` is the interface a query-translation layer
implements to lower a decision into its own query language. The library
ships :class:`ExpressionRenderer`, which renders a decision as text, and
:func:`collect_groups`, which lists the groups an expression depends on.

Example
-------
::

    class SqlCompiler(ExpressionVisitor[str]):
        def visit_constant(self, node):
            return "1=1" if node.value else "1=0"
        ...

    where_clause = decision.expression.accept(SqlCompiler())
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from predicate_security.expressions.nodes import (
    AllOf,
    AnyOf,
    Constant,
    Expression,
    GroupMatch,
    Not,
)
from predicate_security.groups.group import Group

R = TypeVar("R")


class ExpressionVisitor(ABC, Generic[R]):
    """Abstract visitor with one method per expression node type."""

    @abstractmethod
    def visit_constant(self, node: Constant) -> R: ...

    @abstractmethod
    def visit_group_match(self, node: GroupMatch) -> R: ...

    @abstractmethod
    def visit_not(self, node: Not) -> R: ...

    @abstractmethod
    def visit_all_of(self, node: AllOf) -> R: ...

    @abstractmethod
    def visit_any_of(self, node: AnyOf) -> R: ...


class ExpressionRenderer(ExpressionVisitor[str]):
    """Render an expression as a single line of text.

    Example
    -------
    >>> str(any_of(TRUE, FALSE))
    'TRUE'
    """

    def visit_constant(self, node: Constant) -> str:
        return "TRUE" if node.value else "FALSE"

    def visit_group_match(self, node: GroupMatch) -> str:
        return f"match[{node.group_name}]({node.user_key!r})"

    def visit_not(self, node: Not) -> str:
        return f"NOT {node.operand.accept(self)}"

    def visit_all_of(self, node: AllOf) -> str:
        return "(" + " AND ".join(op.accept(self) for op in node.operands) + ")"

    def visit_any_of(self, node: AnyOf) -> str:
        return "(" + " OR ".join(op.accept(self) for op in node.operands) + ")"


class _GroupCollector(ExpressionVisitor[list[Group]]):
    def visit_constant(self, node: Constant) -> list[Group]:
        return []

    def visit_group_match(self, node: GroupMatch) -> list[Group]:
        return [node.group]

    def visit_not(self, node: Not) -> list[Group]:
        return node.operand.accept(self)

    def visit_all_of(self, node: AllOf) -> list[Group]:
        return [g for op in node.operands for g in op.accept(self)]

    def visit_any_of(self, node: AnyOf) -> list[Group]:
        return [g for op in node.operands for g in op.accept(self)]


def collect_groups(expression: Expression) -> list[Group]:
    """Return the distinct groups referenced by *expression*, in first-seen order."""
    seen: dict[int, Group] = {}
    for group in expression.accept(_GroupCollector()):
        seen.setdefault(id(group), group)
    return list(seen.values())
