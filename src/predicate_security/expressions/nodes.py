"""Decision expression algebra.

A decision is an immutable tree of :class:`Expression` nodes:

- :class:`Constant`   — always ``True`` or always ``False``
- :class:`GroupMatch` — atom invoking one group's match predicate for a user key
- :class:`Not`        — negation
- :class:`AllOf`      — conjunction (AND)
- :class:`AnyOf`      — disjunction (OR)

Every node can be evaluated against an item in memory, or walked with an
:class:`~predicate_security.expressions.visitor.ExpressionVisitor` so that an
external layer can lower it to another query language.

Use the :func:`all_of`, :func:`any_of` and :func:`negate` factories rather
than the node constructors: they fold constant operands, so ``any_of()`` is
``FALSE`` and ``all_of()`` is ``TRUE``.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, TypeVar

if TYPE_CHECKING:
    from predicate_security.expressions.visitor import ExpressionVisitor
    from predicate_security.groups.group import Group

R = TypeVar("R")


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------


class Expression(ABC):
    """Abstract base for decision expression nodes."""

    @abstractmethod
    def evaluate(self, item: object) -> bool:
        """Return the truth value of this expression for *item*."""

    @abstractmethod
    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        """Dispatch to the matching ``visit_*`` method of *visitor*."""

    def __call__(self, item: object) -> bool:
        return self.evaluate(item)

    def __str__(self) -> str:
        from predicate_security.expressions.visitor import ExpressionRenderer

        return self.accept(ExpressionRenderer())


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Constant(Expression):
    """A constant truth value, independent of the item."""

    value: bool

    def evaluate(self, item: object) -> bool:
        return self.value

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_constant(self)


TRUE = Constant(True)
FALSE = Constant(False)


@dataclass(frozen=True, eq=False)
class GroupMatch(Expression):
    """Atom: does the user identified by ``user_key`` belong to ``group`` for the item?

    Attributes
    ----------
    group:
        The group whose match predicate is invoked.
    user_key:
        The opaque user key passed to the predicate.
    """

    group: Group
    user_key: Any

    @property
    def group_name(self) -> str:
        return self.group.name

    @property
    def content_type(self) -> type:
        return self.group.content_type

    def evaluate(self, item: object) -> bool:
        return self.group.matches(item, self.user_key)

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_group_match(self)


@dataclass(frozen=True)
class Not(Expression):
    """Negation of one operand."""

    operand: Expression

    def evaluate(self, item: object) -> bool:
        return not self.operand.evaluate(item)

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_not(self)


@dataclass(frozen=True)
class AllOf(Expression):
    """Conjunction: true when every operand is true (short-circuits)."""

    operands: tuple[Expression, ...]

    def evaluate(self, item: object) -> bool:
        return all(operand.evaluate(item) for operand in self.operands)

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_all_of(self)


@dataclass(frozen=True)
class AnyOf(Expression):
    """Disjunction: true when at least one operand is true (short-circuits)."""

    operands: tuple[Expression, ...]

    def evaluate(self, item: object) -> bool:
        return any(operand.evaluate(item) for operand in self.operands)

    def accept(self, visitor: ExpressionVisitor[R]) -> R:
        return visitor.visit_any_of(self)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def constant(value: bool) -> Constant:
    return TRUE if value else FALSE


def negate(operand: Expression) -> Expression:
    """Return ``NOT operand``, folding constants and double negation."""
    if isinstance(operand, Constant):
        return constant(not operand.value)
    if isinstance(operand, Not):
        return operand.operand
    return Not(operand)


def all_of(*operands: Expression) -> Expression:
    """Combine *operands* with AND. An empty conjunction is ``TRUE``."""
    return _combine(operands, AllOf, absorbing=False)


def any_of(*operands: Expression) -> Expression:
    """Combine *operands* with OR. An empty disjunction is ``FALSE``."""
    return _combine(operands, AnyOf, absorbing=True)


def _combine(
    operands: Iterable[Expression],
    node_type: type[AllOf] | type[AnyOf],
    absorbing: bool,
) -> Expression:
    # ``absorbing`` is the constant that decides the whole node on its own:
    # False for AND, True for OR. The opposite constant is the identity.
    flattened: list[Expression] = []
    for operand in operands:
        if isinstance(operand, Constant):
            if operand.value == absorbing:
                return constant(absorbing)
            continue
        if isinstance(operand, node_type):
            flattened.extend(operand.operands)
        else:
            flattened.append(operand)

    if not flattened:
        return constant(not absorbing)
    if len(flattened) == 1:
        return flattened[0]
    return node_type(tuple(flattened))
