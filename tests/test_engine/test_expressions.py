"""Tests for the decision expression algebra and its visitors."""
from __future__ import annotations

import pytest

from models import BlogPost, Comment
from predicate_security.core.errors import TypeMismatchError
from predicate_security.expressions import (
    FALSE,
    TRUE,
    AllOf,
    AnyOf,
    Constant,
    ExpressionVisitor,
    GroupMatch,
    Not,
    all_of,
    any_of,
    collect_groups,
    constant,
    negate,
)
from predicate_security.groups.group import Group


@pytest.fixture()
def editor() -> Group:
    return Group("post-editor", BlogPost, lambda post, uid: post.editor_id == uid)


@pytest.fixture()
def submitter() -> Group:
    return Group("post-submitter", BlogPost, lambda post, uid: post.submitter_id == uid)


# ---------------------------------------------------------------------------
# Constant folding
# ---------------------------------------------------------------------------


class TestFolding:
    def test_empty_any_of_is_false(self) -> None:
        assert any_of() is FALSE

    def test_empty_all_of_is_true(self) -> None:
        assert all_of() is TRUE

    def test_constant_returns_singletons(self) -> None:
        assert constant(True) is TRUE
        assert constant(False) is FALSE

    def test_any_of_absorbs_true(self, editor: Group) -> None:
        assert any_of(GroupMatch(editor, 1), TRUE) is TRUE

    def test_all_of_absorbs_false(self, editor: Group) -> None:
        assert all_of(FALSE, GroupMatch(editor, 1)) is FALSE

    def test_identity_constants_dropped(self, editor: Group) -> None:
        atom = GroupMatch(editor, 1)
        assert any_of(FALSE, atom) is atom
        assert all_of(TRUE, atom) is atom

    def test_negate_constants(self) -> None:
        assert negate(TRUE) is FALSE
        assert negate(FALSE) is TRUE

    def test_double_negation_removed(self, editor: Group) -> None:
        atom = GroupMatch(editor, 1)
        assert negate(negate(atom)) is atom

    def test_nested_nodes_flattened(self, editor: Group, submitter: Group) -> None:
        a, b, c = GroupMatch(editor, 1), GroupMatch(submitter, 1), GroupMatch(editor, 2)
        expression = any_of(any_of(a, b), c)
        assert isinstance(expression, AnyOf)
        assert expression.operands == (a, b, c)

    def test_mixed_nodes_not_flattened(self, editor: Group, submitter: Group) -> None:
        a, b = GroupMatch(editor, 1), GroupMatch(submitter, 1)
        expression = all_of(any_of(a, b), negate(a))
        assert isinstance(expression, AllOf)
        assert isinstance(expression.operands[0], AnyOf)
        assert isinstance(expression.operands[1], Not)


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


class TestEvaluation:
    def test_group_match(self, editor: Group) -> None:
        atom = GroupMatch(editor, 2)
        assert atom(BlogPost(1, "t", editor_id=2)) is True
        assert atom(BlogPost(1, "t", editor_id=3)) is False

    def test_group_match_wrong_type(self, editor: Group) -> None:
        with pytest.raises(TypeMismatchError):
            GroupMatch(editor, 2).evaluate(Comment(1, 2, 3))

    def test_constants_ignore_item(self) -> None:
        assert TRUE.evaluate(object()) is True
        assert FALSE.evaluate(object()) is False

    def test_allow_and_not_deny(self, editor: Group, submitter: Group) -> None:
        expression = all_of(GroupMatch(editor, 1), negate(GroupMatch(submitter, 1)))
        assert expression(BlogPost(1, "t", submitter_id=2, editor_id=1)) is True
        assert expression(BlogPost(2, "t", submitter_id=1, editor_id=1)) is False

    def test_short_circuit(self, editor: Group) -> None:
        calls: list[object] = []
        counting = Group("counting", BlogPost, lambda post, uid: calls.append(post) or False)
        expression = any_of(GroupMatch(editor, 1), GroupMatch(counting, 1))
        expression(BlogPost(1, "t", editor_id=1))
        assert calls == []


# ---------------------------------------------------------------------------
# Visitors
# ---------------------------------------------------------------------------


class TestRendering:
    def test_constants(self) -> None:
        assert str(TRUE) == "TRUE"
        assert str(FALSE) == "FALSE"

    def test_compound(self, editor: Group, submitter: Group) -> None:
        expression = all_of(
            any_of(GroupMatch(editor, 1), GroupMatch(submitter, 1)),
            negate(GroupMatch(submitter, 1)),
        )
        assert str(expression) == (
            "((match[post-editor](1) OR match[post-submitter](1)) "
            "AND NOT match[post-submitter](1))"
        )

    def test_string_user_key_is_quoted(self, editor: Group) -> None:
        assert str(GroupMatch(editor, "alice")) == "match[post-editor]('alice')"


class TestCollectGroups:
    def test_constant_has_no_groups(self) -> None:
        assert collect_groups(TRUE) == []

    def test_distinct_in_first_seen_order(self, editor: Group, submitter: Group) -> None:
        expression = all_of(
            any_of(GroupMatch(submitter, 1), GroupMatch(editor, 1)),
            negate(GroupMatch(submitter, 1)),
        )
        assert collect_groups(expression) == [submitter, editor]


class _AtomCounter(ExpressionVisitor[int]):
    def visit_constant(self, node: Constant) -> int:
        return 0

    def visit_group_match(self, node: GroupMatch) -> int:
        return 1

    def visit_not(self, node: Not) -> int:
        return node.operand.accept(self)

    def visit_all_of(self, node: AllOf) -> int:
        return sum(op.accept(self) for op in node.operands)

    def visit_any_of(self, node: AnyOf) -> int:
        return sum(op.accept(self) for op in node.operands)


class TestCustomVisitor:
    def test_visitor_walks_tree(self, editor: Group, submitter: Group) -> None:
        expression = all_of(
            any_of(GroupMatch(editor, 1), GroupMatch(submitter, 1)),
            negate(GroupMatch(submitter, 1)),
        )
        assert expression.accept(_AtomCounter()) == 3

    def test_incomplete_visitor_cannot_be_instantiated(self) -> None:
        class Partial(ExpressionVisitor[str]):
            def visit_constant(self, node: Constant) -> str:
                return ""

        with pytest.raises(TypeError):
            Partial()  # type: ignore[abstract]
