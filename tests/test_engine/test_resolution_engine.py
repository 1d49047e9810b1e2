"""Tests for PermissionResolutionEngine and Decision."""
from __future__ import annotations

import pytest

from models import BlogPost, Comment, FeaturedPost, User
from predicate_security.core.permission_value import PermissionValue
from predicate_security.engine.resolver import Decision, PermissionResolutionEngine
from predicate_security.expressions import FALSE, TRUE, collect_groups
from predicate_security.groups.registry import GroupRegistry


@pytest.fixture()
def registry() -> GroupRegistry:
    registry = GroupRegistry()
    registry.add_group("post-submitter", BlogPost, lambda post, uid: post.submitter_id == uid)
    registry.add_group("post-editor", BlogPost, lambda post, uid: post.editor_id == uid)
    registry.add_permission("post-submitter", "edit", PermissionValue.ALLOW)
    registry.add_permission("post-submitter", "approve", PermissionValue.DENY)
    registry.add_permission("post-editor", "edit", PermissionValue.ALLOW)
    registry.add_permission("post-editor", "approve", PermissionValue.ALLOW)
    registry.freeze()
    return registry


@pytest.fixture()
def engine(registry: GroupRegistry) -> PermissionResolutionEngine:
    return PermissionResolutionEngine(
        registry,
        get_user_key=lambda user: user.id,
        get_global_permissions=lambda user: user.global_permissions,
    )


# ---------------------------------------------------------------------------
# Global verdict
# ---------------------------------------------------------------------------


class TestGlobalVerdict:
    def test_without_resolver_is_inherit(self, registry: GroupRegistry) -> None:
        engine = PermissionResolutionEngine(registry)
        assert engine.global_verdict("edit", object()) is PermissionValue.INHERIT

    def test_resolver_returning_none_is_inherit(self, registry: GroupRegistry) -> None:
        engine = PermissionResolutionEngine(registry, get_global_permissions=lambda user: None)
        assert engine.global_verdict("edit", object()) is PermissionValue.INHERIT

    def test_mapping(self, engine: PermissionResolutionEngine) -> None:
        admin = User(3, "admin", {"Edit": "allow"})
        assert engine.global_verdict("edit", admin) is PermissionValue.ALLOW
        assert engine.global_verdict("approve", admin) is PermissionValue.INHERIT

    def test_pairs_deny_wins(self, registry: GroupRegistry) -> None:
        engine = PermissionResolutionEngine(
            registry,
            get_global_permissions=lambda user: [
                ("edit", PermissionValue.ALLOW),
                ("EDIT", "deny"),
            ],
        )
        assert engine.global_verdict("edit", object()) is PermissionValue.DENY

    def test_pairs_allow_beats_inherit(self, registry: GroupRegistry) -> None:
        engine = PermissionResolutionEngine(
            registry,
            get_global_permissions=lambda user: [("edit", "inherit"), ("edit", "allow")],
        )
        assert engine.global_verdict("edit", object()) is PermissionValue.ALLOW

    def test_default_user_key_is_identity(self, registry: GroupRegistry) -> None:
        engine = PermissionResolutionEngine(registry)
        marker = object()
        assert engine.user_key(marker) is marker


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------


class TestBuildDecision:
    def test_fields(self, engine: PermissionResolutionEngine) -> None:
        decision = engine.build_decision("approve", User(1, "u"), BlogPost)
        assert isinstance(decision, Decision)
        assert decision.permission == "approve"
        assert decision.content_type is BlogPost
        assert decision.global_verdict is PermissionValue.INHERIT
        assert [g.name for g in decision.allow_groups] == ["post-editor"]
        assert [g.name for g in decision.deny_groups] == ["post-submitter"]

    def test_no_rules_is_constant_false(self, engine: PermissionResolutionEngine) -> None:
        decision = engine.build_decision("delete", User(1, "u"), BlogPost)
        assert decision.expression is FALSE
        assert decision.is_constant
        assert decision(BlogPost(1, "t")) is False

    def test_global_allow_without_rules_is_constant_true(
        self, engine: PermissionResolutionEngine
    ) -> None:
        admin = User(3, "admin", {"delete": "allow"})
        decision = engine.build_decision("delete", admin, BlogPost)
        assert decision.expression is TRUE
        assert str(decision) == "TRUE"

    def test_global_deny_is_constant_false(self, engine: PermissionResolutionEngine) -> None:
        banned = User(9, "banned", {"edit": "deny"})
        decision = engine.build_decision("edit", banned, BlogPost)
        assert decision.expression is FALSE

    def test_global_allow_keeps_deny_groups(self, engine: PermissionResolutionEngine) -> None:
        admin = User(3, "admin", {"approve": "allow"})
        decision = engine.build_decision("approve", admin, BlogPost)
        assert str(decision) == "NOT match[post-submitter](3)"
        assert decision(BlogPost(1, "t", submitter_id=1)) is True
        assert decision(BlogPost(3, "t", submitter_id=3)) is False

    def test_expression_rendering(self, engine: PermissionResolutionEngine) -> None:
        decision = engine.build_decision("approve", User(1, "u"), BlogPost)
        assert str(decision) == "(match[post-editor](1) AND NOT match[post-submitter](1))"

    def test_permission_name_case_insensitive(self, engine: PermissionResolutionEngine) -> None:
        decision = engine.build_decision("EDIT", User(1, "u"), BlogPost)
        assert len(decision.allow_groups) == 2

    def test_other_content_type_has_no_groups(self, engine: PermissionResolutionEngine) -> None:
        decision = engine.build_decision("edit", User(1, "u"), Comment)
        assert decision.allow_groups == ()
        assert decision.expression is FALSE

    def test_subclass_uses_base_groups(self, engine: PermissionResolutionEngine) -> None:
        decision = engine.build_decision("edit", User(1, "u"), FeaturedPost)
        assert decision(FeaturedPost(1, "t", editor_id=1)) is True

    def test_collect_groups(self, engine: PermissionResolutionEngine) -> None:
        decision = engine.build_decision("approve", User(1, "u"), BlogPost)
        names = [g.name for g in collect_groups(decision.expression)]
        assert names == ["post-editor", "post-submitter"]
