"""Shared bootstrap and fixtures for predicate-security tests."""
from __future__ import annotations

import sys
from pathlib import Path

_REPO_ROOT = Path(__file__).parent.parent
_SRC = _REPO_ROOT / "src"
_TESTS = _REPO_ROOT / "tests"

for _path in [str(_SRC), str(_TESTS)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

import pytest  # noqa: E402

from models import BlogPost, Comment, User, build_posts, build_users  # noqa: E402
from predicate_security.filter import PredicateFilter  # noqa: E402


@pytest.fixture()
def users() -> dict[str, User]:
    return build_users()


@pytest.fixture()
def posts(users: dict[str, User]) -> list[BlogPost]:
    return build_posts(users)


@pytest.fixture()
def comment() -> Comment:
    return Comment(id=10, author_id=1, post_id=1)


@pytest.fixture()
def blog_security() -> PredicateFilter:
    """Submitters edit but never approve; editors edit and approve."""
    security = PredicateFilter(
        get_user_key=lambda user: user.id,
        get_global_permissions=lambda user: user.global_permissions,
    )
    security.add_group("post-submitter", BlogPost, lambda post, uid: post.submitter_id == uid)
    security.add_group("post-editor", BlogPost, lambda post, uid: post.editor_id == uid)
    security.add_permission("post-submitter", "edit", "allow")
    security.add_permission("post-submitter", "approve", "deny")
    security.add_permission("post-editor", "edit", "allow")
    security.add_permission("post-editor", "approve", "allow")
    return security
