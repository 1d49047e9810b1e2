#!/usr/bin/env python3
"""Example: Quickstart: predicate-security

Declare relational groups for blog posts, give them permissions, and filter
a list of posts for several users.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install predicate-security
"""
from __future__ import annotations

from dataclasses import dataclass, field

import predicate_security as ps


@dataclass
class User:
    id: int
    name: str
    global_permissions: dict[str, str] = field(default_factory=dict)


@dataclass
class BlogPost:
    id: int
    title: str
    submitter_id: int | None = None
    editor_id: int | None = None


def main() -> None:
    print(f"predicate-security version: {ps.__version__}")

    # Step 1: Declare groups and their permissions
    security = ps.PredicateFilter(
        get_user_key=lambda user: user.id,
        get_global_permissions=lambda user: user.global_permissions,
    )
    security.add_group("post-submitter", BlogPost, lambda post, uid: post.submitter_id == uid)
    security.add_group("post-editor", BlogPost, lambda post, uid: post.editor_id == uid)
    security.add_permission("post-submitter", "edit", ps.PermissionValue.ALLOW)
    security.add_permission("post-submitter", "approve", ps.PermissionValue.DENY)
    security.add_permission("post-editor", "edit", ps.PermissionValue.ALLOW)
    security.add_permission("post-editor", "approve", ps.PermissionValue.ALLOW)

    users = [
        User(1, "submitter"),
        User(2, "editor"),
        User(3, "admin", {"edit": "allow", "approve": "allow"}),
    ]
    posts = [
        BlogPost(1, "The best post", submitter_id=1, editor_id=1),
        BlogPost(2, "The most ambitious post", submitter_id=1, editor_id=2),
        BlogPost(3, "The forgotten post", submitter_id=3),
        BlogPost(4, "The abandoned post"),
    ]

    # Step 2: Filter posts per user and permission
    for user in users:
        for permission in ("edit", "approve"):
            allowed = security.filter(posts, permission, user)
            titles = ", ".join(post.title for post in allowed) or "(none)"
            print(f"  {user.name:<10} {permission:<8} {titles}")

    # Step 3: Inspect the decision expression
    decision = security.build_predicate("approve", users[2], BlogPost)
    print(f"\nadmin/approve resolves to: {decision}")


if __name__ == "__main__":
    main()
