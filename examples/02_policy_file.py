#!/usr/bin/env python3
"""Example: Loading groups from a YAML policy file

Demonstrates PolicyLoader with application-supplied content types and match
predicates, and the errors raised for bad policy documents.

Usage:
    python examples/02_policy_file.py

Requirements:
    pip install predicate-security
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import predicate_security as ps

POLICY_PATH = Path(__file__).with_name("blog_policy.yaml")


@dataclass
class BlogPost:
    id: int
    title: str
    submitter_id: int | None = None
    editor_id: int | None = None


def is_submitter(post: BlogPost, user_id: int) -> bool:
    return post.submitter_id == user_id


def is_editor(post: BlogPost, user_id: int) -> bool:
    return post.editor_id == user_id


def main() -> None:
    loader = ps.PolicyLoader(
        predicates={"is_submitter": is_submitter, "is_editor": is_editor},
        content_types={"BlogPost": BlogPost},
    )

    # Step 1: Inspect the document without building a filter
    document = loader.read_document(POLICY_PATH)
    print(f"Policy '{document.description}' declares {len(document.groups)} groups")
    for declaration in document.groups:
        verdicts = {name: value.value for name, value in declaration.permissions.items()}
        print(f"  {declaration.name}: {verdicts}")

    # Step 2: Load a frozen filter and use it
    security = loader.load(POLICY_PATH)
    posts = [
        BlogPost(1, "The best post", submitter_id=1, editor_id=1),
        BlogPost(2, "The most ambitious post", submitter_id=1, editor_id=2),
    ]
    for user_id in (1, 2):
        approvable = security.filter(posts, "approve", user_id)
        print(f"  user {user_id} may approve: {[post.id for post in approvable]}")

    # Step 3: Invalid documents raise PolicyConfigError
    try:
        loader.load_from_dict({"groups": [{"name": "x", "content_type": "BlogPost",
                                           "match": "is_editor",
                                           "permissions": {"edit": "grant"}}]})
    except ps.PolicyConfigError as exc:
        print(f"\nRejected invalid policy: {exc.message.splitlines()[0]}")

    # Step 4: Late declarations are refused once the filter is frozen
    try:
        security.add_group("post-reviewer", BlogPost, is_editor)
    except ps.RegistryFrozenError as exc:
        print(f"Rejected late declaration: {exc}")


if __name__ == "__main__":
    main()
