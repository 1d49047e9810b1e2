"""Filter and test content against relational security rules.

PredicateFilter implements content-relational security. Applications define
predicates that match users to relational groups (such as "post-submitter"
or "post-editor"), assign permissions to those groups, and then filter
arbitrary collections by a required permission. Optional global permissions
(for example a site administrator's rights) are merged into every decision.

Example
-------
::

    security = PredicateFilter(get_user_key=lambda user: user.id)
    security.add_group("post-editor", BlogPost, lambda post, user_id: post.editor_id == user_id)
    security.add_permission("post-editor", "edit", PermissionValue.ALLOW)

    editable = security.filter(posts, "edit", current_user)

Lifecycle
---------
Declare every group and permission first. The first evaluation call
(:meth:`PredicateFilter.filter`, :meth:`~PredicateFilter.test`, ...) freezes
the registry; later declarations raise
:class:`~predicate_security.core.errors.RegistryFrozenError`. Evaluation
against a frozen filter is side-effect free and may run on several threads.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator

from predicate_security.core.errors import TypeMismatchError
from predicate_security.core.permission_value import PermissionValue
from predicate_security.engine.resolver import (
    Decision,
    GlobalPermissionResolver,
    PermissionResolutionEngine,
    UserKeyExtractor,
)
from predicate_security.groups.group import Group, MatchPredicate
from predicate_security.groups.registry import GroupRegistry

logger = logging.getLogger(__name__)


class PredicateFilter:
    """Filters collections of arbitrary content using relational security groups.

    Parameters
    ----------
    get_user_key:
        Maps a user to the key passed to group match predicates. Defaults to
        the identity function, so the user object itself is the key.
    get_global_permissions:
        Optional callable mapping a user to their non-relational permissions,
        as ``(name, value)`` pairs or a ``{name: value}`` mapping.
    allow_reusing_group_names:
        When ``True``, one group name may be bound to several content types.
    """

    def __init__(
        self,
        get_user_key: UserKeyExtractor | None = None,
        get_global_permissions: GlobalPermissionResolver | None = None,
        allow_reusing_group_names: bool = False,
    ) -> None:
        self._registry = GroupRegistry(allow_reusing_group_names=allow_reusing_group_names)
        self._engine = PermissionResolutionEngine(
            self._registry,
            get_user_key=get_user_key,
            get_global_permissions=get_global_permissions,
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def groups(self) -> GroupRegistry:
        """The named groups of security permissions which can be matched to users."""
        return self._registry

    def add_group(self, name: str, content_type: type, match: MatchPredicate) -> Group:
        """Define a group which can be matched to users for *content_type*.

        See :meth:`GroupRegistry.add_group`.
        """
        return self._registry.add_group(name, content_type, match)

    def add_permission(
        self,
        group_name: str,
        permission_name: str,
        value: PermissionValue | str,
        content_type: type | None = None,
    ) -> Group:
        """Set the verdict of *permission_name* for a group.

        See :meth:`GroupRegistry.add_permission`.
        """
        return self._registry.add_permission(group_name, permission_name, value, content_type)

    def freeze(self) -> PredicateFilter:
        """Make the configuration read-only and return the filter."""
        self._registry.freeze()
        return self

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def build_predicate(self, permission: str, user: Any, content_type: type) -> Decision:
        """Return the decision for *permission*, *user* and *content_type*.

        The decision exposes its expression tree so a query-translation layer
        can compile it instead of evaluating items one by one.
        """
        self._registry.freeze()
        return self._engine.build_decision(permission, user, content_type)

    def filter(
        self,
        items: Iterable[Any],
        permission: str,
        user: Any,
        content_type: type | None = None,
    ) -> list[Any]:
        """Return the items for which *user* holds *permission*, in input order.

        Parameters
        ----------
        items:
            The content to filter.
        permission:
            The name of the permission to require.
        user:
            The user to authorise.
        content_type:
            The content type of *items*. When omitted, each item is resolved
            against its own runtime type, so the result matches :meth:`test`
            item by item.

        Raises
        ------
        TypeMismatchError
            If *content_type* is given and an item is not an instance of it.
        """
        return list(self.iter_filter(items, permission, user, content_type))

    def iter_filter(
        self,
        items: Iterable[Any],
        permission: str,
        user: Any,
        content_type: type | None = None,
    ) -> Iterator[Any]:
        """Lazily yield the items for which *user* holds *permission*."""
        if content_type is not None:
            decision = self.build_predicate(permission, user, content_type)
            for item in items:
                if not isinstance(item, content_type):
                    raise TypeMismatchError(None, content_type, type(item))
                if decision(item):
                    yield item
            return

        # One decision per runtime type, so each item resolves as test() would.
        decisions: dict[type, Decision] = {}
        for item in items:
            item_type = type(item)
            decision = decisions.get(item_type)
            if decision is None:
                decision = self.build_predicate(permission, user, item_type)
                decisions[item_type] = decision
            if decision(item):
                yield item

    def test(self, item: Any, permission: str, user: Any) -> bool:
        """Return True if *user* holds *permission* for *item*."""
        return bool(self.filter([item], permission, user))

    def test_global(self, permission: str, user: Any) -> bool:
        """Return True if *user* is globally allowed *permission*, regardless of content."""
        self._registry.freeze()
        return self._engine.global_verdict(permission, user) is PermissionValue.ALLOW

    def is_member(self, item: Any, group_name: str, user: Any) -> bool:
        """Return True if *user* matches the group *group_name* for *item*.

        Permissions are ignored. The group is resolved by the item's runtime
        type, which disambiguates names reused across content types.
        """
        self._registry.freeze()
        group = self._registry.resolve_for_item(group_name, item)
        return group.matches(item, self._engine.user_key(user))

    def __repr__(self) -> str:
        return (
            f"PredicateFilter(groups={len(self._registry)}, "
            f"allow_reusing_group_names={self._registry.allow_reusing_group_names}, "
            f"frozen={self._registry.frozen})"
        )
