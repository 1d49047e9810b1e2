"""Ordered registry of relational groups.

GroupRegistry owns every :class:`Group` declared for a filter, keyed by
``(name, content_type)`` with names compared case-insensitively. By default a
name is bound to exactly one content type. With ``allow_reusing_group_names``
enabled the same name may be bound to several unrelated content types, and
every lookup is disambiguated by content type.

The registry is mutable only until :meth:`GroupRegistry.freeze` is called.
Callers that configure a registry from several threads must synchronise
externally; the registry itself takes no locks.

Example
-------
::

    registry = GroupRegistry()
    registry.add_group("post-editor", BlogPost, lambda post, uid: post.editor_id == uid)
    registry.add_permission("post-editor", "edit", PermissionValue.ALLOW)
    registry.groups_for(BlogPost, "edit")   # [Group(name='post-editor', ...)]
"""
from __future__ import annotations

import logging
from typing import Iterator

from predicate_security.core.errors import (
    AmbiguousGroupNameError,
    DuplicateGroupNameError,
    RegistryFrozenError,
    TypeMismatchError,
    UnknownGroupError,
)
from predicate_security.core.permission_value import PermissionValue
from predicate_security.groups.group import Group, MatchPredicate, normalise_name

logger = logging.getLogger(__name__)


class GroupRegistry:
    """Holds the groups of a filter and enforces name/type uniqueness.

    Parameters
    ----------
    allow_reusing_group_names:
        When ``True``, one group name may be bound to several content types.
        When ``False`` (default), rebinding a name to another content type
        raises :class:`DuplicateGroupNameError`.
    """

    def __init__(self, allow_reusing_group_names: bool = False) -> None:
        self._allow_reuse = allow_reusing_group_names
        self._groups: dict[tuple[str, type], Group] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------

    def add_group(self, name: str, content_type: type, match: MatchPredicate) -> Group:
        """Declare a group, or replace the predicate of an existing one.

        Re-adding an identical ``(name, content_type)`` pair replaces only the
        match predicate; permissions already attached to the group are kept.

        Parameters
        ----------
        name:
            The group name.
        content_type:
            The class of content the predicate accepts.
        match:
            Predicate ``(item, user_key) -> bool``.

        Returns
        -------
        Group
            The inserted or updated group.

        Raises
        ------
        DuplicateGroupNameError
            If *name* is bound to another content type and reuse is disabled.
        RegistryFrozenError
            If the registry has been frozen.
        """
        self._ensure_mutable()
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Group name must be a non-empty string.")
        if not isinstance(content_type, type):
            raise TypeError(f"Group content type must be a class; got {content_type!r}.")
        if not callable(match):
            raise TypeError(f"Group '{name}' match predicate must be callable.")

        key = (normalise_name(name), content_type)
        existing = self._groups.get(key)
        if existing is not None:
            logger.debug("Replacing match predicate of group '%s'", existing.name)
            existing.match = match
            return existing

        if not self._allow_reuse:
            bound = self.find(name)
            if bound:
                raise DuplicateGroupNameError(name, bound[0].content_type, content_type)

        group = Group(name=name, content_type=content_type, match=match)
        self._groups[key] = group
        logger.debug(
            "Added group '%s' for content type %s", name, content_type.__qualname__
        )
        return group

    def add_permission(
        self,
        group_name: str,
        permission_name: str,
        value: PermissionValue | str,
        content_type: type | None = None,
    ) -> Group:
        """Set a permission verdict on a group.

        Parameters
        ----------
        group_name:
            The name of the group to which to add the permission.
        permission_name:
            The permission name. Compared case-insensitively.
        value:
            The verdict, as a :class:`PermissionValue` or its string value.
        content_type:
            The exact content type the group was declared for. Required when
            the name is bound to several content types. Groups declared for a
            base class of *content_type* are not matched.

        Returns
        -------
        Group
            The group the permission was attached to.

        Raises
        ------
        UnknownGroupError
            If no group with that name (and exactly that content type) exists.
        AmbiguousGroupNameError
            If the name is bound to several content types and *content_type*
            was not given.
        """
        self._ensure_mutable()
        verdict = PermissionValue.parse(value)
        if content_type is None:
            candidates = self.find(group_name)
        else:
            # Exact type only; groups declared for a base class are not candidates.
            candidates = [g for g in self.find(group_name) if g.content_type is content_type]
        if not candidates:
            raise UnknownGroupError(group_name, content_type)
        if len(candidates) > 1:
            raise AmbiguousGroupNameError(group_name, [g.content_type for g in candidates])

        group = candidates[0]
        group.set_permission(permission_name, verdict)
        return group

    def freeze(self) -> None:
        """Make the registry read-only. Idempotent."""
        if not self._frozen:
            self._frozen = True
            logger.info("Group registry frozen with %d groups", len(self._groups))

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find(self, name: str, content_type: type | None = None) -> list[Group]:
        """Return the groups named *name*, narrowed by content type if given.

        With a content type, groups declared for that type or one of its base
        classes are returned.
        """
        key = normalise_name(name)
        return [
            group
            for (group_key, _), group in self._groups.items()
            if group_key == key
            and (content_type is None or group.applies_to(content_type))
        ]

    def groups_for(self, content_type: type, permission_name: str) -> list[Group]:
        """Return the groups applicable to *content_type* that define *permission_name*."""
        return [
            group
            for group in self._groups.values()
            if group.applies_to(content_type) and permission_name in group.permissions
        ]

    def resolve_for_item(self, name: str, item: object) -> Group:
        """Return the single group named *name* that accepts *item*.

        Raises
        ------
        UnknownGroupError
            If no group is registered under *name*.
        TypeMismatchError
            If groups exist under *name* but none accepts the item's type.
        AmbiguousGroupNameError
            If more than one group under *name* accepts the item.
        """
        named = self.find(name)
        if not named:
            raise UnknownGroupError(name)
        accepting = [group for group in named if group.accepts(item)]
        if not accepting:
            raise TypeMismatchError(name, named[0].content_type, type(item))
        if len(accepting) > 1:
            raise AmbiguousGroupNameError(name, [g.content_type for g in accepting])
        return accepting[0]

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def allow_reusing_group_names(self) -> bool:
        return self._allow_reuse

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[Group]:
        return iter(list(self._groups.values()))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and bool(self.find(name))

    def summary(self) -> dict[str, object]:
        """Return a plain dict summarising the registry configuration."""
        permission_names: set[str] = set()
        for group in self._groups.values():
            permission_names.update(normalise_name(p) for p in group.permissions)
        return {
            "group_count": len(self._groups),
            "allow_reusing_group_names": self._allow_reuse,
            "frozen": self._frozen,
            "content_types": sorted(
                {g.content_type.__qualname__ for g in self._groups.values()}
            ),
            "permissions": sorted(permission_names),
        }

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError()
