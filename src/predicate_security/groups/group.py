"""Relational permission groups.

A :class:`Group` binds a name and a content type to a match predicate
``(item, user_key) -> bool`` and to a set of permission verdicts. The
predicate body is supplied by the application and never inspected; the
group only guarantees that it is invoked with content of the declared type.

Example
-------
::

    group = Group("post-editor", BlogPost, lambda post, user_id: post.editor_id == user_id)
    group.set_permission("edit", PermissionValue.ALLOW)
    group.permission("EDIT")        # PermissionValue.ALLOW
    group.matches(post, 2)          # True when user 2 edits the post
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

from predicate_security.core.errors import TypeMismatchError
from predicate_security.core.permission_value import PermissionValue

logger = logging.getLogger(__name__)

MatchPredicate = Callable[[Any, Any], bool]


def normalise_name(name: str) -> str:
    """Return the case-insensitive identity key for a group or permission name."""
    return name.casefold()


# ---------------------------------------------------------------------------
# PermissionMap
# ---------------------------------------------------------------------------


class PermissionMap:
    """Case-insensitive mapping of permission name to :class:`PermissionValue`.

    The spelling used by the first write is kept for display; later writes
    with another casing replace the value only.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, PermissionValue]] = {}

    def __setitem__(self, name: str, value: PermissionValue) -> None:
        key = normalise_name(name)
        display = self._entries[key][0] if key in self._entries else name
        self._entries[key] = (display, value)

    def __getitem__(self, name: str) -> PermissionValue:
        return self._entries[normalise_name(name)][1]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalise_name(name) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return (display for display, _ in self._entries.values())

    def get(self, name: str, default: PermissionValue | None = None) -> PermissionValue | None:
        entry = self._entries.get(normalise_name(name))
        return default if entry is None else entry[1]

    def items(self) -> list[tuple[str, PermissionValue]]:
        return list(self._entries.values())

    def as_dict(self) -> dict[str, str]:
        """Return a plain ``{name: value}`` dict for reporting."""
        return {display: value.value for display, value in self._entries.values()}

    def __repr__(self) -> str:
        return f"PermissionMap({self.as_dict()!r})"


# ---------------------------------------------------------------------------
# Group
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class Group:
    """A named group of security permissions which can be matched to users.

    Attributes
    ----------
    name:
        The group name. Compared case-insensitively within a content type.
    content_type:
        The class of content the match predicate accepts. Instances of
        subclasses are accepted too.
    match:
        Predicate returning ``True`` if the group applies to the given item
        and user key.
    permissions:
        Case-insensitive permission verdicts held by the group.
    """

    name: str
    content_type: type
    match: MatchPredicate
    permissions: PermissionMap = field(default_factory=PermissionMap)

    @property
    def key(self) -> tuple[str, type]:
        """Registry identity: the normalised name and the content type."""
        return normalise_name(self.name), self.content_type

    def accepts(self, item: object) -> bool:
        """Return True if *item* is content this group can be applied to."""
        return isinstance(item, self.content_type)

    def applies_to(self, content_type: type) -> bool:
        """Return True if content of *content_type* can be matched by this group."""
        return issubclass(content_type, self.content_type)

    def matches(self, item: object, user_key: object) -> bool:
        """Invoke the match predicate for *item* and *user_key*.

        Raises
        ------
        TypeMismatchError
            If *item* is not an instance of :attr:`content_type`.
        """
        if not self.accepts(item):
            raise TypeMismatchError(self.name, self.content_type, type(item))
        return bool(self.match(item, user_key))

    def permission(self, name: str) -> PermissionValue:
        """Return the verdict for *name*, or ``INHERIT`` when the group is silent."""
        return self.permissions.get(name, PermissionValue.INHERIT)  # type: ignore[return-value]

    def set_permission(self, name: str, value: PermissionValue | str) -> None:
        verdict = PermissionValue.parse(value)
        if verdict is PermissionValue.INHERIT:
            logger.warning(
                "Group '%s' declares permission '%s' as inherit; it has no effect",
                self.name,
                name,
            )
        self.permissions[name] = verdict

    def __repr__(self) -> str:
        return (
            f"Group(name={self.name!r}, content_type={self.content_type.__qualname__}, "
            f"permissions={self.permissions.as_dict()!r})"
        )
