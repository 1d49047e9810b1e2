"""Permission resolution engine.

Combines relational group rules with a user's global permissions into one
decision expression per ``(permission, user, content type)``:

1. The *global verdict* ``G`` reduces the user's global entries for the
   permission: any DENY wins, then any ALLOW, otherwise INHERIT.
2. Groups applicable to the content type that define the permission are
   split into allow groups and deny groups.
3. The allow side is ``OR(TRUE if G is ALLOW, match(g) for allow groups)``;
   an empty OR is FALSE, so content is denied by default.
4. The deny side is ``AND(FALSE if G is DENY, NOT match(g) for deny groups)``;
   an empty AND is TRUE, so absent deny rules never block.
5. The decision is ``allow AND deny``. One matching deny group therefore
   vetoes any number of allow paths.

The engine only reads the registry; it is safe to share between threads
once the registry is frozen.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Union

from predicate_security.core.permission_value import PermissionValue
from predicate_security.expressions.nodes import (
    FALSE,
    TRUE,
    Expression,
    GroupMatch,
    all_of,
    any_of,
    negate,
)
from predicate_security.groups.group import Group, normalise_name
from predicate_security.groups.registry import GroupRegistry

logger = logging.getLogger(__name__)

GlobalPermissions = Union[
    Mapping[str, Union[PermissionValue, str]],
    Iterable[tuple[str, Union[PermissionValue, str]]],
]
GlobalPermissionResolver = Callable[[Any], GlobalPermissions]
UserKeyExtractor = Callable[[Any], Any]


def _identity(user: Any) -> Any:
    return user


# ---------------------------------------------------------------------------
# Decision
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Decision:
    """The resolved decision for one permission, user and content type.

    Calling a Decision with an item evaluates :attr:`expression` for it.

    Attributes
    ----------
    permission:
        The requested permission name.
    content_type:
        The content type the decision applies to.
    global_verdict:
        The reduced global permission for the user.
    allow_groups:
        Groups granting the permission for this content type.
    deny_groups:
        Groups denying the permission for this content type.
    expression:
        The combined decision expression.
    """

    permission: str
    content_type: type
    global_verdict: PermissionValue
    allow_groups: tuple[Group, ...]
    deny_groups: tuple[Group, ...]
    expression: Expression

    def __call__(self, item: object) -> bool:
        return self.expression.evaluate(item)

    @property
    def is_constant(self) -> bool:
        """True when the decision does not depend on the item."""
        return self.expression in (TRUE, FALSE)

    def __str__(self) -> str:
        return str(self.expression)


# ---------------------------------------------------------------------------
# PermissionResolutionEngine
# ---------------------------------------------------------------------------


class PermissionResolutionEngine:
    """Builds decision expressions from a group registry and global permissions.

    Parameters
    ----------
    registry:
        The groups to resolve against.
    get_user_key:
        Maps a user to the key passed to group match predicates. Defaults to
        the identity function.
    get_global_permissions:
        Optional callable returning a user's non-relational permissions, as
        ``(name, value)`` pairs or a ``{name: value}`` mapping. When omitted
        the global verdict is always INHERIT.
    """

    def __init__(
        self,
        registry: GroupRegistry,
        get_user_key: UserKeyExtractor | None = None,
        get_global_permissions: GlobalPermissionResolver | None = None,
    ) -> None:
        self._registry = registry
        self._get_user_key = get_user_key or _identity
        self._get_global_permissions = get_global_permissions

    def user_key(self, user: Any) -> Any:
        """Return the key passed to group match predicates for *user*."""
        return self._get_user_key(user)

    def global_verdict(self, permission: str, user: Any) -> PermissionValue:
        """Reduce the user's global entries for *permission* to one verdict."""
        if self._get_global_permissions is None:
            return PermissionValue.INHERIT

        entries = self._get_global_permissions(user)
        if entries is None:
            return PermissionValue.INHERIT
        pairs = entries.items() if isinstance(entries, Mapping) else entries

        wanted = normalise_name(permission)
        return PermissionValue.combine(
            PermissionValue.parse(value)
            for name, value in pairs
            if normalise_name(name) == wanted
        )

    def build_decision(self, permission: str, user: Any, content_type: type) -> Decision:
        """Build the decision for *permission*, *user* and *content_type*."""
        verdict = self.global_verdict(permission, user)
        user_key = self.user_key(user)

        groups = self._registry.groups_for(content_type, permission)
        allow_groups = tuple(g for g in groups if g.permission(permission) is PermissionValue.ALLOW)
        deny_groups = tuple(g for g in groups if g.permission(permission) is PermissionValue.DENY)

        allow_terms: list[Expression] = [GroupMatch(g, user_key) for g in allow_groups]
        if verdict is PermissionValue.ALLOW:
            allow_terms.insert(0, TRUE)
        deny_terms: list[Expression] = [negate(GroupMatch(g, user_key)) for g in deny_groups]
        if verdict is PermissionValue.DENY:
            deny_terms.insert(0, negate(TRUE))

        expression = all_of(any_of(*allow_terms), all_of(*deny_terms))
        logger.debug(
            "Resolved '%s' for %s: global=%s allow_groups=%d deny_groups=%d -> %s",
            permission,
            content_type.__qualname__,
            verdict.value,
            len(allow_groups),
            len(deny_groups),
            expression,
        )
        return Decision(
            permission=permission,
            content_type=content_type,
            global_verdict=verdict,
            allow_groups=allow_groups,
            deny_groups=deny_groups,
            expression=expression,
        )
