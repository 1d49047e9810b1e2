"""Three-state permission verdict attached to groups and global permissions.

Example
-------
>>> PermissionValue.parse("Allow")
<PermissionValue.ALLOW: 'allow'>
>>> PermissionValue.combine([PermissionValue.ALLOW, PermissionValue.DENY])
<PermissionValue.DENY: 'deny'>
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable


class PermissionValue(str, Enum):
    """The security behaviour a group (or a global grant) applies to a permission.

    - ``INHERIT`` has no effect on the permission.
    - ``ALLOW`` enables the permission unless it is superseded by ``DENY``.
    - ``DENY`` prohibits the permission and overrides any other value.
    """

    INHERIT = "inherit"
    ALLOW = "allow"
    DENY = "deny"

    @classmethod
    def parse(cls, value: PermissionValue | str) -> PermissionValue:
        """Return the member for *value*, accepting case-insensitive strings.

        Raises
        ------
        ValueError
            If *value* does not name a permission value.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalised = value.strip().lower()
            for member in cls:
                if member.value == normalised:
                    return member
        valid = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown permission value {value!r}. Valid: {valid}.")

    @classmethod
    def combine(cls, values: Iterable[PermissionValue]) -> PermissionValue:
        """Reduce several verdicts to one: any DENY wins, then any ALLOW."""
        seen = set(values)
        if cls.DENY in seen:
            return cls.DENY
        if cls.ALLOW in seen:
            return cls.ALLOW
        return cls.INHERIT
