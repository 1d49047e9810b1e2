"""Exception hierarchy for predicate-security.

Every exception derives from :class:`PredicateSecurityError` and carries a
stable ``code`` string plus the structured attributes needed to report the
failure without parsing the message.

Configuration-time failures (raised while groups and permissions are being
declared) derive from :class:`ConfigurationError`. Evaluation-time failures
are :class:`TypeMismatchError` and :class:`AmbiguousGroupNameError`.
"""
from __future__ import annotations

from typing import Sequence


def _type_name(content_type: object) -> str:
    if isinstance(content_type, type):
        return content_type.__qualname__
    return repr(content_type)


class PredicateSecurityError(Exception):
    """Base exception for all predicate-security errors.

    Attributes
    ----------
    code:
        Stable error code string (e.g. ``"UNKNOWN_GROUP"``).
    message:
        Human-readable error description.
    """

    code: str = "PREDICATE_SECURITY_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(PredicateSecurityError):
    """A group or permission declaration was rejected."""

    code: str = "CONFIGURATION_ERROR"


class UnknownGroupError(ConfigurationError):
    """Raised when a permission references a group that was never added.

    Attributes
    ----------
    group_name:
        The group name that could not be resolved.
    content_type:
        The content type the lookup was narrowed to, or ``None``.
    """

    code: str = "UNKNOWN_GROUP"

    def __init__(self, group_name: str, content_type: type | None = None) -> None:
        self.group_name = group_name
        self.content_type = content_type
        if content_type is None:
            message = f"There is no group named '{group_name}'."
        else:
            message = (
                f"There is no group named '{group_name}' "
                f"for content of type {_type_name(content_type)}."
            )
        super().__init__(message)


class DuplicateGroupNameError(ConfigurationError):
    """Raised when a group name is rebound to another content type.

    Only raised while reusing group names is disabled.

    Attributes
    ----------
    group_name:
        The name being added.
    existing_type:
        The content type the name is already bound to.
    new_type:
        The content type of the rejected declaration.
    """

    code: str = "DUPLICATE_GROUP_NAME"

    def __init__(self, group_name: str, existing_type: type, new_type: type) -> None:
        self.group_name = group_name
        self.existing_type = existing_type
        self.new_type = new_type
        super().__init__(
            f"The group name '{group_name}' is already bound to content of type "
            f"{_type_name(existing_type)}; it cannot also be bound to "
            f"{_type_name(new_type)} unless reusing group names is enabled."
        )


class RegistryFrozenError(ConfigurationError):
    """Raised when groups or permissions are declared after evaluation began."""

    code: str = "REGISTRY_FROZEN"

    def __init__(self) -> None:
        super().__init__(
            "The group registry is frozen; declare every group and permission "
            "before filtering or testing content."
        )


class PolicyConfigError(ConfigurationError, ValueError):
    """Raised when a policy file is malformed or references unknown names.

    Attributes
    ----------
    config_path:
        The path to the policy file that caused the error, if known.
    """

    code: str = "POLICY_CONFIG_ERROR"

    def __init__(self, message: str, config_path: str | None = None) -> None:
        self.config_path = config_path
        prefix = f"[{config_path}] " if config_path else ""
        super().__init__(f"{prefix}{message}")


class TypeMismatchError(PredicateSecurityError, TypeError):
    """Raised when content is evaluated against a group for another type.

    Attributes
    ----------
    group_name:
        The group whose predicate was requested, or ``None`` when the
        mismatch was detected before any group was involved.
    expected:
        The content type that was required.
    actual:
        The runtime type of the offending item.
    """

    code: str = "TYPE_MISMATCH"

    def __init__(self, group_name: str | None, expected: type, actual: type) -> None:
        self.group_name = group_name
        self.expected = expected
        self.actual = actual
        if group_name is None:
            message = (
                f"Expected content of type {_type_name(expected)}, "
                f"got {_type_name(actual)}."
            )
        else:
            message = (
                f"The security group '{group_name}' is not relevant to content of "
                f"type {_type_name(actual)}. It can only be applied to content of "
                f"type {_type_name(expected)}."
            )
        super().__init__(message)


class AmbiguousGroupNameError(PredicateSecurityError, LookupError):
    """Raised when a group name resolves to more than one content type.

    Attributes
    ----------
    group_name:
        The ambiguous name.
    candidates:
        The content types the name is bound to.
    """

    code: str = "AMBIGUOUS_GROUP_NAME"

    def __init__(self, group_name: str, candidates: Sequence[type]) -> None:
        self.group_name = group_name
        self.candidates = tuple(candidates)
        names = ", ".join(_type_name(c) for c in self.candidates)
        super().__init__(
            f"The group name '{group_name}' is bound to several content types "
            f"({names}); pass a content type to disambiguate."
        )
