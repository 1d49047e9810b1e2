"""Policy document schema with Pydantic v2 validation.

A policy document is the declarative form of a filter's configuration: the
list of groups, the content type and match predicate each one is bound to,
and the permission verdicts it carries. Content types and predicates are
named by reference (an import path or a key supplied to the loader) so the
document itself stays plain YAML.

Example
-------
::

    version: "1.0"
    allow_reusing_group_names: false
    groups:
      - name: post-submitter
        content_type: blog.models:BlogPost
        match: blog.rules:is_submitter
        permissions:
          edit: allow
          approve: deny
"""
from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from predicate_security.core.permission_value import PermissionValue

SUPPORTED_VERSIONS: frozenset[str] = frozenset(["1.0", "1"])


class GroupDeclaration(BaseModel):
    """One group of a policy document."""

    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1)
    content_type: str = Field(min_length=1)
    match: str = Field(min_length=1)
    description: str | None = Field(default=None)
    permissions: dict[str, PermissionValue] = Field(default_factory=dict)

    @field_validator("name", "content_type", "match", mode="before")
    @classmethod
    def reject_blank(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("must not be blank")
        return value

    @field_validator("permissions", mode="before")
    @classmethod
    def parse_permission_values(cls, values: object) -> object:
        if values is None:
            return {}
        if not isinstance(values, dict):
            raise ValueError("permissions must be a mapping of permission name to value")
        return {str(name): PermissionValue.parse(value) for name, value in values.items()}


class PolicyDocument(BaseModel):
    """Top-level policy document schema."""

    model_config = {"extra": "allow"}

    version: str = Field(default="1.0")
    description: str | None = Field(default=None)
    allow_reusing_group_names: bool = Field(default=False)
    groups: list[GroupDeclaration] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def validate_version(cls, value: object) -> str:
        version = str(value)
        if version not in SUPPORTED_VERSIONS:
            raise ValueError(
                f"Unsupported policy version {version!r}. Supported: {sorted(SUPPORTED_VERSIONS)}."
            )
        return version

    def permission_names(self) -> list[str]:
        """Return every permission name declared, case-insensitively de-duplicated."""
        seen: dict[str, str] = {}
        for group in self.groups:
            for name in group.permissions:
                seen.setdefault(name.casefold(), name)
        return sorted(seen.values(), key=str.casefold)
