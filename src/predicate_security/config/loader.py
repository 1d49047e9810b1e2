"""YAML policy loader.

PolicyLoader reads a policy document (see
:mod:`predicate_security.config.schema`), resolves the content types and
match predicates it references, declares every group and permission on a
new :class:`~predicate_security.filter.PredicateFilter`, and freezes it.

References are resolved first against the ``content_types`` / ``predicates``
mappings given to the loader, then as import paths (``"package.module:attr"``
or ``"package.module.attr"``).

Example
-------
::

    loader = PolicyLoader(predicates={"is_editor": lambda post, uid: post.editor_id == uid},
                          content_types={"BlogPost": BlogPost})
    security = loader.load("security.yaml", get_user_key=lambda user: user.id)
    security.filter(posts, "edit", current_user)
"""
from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml
from pydantic import ValidationError

from predicate_security.config.schema import PolicyDocument
from predicate_security.core.errors import ConfigurationError, PolicyConfigError
from predicate_security.engine.resolver import GlobalPermissionResolver, UserKeyExtractor
from predicate_security.filter import PredicateFilter

logger = logging.getLogger(__name__)


def resolve_reference(
    reference: str,
    known: Mapping[str, Any] | None = None,
    config_path: str | None = None,
) -> Any:
    """Resolve *reference* from *known*, falling back to an import path.

    Raises
    ------
    PolicyConfigError
        If the reference cannot be imported.
    """
    if known and reference in known:
        return known[reference]

    if ":" in reference:
        module_name, _, attr_path = reference.partition(":")
    else:
        module_name, _, attr_path = reference.rpartition(".")
    if not module_name or not attr_path:
        raise PolicyConfigError(
            f"Cannot resolve {reference!r}: not a known name and not an import path.",
            config_path,
        )

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise PolicyConfigError(
            f"Cannot resolve {reference!r}: failed to import {module_name!r} ({exc}).",
            config_path,
        ) from exc

    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as exc:
            raise PolicyConfigError(
                f"Cannot resolve {reference!r}: {module_name!r} has no attribute {attr_path!r}.",
                config_path,
            ) from exc
    return target


class PolicyLoader:
    """Builds frozen PredicateFilter instances from policy documents.

    Parameters
    ----------
    predicates:
        Match predicates by name. Takes precedence over import paths.
    content_types:
        Content types by name. Takes precedence over import paths.
    strict:
        When ``True``, unknown top-level keys in the document are treated as
        an error. Default ``False`` (unknown keys are ignored).
    """

    _KNOWN_TOP_KEYS: frozenset[str] = frozenset(
        ["version", "description", "allow_reusing_group_names", "groups", "metadata"]
    )

    def __init__(
        self,
        predicates: Mapping[str, Callable[[Any, Any], bool]] | None = None,
        content_types: Mapping[str, type] | None = None,
        strict: bool = False,
    ) -> None:
        self._predicates = dict(predicates or {})
        self._content_types = dict(content_types or {})
        self._strict = strict

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def read_document(self, config_path: str | Path) -> PolicyDocument:
        """Parse and validate a policy file without resolving references.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        PolicyConfigError
            If the file cannot be parsed or is structurally invalid.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Policy file not found: {config_path}")

        try:
            with config_path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise PolicyConfigError(f"Failed to parse YAML: {exc}", str(config_path)) from exc
        return self.parse_document(raw, config_path=str(config_path))

    def parse_document(
        self,
        raw: Mapping[str, object],
        config_path: str | None = None,
    ) -> PolicyDocument:
        """Validate an already-parsed policy mapping."""
        if not isinstance(raw, Mapping):
            raise PolicyConfigError("Policy document must be a YAML mapping.", config_path)
        if self._strict:
            unknown_keys = set(raw.keys()) - self._KNOWN_TOP_KEYS
            if unknown_keys:
                raise PolicyConfigError(
                    f"Unknown top-level keys: {sorted(unknown_keys)}. "
                    f"Known keys: {sorted(self._KNOWN_TOP_KEYS)}.",
                    config_path,
                )
        try:
            return PolicyDocument.model_validate(dict(raw))
        except ValidationError as exc:
            raise PolicyConfigError(f"Invalid policy document: {exc}", config_path) from exc

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def load(
        self,
        config_path: str | Path,
        get_user_key: UserKeyExtractor | None = None,
        get_global_permissions: GlobalPermissionResolver | None = None,
    ) -> PredicateFilter:
        """Load a frozen PredicateFilter from a YAML policy file."""
        document = self.read_document(config_path)
        return self.build(
            document,
            get_user_key=get_user_key,
            get_global_permissions=get_global_permissions,
            config_path=str(config_path),
        )

    def load_from_dict(
        self,
        config: Mapping[str, object],
        get_user_key: UserKeyExtractor | None = None,
        get_global_permissions: GlobalPermissionResolver | None = None,
        config_path: str | None = None,
    ) -> PredicateFilter:
        """Load a frozen PredicateFilter from an already-parsed mapping."""
        document = self.parse_document(config, config_path=config_path)
        return self.build(
            document,
            get_user_key=get_user_key,
            get_global_permissions=get_global_permissions,
            config_path=config_path,
        )

    def load_from_yaml_string(
        self,
        yaml_string: str,
        get_user_key: UserKeyExtractor | None = None,
        get_global_permissions: GlobalPermissionResolver | None = None,
        config_path: str | None = None,
    ) -> PredicateFilter:
        """Load a frozen PredicateFilter from YAML text."""
        try:
            raw = yaml.safe_load(yaml_string) or {}
        except yaml.YAMLError as exc:
            raise PolicyConfigError(f"Failed to parse YAML string: {exc}", config_path) from exc
        return self.load_from_dict(
            raw,
            get_user_key=get_user_key,
            get_global_permissions=get_global_permissions,
            config_path=config_path,
        )

    def resolve_content_type(self, reference: str, config_path: str | None = None) -> type:
        """Resolve a content type reference, requiring a class."""
        content_type = resolve_reference(reference, self._content_types, config_path)
        if not isinstance(content_type, type):
            raise PolicyConfigError(
                f"Content type {reference!r} does not resolve to a class.", config_path
            )
        return content_type

    def build(
        self,
        document: PolicyDocument,
        get_user_key: UserKeyExtractor | None = None,
        get_global_permissions: GlobalPermissionResolver | None = None,
        config_path: str | None = None,
    ) -> PredicateFilter:
        """Declare every group of *document* on a new filter and freeze it."""
        security = PredicateFilter(
            get_user_key=get_user_key,
            get_global_permissions=get_global_permissions,
            allow_reusing_group_names=document.allow_reusing_group_names,
        )

        for index, declaration in enumerate(document.groups):
            content_type = self.resolve_content_type(declaration.content_type, config_path)
            match = resolve_reference(declaration.match, self._predicates, config_path)
            if not callable(match):
                raise PolicyConfigError(
                    f"Match predicate {declaration.match!r} of group "
                    f"'{declaration.name}' is not callable.",
                    config_path,
                )
            try:
                security.add_group(declaration.name, content_type, match)
                for permission, value in declaration.permissions.items():
                    security.add_permission(declaration.name, permission, value, content_type)
            except (ConfigurationError, ValueError, TypeError) as exc:
                raise PolicyConfigError(
                    f"Error in group at index {index}: {exc}", config_path
                ) from exc

        security.freeze()
        logger.info(
            "Loaded %d security groups from %s (allow_reusing_group_names=%s)",
            len(document.groups),
            config_path or "<dict>",
            document.allow_reusing_group_names,
        )
        return security
