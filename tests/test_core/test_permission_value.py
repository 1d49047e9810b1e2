"""Tests for PermissionValue."""
from __future__ import annotations

import pytest

from predicate_security.core.permission_value import PermissionValue


class TestPermissionValueParse:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("allow", PermissionValue.ALLOW),
            ("Allow", PermissionValue.ALLOW),
            (" DENY ", PermissionValue.DENY),
            ("inherit", PermissionValue.INHERIT),
        ],
    )
    def test_parses_case_insensitive_strings(self, raw: str, expected: PermissionValue) -> None:
        assert PermissionValue.parse(raw) is expected

    def test_member_passes_through(self) -> None:
        assert PermissionValue.parse(PermissionValue.DENY) is PermissionValue.DENY

    def test_unknown_string_raises(self) -> None:
        with pytest.raises(ValueError, match="grant"):
            PermissionValue.parse("grant")

    def test_non_string_raises(self) -> None:
        with pytest.raises(ValueError):
            PermissionValue.parse(1)  # type: ignore[arg-type]

    def test_is_a_string(self) -> None:
        assert PermissionValue.ALLOW == "allow"


class TestPermissionValueCombine:
    def test_empty_is_inherit(self) -> None:
        assert PermissionValue.combine([]) is PermissionValue.INHERIT

    def test_inherit_only_is_inherit(self) -> None:
        assert PermissionValue.combine([PermissionValue.INHERIT]) is PermissionValue.INHERIT

    def test_allow_beats_inherit(self) -> None:
        values = [PermissionValue.INHERIT, PermissionValue.ALLOW]
        assert PermissionValue.combine(values) is PermissionValue.ALLOW

    def test_deny_beats_allow(self) -> None:
        values = [PermissionValue.ALLOW, PermissionValue.DENY, PermissionValue.ALLOW]
        assert PermissionValue.combine(values) is PermissionValue.DENY

    def test_accepts_generator(self) -> None:
        values = (v for v in [PermissionValue.ALLOW])
        assert PermissionValue.combine(values) is PermissionValue.ALLOW
