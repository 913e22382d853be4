"""Tests for the permission matrix."""

import pytest

from exthost.extensions.errors import PermissionDeniedError
from exthost.extensions.manifest import ExtensionManifest
from exthost.extensions.permissions import Permission, PermissionMatrix

from conftest import make_manifest


def manifest(name="demo-ext", permissions=("ui.render",)):
    return ExtensionManifest.from_dict(make_manifest(name, permissions))


class TestPermissionMatrix:
    """Test grants, checks and counts."""

    def test_check_without_grant_fails(self):
        matrix = PermissionMatrix()
        with pytest.raises(PermissionDeniedError, match="No permissions found"):
            matrix.check("ghost")

    def test_empty_check_passes_with_any_grant(self):
        matrix = PermissionMatrix()
        matrix.grant(manifest(permissions=()))
        matrix.check("demo-ext")

    def test_missing_token_names_permission(self):
        matrix = PermissionMatrix()
        matrix.grant(manifest())
        with pytest.raises(PermissionDeniedError) as exc_info:
            matrix.check("demo-ext", [Permission.WORKSPACE_WRITE])
        assert exc_info.value.permission == "workspace.write"
        assert isinstance(exc_info.value, PermissionError)

    def test_enum_and_string_tokens_are_equivalent(self):
        matrix = PermissionMatrix()
        matrix.grant(manifest(permissions=("git.read",)))
        matrix.check("demo-ext", ["git.read"])
        matrix.check("demo-ext", [Permission.GIT_READ])

    def test_regrant_replaces(self):
        matrix = PermissionMatrix()
        matrix.grant(manifest(permissions=("git.read", "git.write")))
        matrix.grant(manifest(permissions=("git.read",)))
        assert matrix.granted("demo-ext") == frozenset({"git.read"})

    def test_revoke(self):
        matrix = PermissionMatrix()
        matrix.grant(manifest())
        matrix.revoke("demo-ext")
        assert "demo-ext" not in matrix
        assert len(matrix) == 0

    def test_counts(self):
        matrix = PermissionMatrix()
        matrix.grant(manifest("a", ("ui.render", "git.read")))
        matrix.grant(manifest("b", ("ui.render",)))
        assert matrix.counts() == {"ui.render": 2, "git.read": 1}

    def test_missing(self):
        matrix = PermissionMatrix()
        matrix.grant(manifest())
        assert matrix.missing("demo-ext", ["ui.render", "ui.command"]) == ["ui.command"]

    def test_permission_vocabulary(self):
        assert len(Permission.values()) == 17
        assert Permission.is_known("workspace.fileSystem")
        assert not Permission.is_known("workspace.filesystem")
