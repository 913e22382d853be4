"""Shared fixtures for extension host tests."""

import pytest

from exthost.extensions import ExtensionHost
from exthost.services import HostServices, StaticProvider


def make_manifest(name="demo-ext", permissions=("ui.render",), **overrides):
    """JSON-style manifest for tests."""
    manifest = {
        "name": name,
        "displayName": name.replace("-", " ").title(),
        "version": "1.0.0",
        "main": "main.py",
        "permissions": list(permissions) if isinstance(permissions, (list, tuple)) else permissions,
        "categories": ["utility"],
    }
    manifest.update(overrides)
    return manifest


class RecordingExtension:
    """Prebuilt extension object that records hook calls."""

    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on or set()

    async def _hook(self, name, *args):
        self.calls.append(name)
        if name in self.fail_on:
            raise RuntimeError("boom")

    async def on_load(self):
        await self._hook("on_load")

    async def on_activate(self):
        await self._hook("on_activate")

    async def on_deactivate(self):
        await self._hook("on_deactivate")

    async def on_config_change(self, config):
        self.calls.append(("on_config_change", config))

    async def dispose(self):
        await self._hook("dispose")


@pytest.fixture
def workspace(tmp_path):
    root = tmp_path / "workspace"
    root.mkdir()
    (root / "README.md").write_text("# Demo\nhello world\n")
    (root / "src").mkdir()
    (root / "src" / "app.py").write_text("def hello():\n    return 'Hello'\n")
    return root


@pytest.fixture
def ai_provider():
    return StaticProvider("```python\nprint('hi')\n```")


@pytest.fixture
def services(workspace, ai_provider):
    return HostServices.for_workspace(workspace, ai=ai_provider)


@pytest.fixture
def host(services):
    return ExtensionHost(services=services)
