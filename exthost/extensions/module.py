"""
What an extension module may provide, and how the host turns it into an
extension object.

An extension module is one of two shapes:

* ``ExtensionFactory`` - a class constructed with an ``ExtensionContext``
* ``PrebuiltExtension`` - an already constructed object

Either way the resulting object may implement any subset of the lifecycle
hooks in ``HOOK_NAMES``; hooks may be plain or ``async`` methods.
"""

import inspect
import types
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from .errors import ModuleLoadError


HOOK_NAMES = ("on_load", "on_activate", "on_deactivate", "on_config_change", "dispose")

# Attributes looked up on a Python module object, in order
CLASS_EXPORT = "Extension"
INSTANCE_EXPORT = "extension"


class ExtensionLifecycle:
    """Optional base class for extensions. Every hook is a no-op."""

    def __init__(self, context=None):
        self.context = context

    async def on_load(self) -> None:
        pass

    async def on_activate(self) -> None:
        pass

    async def on_deactivate(self) -> None:
        pass

    async def on_config_change(self, config) -> None:
        pass

    async def dispose(self) -> None:
        pass


@dataclass(frozen=True)
class ExtensionFactory:
    """A class to instantiate with the extension context."""
    factory: Callable[[Any], Any]

    def build(self, context) -> Any:
        return self.factory(context)


@dataclass(frozen=True)
class PrebuiltExtension:
    """An extension object that already exists."""
    instance: Any

    def build(self, context) -> Any:
        return self.instance


ExtensionModule = Union[ExtensionFactory, PrebuiltExtension]


def has_lifecycle_hooks(obj: Any) -> bool:
    return any(callable(getattr(obj, hook, None)) for hook in HOOK_NAMES)


def resolve_module(module: Any) -> ExtensionModule:
    """
    Normalise whatever the module loader produced.

    Accepts an ``ExtensionModule``, a class, a Python module exporting
    ``Extension`` (class) or ``extension`` (object), or an object implementing
    at least one lifecycle hook.

    Raises:
        ModuleLoadError: If nothing usable is exported
    """
    if isinstance(module, (ExtensionFactory, PrebuiltExtension)):
        return module

    if isinstance(module, types.ModuleType):
        exported = getattr(module, CLASS_EXPORT, None)
        if exported is None:
            exported = getattr(module, INSTANCE_EXPORT, None)
        if exported is None:
            raise ModuleLoadError(
                f"Extension module '{module.__name__}' must export "
                f"'{CLASS_EXPORT}' (class) or '{INSTANCE_EXPORT}' (object)"
            )
        module = exported

    if inspect.isclass(module):
        return ExtensionFactory(module)

    if module is not None and has_lifecycle_hooks(module):
        return PrebuiltExtension(module)

    raise ModuleLoadError("Extension module must export a class or object")


def get_hook(obj: Any, hook: str) -> Optional[Callable[..., Any]]:
    if obj is None:
        return None
    method = getattr(obj, hook, None)
    return method if callable(method) else None


async def call_hook(obj: Any, hook: str, *args: Any) -> bool:
    """Invoke a lifecycle hook if present. Returns False when it is absent."""
    method = get_hook(obj, hook)
    if method is None:
        return False
    result = method(*args)
    if inspect.isawaitable(result):
        await result
    return True
