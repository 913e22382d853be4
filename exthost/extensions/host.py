"""
Extension registry and lifecycle controller.
"""

import asyncio
import inspect
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from ..services import HostServices
from .api import ExtensionAPI, WebviewHandle, create_extension_api
from .errors import (
    ActivationError,
    DeactivationError,
    DuplicateNameError,
    ExtensionError,
    ModuleLoadError,
    NotFoundError,
    PermissionDeniedError,
)
from .events import EventBus
from .loader import ExtensionLoader
from .manifest import ExtensionManifest, coerce_manifest, validate_manifest
from .models import (
    ExecutionResult,
    ExtensionContext,
    ExtensionErrorInfo,
    ExtensionInstance,
    ExtensionState,
    generate_extension_id,
)
from .module import call_hook, resolve_module
from .permissions import Permission, PermissionMatrix
from .resources import (
    CommandRegistration,
    KeybindingRegistration,
    ResourceTracker,
    StatusBarItem,
)

DEFAULT_ACTIVATION_PERMISSIONS = (Permission.UI_RENDER.value,)


class ExtensionHost:
    """
    Registers extensions, drives their lifecycle and mediates every
    capability they use.

    The host owns the registry, the permission matrix, the resource tracker
    and the event bus. Lifecycle operations for the same extension name are
    serialized with a per-name lock; different names proceed independently.
    """

    def __init__(self, config=None, services: Optional[HostServices] = None,
                 events: Optional[EventBus] = None,
                 activation_permissions: Optional[Iterable[str]] = None):
        self.config = config
        self.logger = logging.getLogger("exthost.host")

        if services is None:
            if config is not None:
                services = HostServices.from_config(config)
            else:
                services = HostServices.for_workspace(Path.cwd())
        self.services = services

        if activation_permissions is None and config is not None:
            activation_permissions = config.get("activation_permissions")
        if activation_permissions is None:
            activation_permissions = DEFAULT_ACTIVATION_PERMISSIONS
        self.activation_permissions = tuple(activation_permissions)

        self.events = events or EventBus()
        self.permissions = PermissionMatrix()
        self.resources = ResourceTracker()
        self.extensions: Dict[str, ExtensionInstance] = {}
        self.loader = ExtensionLoader(
            config.get_extensions_dirs() if config is not None else [],
            include_builtin=bool(config.get("include_builtin")) if config is not None else False,
        )
        self._locks: Dict[str, asyncio.Lock] = {}

        self.services.bind_events(self.events)

    # Registration

    async def register_extension(self, manifest: Union[ExtensionManifest, Mapping[str, Any], str],
                                 module: Any, config: Optional[Dict[str, Any]] = None) -> str:
        """
        Register an extension and load its module.

        Returns:
            The generated extension id

        Raises:
            ValidationError: If the manifest is malformed
            DuplicateNameError: If the name is already registered
            ModuleLoadError: If the module cannot be loaded or ``on_load`` fails
        """
        manifest = coerce_manifest(manifest)
        validate_manifest(manifest)
        name = manifest.name

        async with self._lock(name):
            if name in self.extensions:
                raise DuplicateNameError(f"Extension '{name}' is already registered")

            instance = ExtensionInstance(
                id=generate_extension_id(),
                manifest=manifest,
                state=ExtensionState.LOADING,
                config={**manifest.default_config, **(config or {})},
            )
            self.extensions[name] = instance
            self.permissions.grant(manifest)

            try:
                await self._load_extension(instance, module)
                await self.services.storage.initialize(name)
            except Exception as e:
                instance.record_error(e)
                self.logger.error(f"Failed to load extension {name}: {e}")
                if isinstance(e, ModuleLoadError):
                    raise
                raise ModuleLoadError(f"Failed to load extension '{name}': {e}") from e

            instance.state = ExtensionState.INACTIVE
            self.logger.info(f"Registered extension: {name} v{manifest.version}")
            return instance.id

    async def load_from_directory(self, path: Union[str, Path], config: Optional[Dict[str, Any]] = None,
                                  activate: bool = False) -> str:
        """Register (and optionally activate) the extension stored in ``path``."""
        manifest = self.loader.load_manifest(path)
        if manifest.name in self.extensions:
            raise DuplicateNameError(f"Extension '{manifest.name}' is already registered")

        module = self.loader.load_module(path, manifest)
        extension_id = await self.register_extension(manifest, module, config)
        if activate:
            await self.activate_extension(manifest.name)
        return extension_id

    async def load_discovered(self, activate: bool = False) -> Dict[str, Optional[str]]:
        """
        Load every extension found in the loader's directories.

        Returns a mapping of directory name to extension id, or ``None`` for
        directories that failed to load (the failure is logged).
        """
        results: Dict[str, Optional[str]] = {}
        for path in self.loader.discover():
            try:
                results[path.name] = await self.load_from_directory(path, activate=activate)
            except ExtensionError as e:
                self.logger.error(f"Failed to load extension from {path}: {e}")
                results[path.name] = None
        return results

    # Lifecycle

    async def activate_extension(self, name: str) -> None:
        async with self._lock(name):
            await self._activate(name)

    async def deactivate_extension(self, name: str) -> None:
        async with self._lock(name):
            await self._deactivate(name)

    async def unregister_extension(self, name: str) -> None:
        """Deactivate, dispose and forget an extension, releasing its name."""
        async with self._lock(name):
            instance = self._require_instance(name)

            if instance.state == ExtensionState.ACTIVE:
                try:
                    await self._deactivate(name)
                except DeactivationError as e:
                    self.logger.warning(f"Deactivation of {name} failed during unregister: {e}")

            try:
                await call_hook(instance.instance, "dispose")
            except Exception as e:
                self.logger.error(f"Error disposing extension {name}: {e}")

            self._cleanup(name)
            del self.extensions[name]
            self.permissions.revoke(name)

            self.logger.info(f"Unregistered extension: {name}")
            self.events.emit("extension:unregistered", name)

        self._discard_lock(name)

    async def set_extension_enabled(self, name: str, enabled: bool) -> None:
        async with self._lock(name):
            instance = self._require_instance(name)
            if enabled:
                if instance.state in (ExtensionState.INACTIVE, ExtensionState.DISABLED):
                    await self._activate(name)
                return

            if instance.state == ExtensionState.ACTIVE:
                await self._deactivate(name)
            if instance.state != ExtensionState.ERROR:
                instance.state = ExtensionState.DISABLED
                self.logger.info(f"Disabled extension: {name}")

    async def update_extension_config(self, name: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Merge ``values`` into the extension's config and notify it."""
        async with self._lock(name):
            self._require_instance(name)
            return await self.apply_config(name, values)

    async def apply_config(self, name: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        instance = self._require_instance(name)
        instance.config.update(values)
        config = dict(instance.config)
        await self._notify_config_change(instance, config)
        await self.events.emit_async("config:changed", name, config)
        return config

    async def _activate(self, name: str) -> None:
        instance = self._require_instance(name)
        if instance.state == ExtensionState.ACTIVE:
            return
        if instance.instance is None:
            raise ActivationError(f"Extension '{name}' was not loaded; unregister and register it again")

        try:
            self.permissions.check(name, self.activation_permissions)
        except PermissionDeniedError as e:
            instance.record_error(e)
            self.logger.error(f"Cannot activate {name}: {e}")
            raise

        instance.state = ExtensionState.LOADING
        instance.last_activated = datetime.now()

        try:
            await call_hook(instance.instance, "on_activate")
        except Exception as e:
            instance.record_error(e)
            self.logger.error(f"Failed to activate extension {name}: {e}")
            raise ActivationError(f"Failed to activate extension '{name}': {e}") from e

        instance.state = ExtensionState.ACTIVE
        instance.error = None
        instance.error_at = None
        self.logger.info(f"Activated extension: {name}")
        self.events.emit("extension:activated", name, instance.snapshot())

    async def _deactivate(self, name: str) -> None:
        instance = self._require_instance(name)
        if instance.state != ExtensionState.ACTIVE:
            return

        failure: Optional[Exception] = None
        try:
            await call_hook(instance.instance, "on_deactivate")
        except Exception as e:
            failure = e

        self._cleanup(name)

        if failure is not None:
            instance.record_error(failure)
            self.logger.error(f"Failed to deactivate extension {name}: {failure}")
            raise DeactivationError(f"Failed to deactivate extension '{name}': {failure}") from failure

        instance.state = ExtensionState.INACTIVE
        self.logger.info(f"Deactivated extension: {name}")
        self.events.emit("extension:deactivated", name, instance.snapshot())

    async def _load_extension(self, instance: ExtensionInstance, module: Any) -> None:
        resolved = resolve_module(module)
        context = self._create_context(instance)
        obj = resolved.build(context)
        await call_hook(obj, "on_load")
        instance.instance = obj

    def _create_context(self, instance: ExtensionInstance) -> ExtensionContext:
        api = create_extension_api(self, instance.name)
        return ExtensionContext(
            extension_id=instance.id,
            manifest=instance.manifest,
            api=api,
            config=instance.config,
            logger=api.logger,
            storage=api.storage,
        )

    def _cleanup(self, name: str) -> None:
        self.resources.cleanup_all(name)

    # Commands

    async def execute_extension_command(self, name: str, command: str, *args: Any) -> ExecutionResult:
        """Run a registered command. Failures are reported, never raised."""
        started = time.perf_counter()

        def _elapsed() -> float:
            return (time.perf_counter() - started) * 1000

        if name not in self.extensions:
            return ExecutionResult(False, error=f"Extension '{name}' not found", duration=_elapsed())

        try:
            self.permissions.check(name, [Permission.UI_COMMAND])

            registration = self.resources.get_command(name, command)
            if registration is None:
                return ExecutionResult(
                    False,
                    error=f"Command '{command}' not found in extension '{name}'",
                    duration=_elapsed(),
                )

            result = registration.handler(*args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            self.logger.error(f"Command {name}:{command} failed: {e}")
            return ExecutionResult(False, error=str(e), duration=_elapsed())

        return ExecutionResult(True, data=result, duration=_elapsed())

    def register_command(self, name: str, command_id: str, title: str, handler: Callable[..., Any]) -> None:
        self.resources.add_command(CommandRegistration(name, command_id, title, handler))
        self.events.emit("command:registered", name, command_id, title)

    def register_keybinding(self, name: str, key: str, command: str) -> None:
        self.resources.add_keybinding(KeybindingRegistration(name, key, command))
        self.events.emit("keybinding:registered", name, key, command)

    def register_status_bar_item(self, name: str, item_id: str, text: str,
                                 tooltip: Optional[str] = None) -> None:
        self.resources.add_status_bar_item(StatusBarItem(name, item_id, text, tooltip))
        self.events.emit("statusbar:item:registered", name, item_id, text, tooltip)

    def show_notification(self, name: str, message: str, type: str = "info") -> None:
        """Hand a notification to the UI bridge and publish it on the bus."""
        self.events._schedule("ui:notification", self.services.ui.notify(name, message, type))
        self.events.emit("ui:notification", name, message, type)

    # Queries

    def get_extension_api(self, name: str) -> Optional[ExtensionAPI]:
        if name not in self.extensions:
            return None
        return create_extension_api(self, name)

    def get_extension(self, name: str) -> Optional[ExtensionInstance]:
        instance = self.extensions.get(name)
        return instance.snapshot() if instance else None

    def get_all_extensions(self) -> List[ExtensionInstance]:
        return [instance.snapshot() for instance in self.extensions.values()]

    def get_active_extensions(self) -> List[ExtensionInstance]:
        return [i.snapshot() for i in self.extensions.values() if i.state == ExtensionState.ACTIVE]

    def get_extension_errors(self) -> List[ExtensionErrorInfo]:
        return [
            ExtensionErrorInfo.from_instance(instance)
            for instance in self.extensions.values()
            if instance.error is not None
        ]

    def get_statistics(self) -> Dict[str, Any]:
        states = [instance.state for instance in self.extensions.values()]
        return {
            "total": len(states),
            "active": states.count(ExtensionState.ACTIVE),
            "inactive": states.count(ExtensionState.INACTIVE),
            "with_errors": sum(1 for i in self.extensions.values() if i.error is not None),
            "permissions": self.permissions.counts(),
        }

    def get_commands(self) -> List[CommandRegistration]:
        return list(self.resources.commands.values())

    def get_keybindings(self, name: Optional[str] = None) -> List[KeybindingRegistration]:
        if name is not None:
            return list(self.resources.keybindings.get(name, []))
        return [kb for bindings in self.resources.keybindings.values() for kb in bindings]

    def get_status_bar_items(self) -> List[StatusBarItem]:
        return list(self.resources.status_bar_items.values())

    def get_webviews(self) -> List[WebviewHandle]:
        return list(self.resources.webviews.values())

    # Host lifecycle

    async def shutdown(self) -> None:
        """Unregister every extension and release host services."""
        for name in list(self.extensions):
            try:
                await self.unregister_extension(name)
            except ExtensionError as e:
                self.logger.error(f"Error unregistering {name} during shutdown: {e}")

        await self.events.drain()
        await self.services.close()
        self.logger.info("Extension host shut down")

    async def __aenter__(self) -> "ExtensionHost":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.shutdown()

    # Internals

    def _lock(self, name: str) -> asyncio.Lock:
        lock = self._locks.get(name)
        if lock is None:
            lock = self._locks[name] = asyncio.Lock()
        return lock

    def _require_instance(self, name: str) -> ExtensionInstance:
        instance = self.extensions.get(name)
        if instance is None:
            raise NotFoundError(f"Extension '{name}' not found")
        return instance

    def _discard_lock(self, name: str) -> None:
        lock = self._locks.get(name)
        if lock is not None and not lock.locked() and name not in self.extensions:
            del self._locks[name]

    async def _notify_config_change(self, instance: ExtensionInstance, config: Dict[str, Any]) -> None:
        try:
            await call_hook(instance.instance, "on_config_change", config)
        except Exception as e:
            self.logger.error(f"Extension {instance.name} failed to handle config change: {e}")
