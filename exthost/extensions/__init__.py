"""
Extension hosting: manifests, permissions, lifecycle and the API surface
handed to extensions.
"""

from .errors import (
    ActivationError,
    CapabilityUnavailableError,
    DeactivationError,
    DuplicateNameError,
    ExtensionError,
    ModuleLoadError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    WorkspacePathError,
)
from .events import EventBus, Subscription
from .host import ExtensionHost
from .loader import ExtensionLoader
from .manifest import ExtensionManifest, load_manifest, validate_manifest
from .models import (
    ExecutionResult,
    ExtensionContext,
    ExtensionErrorInfo,
    ExtensionInstance,
    ExtensionState,
)
from .module import ExtensionFactory, ExtensionLifecycle, ExtensionModule, PrebuiltExtension
from .permissions import Permission, PermissionMatrix
from .resources import ResourceTracker

__all__ = [
    "ActivationError",
    "CapabilityUnavailableError",
    "DeactivationError",
    "DuplicateNameError",
    "EventBus",
    "ExecutionResult",
    "ExtensionContext",
    "ExtensionError",
    "ExtensionErrorInfo",
    "ExtensionFactory",
    "ExtensionHost",
    "ExtensionInstance",
    "ExtensionLifecycle",
    "ExtensionLoader",
    "ExtensionManifest",
    "ExtensionModule",
    "ExtensionState",
    "ModuleLoadError",
    "NotFoundError",
    "Permission",
    "PermissionDeniedError",
    "PermissionMatrix",
    "PrebuiltExtension",
    "ResourceTracker",
    "Subscription",
    "ValidationError",
    "WorkspacePathError",
    "load_manifest",
    "validate_manifest",
]
