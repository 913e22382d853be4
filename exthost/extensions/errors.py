"""Exception classes for the extension host."""


class ExtensionError(Exception):
    """Base exception for all extension-related errors"""
    pass


class ValidationError(ExtensionError):
    """Raised when an extension manifest is malformed"""
    pass


class DuplicateNameError(ExtensionError):
    """Raised when an extension name is already registered"""
    pass


class NotFoundError(ExtensionError, LookupError):
    """Raised when an extension or one of its commands is unknown"""
    pass


class PermissionDeniedError(ExtensionError, PermissionError):
    """Raised when an extension uses a capability it was not granted"""

    def __init__(self, extension_name: str, permission: str = None, message: str = None):
        self.extension_name = extension_name
        self.permission = permission
        if message is None:
            if permission is None:
                message = f"No permissions found for extension '{extension_name}'"
            else:
                message = f"Extension '{extension_name}' does not have permission '{permission}'"
        super().__init__(message)


class ModuleLoadError(ExtensionError):
    """Raised when an extension module cannot be loaded or its on_load hook fails"""
    pass


class ActivationError(ExtensionError):
    """Raised when an extension's on_activate hook fails"""
    pass


class DeactivationError(ExtensionError):
    """Raised when an extension's on_deactivate hook fails"""
    pass


class CapabilityUnavailableError(ExtensionError):
    """Raised when a facade needs a host service that was not configured"""
    pass


class WorkspacePathError(ExtensionError, ValueError):
    """Raised when a path escapes the workspace root"""
    pass
