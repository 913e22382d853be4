"""
exthost - extension host for an editor backend

Registers third-party extensions, drives their lifecycle and mediates
every capability they use through a per-extension permission grant.
"""

__version__ = "0.1.0"
__description__ = "Extension host with permission-checked APIs"

from .extensions import ExtensionHost, ExtensionLifecycle, ExtensionManifest, Permission

__all__ = ["ExtensionHost", "ExtensionLifecycle", "ExtensionManifest", "Permission"]
