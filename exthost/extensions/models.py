"""
Runtime models for hosted extensions.
"""

import traceback
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from .manifest import ExtensionManifest


class ExtensionState(str, Enum):
    """Lifecycle states of a registered extension."""
    LOADING = "loading"
    ACTIVE = "active"
    INACTIVE = "inactive"
    ERROR = "error"
    DISABLED = "disabled"


def generate_extension_id() -> str:
    """Opaque instance id: ``ext_<epoch-ms>_<random>``."""
    millis = int(datetime.now().timestamp() * 1000)
    return f"ext_{millis}_{uuid.uuid4().hex[:9]}"


@dataclass
class ExtensionInstance:
    """One registered extension and its lifecycle bookkeeping."""
    id: str
    manifest: ExtensionManifest
    state: ExtensionState = ExtensionState.LOADING
    instance: Any = None
    config: Dict[str, Any] = field(default_factory=dict)
    error: Optional[BaseException] = None
    error_at: Optional[datetime] = None
    installed_at: datetime = field(default_factory=datetime.now)
    last_activated: Optional[datetime] = None

    @property
    def name(self) -> str:
        return self.manifest.name

    @property
    def is_active(self) -> bool:
        return self.state == ExtensionState.ACTIVE

    def record_error(self, error: BaseException, fatal: bool = True) -> None:
        self.error = error
        self.error_at = datetime.now()
        if fatal:
            self.state = ExtensionState.ERROR

    def snapshot(self) -> "ExtensionInstance":
        """Shallow copy for read-only consumers; config is copied too."""
        return replace(self, config=dict(self.config))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.manifest.name,
            "displayName": self.manifest.display_name,
            "version": self.manifest.version,
            "state": self.state.value,
            "config": dict(self.config),
            "error": str(self.error) if self.error else None,
            "installedAt": self.installed_at.isoformat(),
            "lastActivated": self.last_activated.isoformat() if self.last_activated else None,
        }


@dataclass
class ExecutionResult:
    """Outcome of running an extension command. Never raised, always returned."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    duration: float = 0.0  # milliseconds

    def to_dict(self) -> Dict[str, Any]:
        result = {"success": self.success, "duration": self.duration}
        if self.success:
            result["data"] = self.data
        else:
            result["error"] = self.error
        return result


@dataclass
class ExtensionErrorInfo:
    """Error report entry for one extension."""
    extension_id: str
    message: str
    stack: Optional[str]
    timestamp: datetime
    fatal: bool

    @classmethod
    def from_instance(cls, instance: ExtensionInstance) -> "ExtensionErrorInfo":
        error = instance.error
        stack = None
        if error is not None and error.__traceback__ is not None:
            stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return cls(
            extension_id=instance.manifest.name,
            message=str(error),
            stack=stack,
            timestamp=instance.error_at or datetime.now(),
            fatal=instance.state == ExtensionState.ERROR,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "extensionId": self.extension_id,
            "message": self.message,
            "stack": self.stack,
            "timestamp": self.timestamp.isoformat(),
            "fatal": self.fatal,
        }


@dataclass
class ExtensionContext:
    """What an extension class receives on construction."""
    extension_id: str
    manifest: ExtensionManifest
    api: Any
    config: Dict[str, Any]
    logger: Any
    storage: Any

    def __getattr__(self, name: str) -> Any:
        # context.ui, context.workspace, ... resolve to the matching facade
        if name.startswith("_") or name == "api":
            raise AttributeError(name)
        try:
            return getattr(self.api, name)
        except AttributeError:
            raise AttributeError(f"ExtensionContext has no attribute '{name}'") from None
