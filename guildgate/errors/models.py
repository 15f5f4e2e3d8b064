"""
Friendly error models.

What a tenant admin or member sees when a bot action is refused or a
configuration change couldn't be saved.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorSeverity(str, Enum):
    """How serious the error is and who can fix it."""

    INFO = "info"          # Expected outcome or transient (denied, throttled)
    CONFIG = "config"      # Tenant admin or operator action needed
    CRITICAL = "critical"  # Storage is broken, nothing was saved


@dataclass
class FriendlyError:
    """A user-facing error with context and guidance."""

    message: str
    severity: ErrorSeverity
    error_code: str = ""
    action: str = ""
    admin_required: bool = False
    required_capability: str = ""         # Set on PERMISSION_DENIED
    original_error: str = ""              # Logged, never shown to the user

    def to_dict(self) -> dict:
        data = {
            "type": "error",
            "severity": self.severity.value,
            "message": self.message,
            "action": self.action,
            "admin_required": self.admin_required,
            "error_code": self.error_code,
        }
        if self.required_capability:
            data["required_capability"] = self.required_capability
        return data
