from guildgate.errors.models import FriendlyError, ErrorSeverity
from guildgate.errors.handler import (
    ErrorHandler, permission_denied, unknown_capabilities_ignored,
)

__all__ = [
    "FriendlyError", "ErrorSeverity", "ErrorHandler",
    "permission_denied", "unknown_capabilities_ignored",
]
