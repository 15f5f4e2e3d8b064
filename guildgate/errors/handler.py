"""
ErrorHandler — turns storage failures and denials into friendly messages.

Usage:
    from guildgate.errors.handler import ErrorHandler

    error_handler = ErrorHandler()

    try:
        await service.bind_role(guild_id, role_id, role_name, capabilities)
    except PersistenceError as e:
        friendly = error_handler.handle(e, context=f"bind_role:{guild_id}")
        await reply(friendly.message)
"""

import logging
from dataclasses import replace
from typing import Iterable

from guildgate.errors.catalog import (
    ERROR_PATTERNS,
    GENERIC_ERROR,
    PERMISSION_DENIED,
    UNKNOWN_CAPABILITY_IGNORED,
)
from guildgate.errors.models import ErrorSeverity, FriendlyError
from guildgate.models.capability import Capability, describe_capability

logger = logging.getLogger("guildgate.errors")


class ErrorHandler:
    """Matches errors against the catalog and returns friendly messages."""

    def handle(self, error: Exception, context: str = "") -> FriendlyError:
        """Match an exception to a friendly error, logging the raw details."""
        # Chained driver errors carry the useful text
        parts = [str(error)]
        if error.__cause__ is not None:
            parts.append(str(error.__cause__))
        return self.handle_string(" | ".join(parts), context)

    def handle_string(self, error_message: str, context: str = "") -> FriendlyError:
        for pattern, template in ERROR_PATTERNS:
            if pattern.search(error_message):
                friendly = replace(template, original_error=error_message)
                self._log_error(friendly, context)
                return friendly

        friendly = replace(GENERIC_ERROR, original_error=error_message)
        self._log_error(friendly, context, matched=False)
        return friendly

    def _log_error(
        self, friendly: FriendlyError, context: str, matched: bool = True
    ) -> None:
        prefix = f"[{context}] " if context else ""
        match_tag = friendly.error_code if matched else "UNMATCHED"

        if friendly.severity == ErrorSeverity.CRITICAL:
            logger.error(f"{prefix}{match_tag}: {friendly.original_error}")
        elif friendly.severity == ErrorSeverity.CONFIG:
            logger.warning(f"{prefix}{match_tag}: {friendly.original_error}")
        else:
            logger.info(f"{prefix}{match_tag}: {friendly.original_error}")


def permission_denied(capability: Capability) -> FriendlyError:
    """The fixed denial message shown when authorize() returns False."""
    description = describe_capability(capability)
    return replace(
        PERMISSION_DENIED,
        message=(
            f"You don't have permission to do that. "
            f"Required permission: `{capability.value}` ({description})."
        ),
        required_capability=capability.value,
    )


def unknown_capabilities_ignored(names: Iterable[str]) -> FriendlyError:
    """Notice for administration calls that named capabilities outside the catalog."""
    dropped = ", ".join(f"`{n}`" for n in names)
    return replace(
        UNKNOWN_CAPABILITY_IGNORED,
        message=f"These permission names weren't recognised and were ignored: {dropped}.",
    )
