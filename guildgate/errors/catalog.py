"""
Error pattern catalog.

Maps regex patterns over raw storage errors to friendly, actionable
messages. First match wins, so specific patterns go before general ones.
"""

import re

from guildgate.errors.models import FriendlyError, ErrorSeverity

ERROR_PATTERNS: list[tuple[re.Pattern, FriendlyError]] = [
    # ── DynamoDB ──────────────────────────────────────────────────────────

    (
        re.compile(r"ResourceNotFoundException", re.IGNORECASE),
        FriendlyError(
            message=(
                "I can't find the settings table. The deployment may be incomplete, "
                "so your change was not saved."
            ),
            severity=ErrorSeverity.CRITICAL,
            error_code="DYNAMODB_TABLE_MISSING",
            action="Verify GUILDGATE_DYNAMODB_TABLE and that the table exists",
            admin_required=True,
        ),
    ),
    (
        re.compile(r"ProvisionedThroughputExceededException|ThrottlingException", re.IGNORECASE),
        FriendlyError(
            message="The settings database is busy right now. Try again in a moment.",
            severity=ErrorSeverity.INFO,
            error_code="DYNAMODB_THROTTLED",
            action="Retry in a moment",
        ),
    ),
    (
        re.compile(r"AccessDeniedException|UnrecognizedClientException", re.IGNORECASE),
        FriendlyError(
            message=(
                "I'm not allowed to write to the settings database, so your change "
                "was not saved. The bot's AWS credentials need DynamoDB access."
            ),
            severity=ErrorSeverity.CRITICAL,
            error_code="DYNAMODB_ACCESS_DENIED",
            action="Grant dynamodb:GetItem and dynamodb:PutItem to the bot role",
            admin_required=True,
        ),
    ),
    (
        re.compile(r"Could not connect to the endpoint|EndpointConnectionError", re.IGNORECASE),
        FriendlyError(
            message="I can't reach the settings database right now. Try again shortly.",
            severity=ErrorSeverity.INFO,
            error_code="DYNAMODB_UNREACHABLE",
            action="Retry in a few minutes",
        ),
    ),

    # ── SQLite ────────────────────────────────────────────────────────────

    (
        re.compile(r"database is locked", re.IGNORECASE),
        FriendlyError(
            message="Another change is being saved. Try again in a moment.",
            severity=ErrorSeverity.INFO,
            error_code="SQLITE_LOCKED",
            action="Retry in a moment",
        ),
    ),
    (
        re.compile(r"readonly database|unable to open database", re.IGNORECASE),
        FriendlyError(
            message=(
                "The local settings database can't be written, so your change was "
                "not saved."
            ),
            severity=ErrorSeverity.CRITICAL,
            error_code="SQLITE_NOT_WRITABLE",
            action="Check GUILDGATE_SQLITE_PATH and its file permissions",
            admin_required=True,
        ),
    ),

    # ── Files ─────────────────────────────────────────────────────────────

    (
        re.compile(r"Permission denied|Read-only file system", re.IGNORECASE),
        FriendlyError(
            message=(
                "I don't have permission to write the settings files, so your change "
                "was not saved."
            ),
            severity=ErrorSeverity.CRITICAL,
            error_code="FILE_PERMISSION_DENIED",
            action="Check GUILDGATE_DATA_DIR permissions",
            admin_required=True,
        ),
    ),
    (
        re.compile(r"No space left on device", re.IGNORECASE),
        FriendlyError(
            message="The bot's disk is full, so your change was not saved.",
            severity=ErrorSeverity.CRITICAL,
            error_code="DISK_FULL",
            action="Free disk space on the bot host",
            admin_required=True,
        ),
    ),

    # ── Generic ───────────────────────────────────────────────────────────

    (
        re.compile(r"timed out", re.IGNORECASE),
        FriendlyError(
            message=(
                "Saving took too long and was abandoned. Your change may not have "
                "been applied, so check the current settings and try again."
            ),
            severity=ErrorSeverity.INFO,
            error_code="STORE_TIMEOUT",
            action="Check settings and retry",
        ),
    ),
    (
        re.compile(r"Failed to (save|load)", re.IGNORECASE),
        FriendlyError(
            message="I couldn't save that change. Please try again.",
            severity=ErrorSeverity.CONFIG,
            error_code="PERSISTENCE_FAILED",
            action="Retry, then check storage health",
            admin_required=True,
        ),
    ),
]


GENERIC_ERROR = FriendlyError(
    message=(
        "Something unexpected went wrong. I've logged the details. "
        "Try again, and ask a server admin if it keeps happening."
    ),
    severity=ErrorSeverity.INFO,
    error_code="UNKNOWN",
    action="Retry",
)

PERMISSION_DENIED = FriendlyError(
    message="You don't have permission to do that.",
    severity=ErrorSeverity.INFO,
    error_code="PERMISSION_DENIED",
    action="Ask a server admin to grant you the required permission",
)

UNKNOWN_CAPABILITY_IGNORED = FriendlyError(
    message="Some permission names weren't recognised and were ignored.",
    severity=ErrorSeverity.INFO,
    error_code="UNKNOWN_CAPABILITY_IGNORED",
    action="Use /help to see the valid permission names",
)
