"""
Capability catalog.

The closed set of bot capabilities a tenant policy can grant.
Values are the wire names stored in every backend.
"""

from enum import Enum
from typing import Iterable, Optional


class Capability(str, Enum):
    """A named permission unlocking one bot action."""

    USE_BOT = "use_bot"
    RUN_ANALYSIS = "run_analysis"
    QUICK_ANALYZE = "quick_analyze"
    CONSULT = "consult"
    MANAGE_CONFIG = "manage_config"
    MANAGE_PERMISSIONS = "manage_permissions"
    VIEW_HELP = "view_help"


ALL_CAPABILITIES: frozenset[Capability] = frozenset(Capability)

# Safe defaults for a tenant seen for the first time
DEFAULT_CAPABILITIES: frozenset[Capability] = frozenset({Capability.VIEW_HELP})
DEFAULT_ADMIN_ONLY: frozenset[Capability] = frozenset({
    Capability.MANAGE_CONFIG,
    Capability.MANAGE_PERMISSIONS,
})

CAPABILITY_DESCRIPTIONS: dict[Capability, str] = {
    Capability.USE_BOT: "Use the bot's basic features",
    Capability.RUN_ANALYSIS: "Run conversation analysis",
    Capability.QUICK_ANALYZE: "Run a quick analysis",
    Capability.CONSULT: "Use the consultation feature",
    Capability.MANAGE_CONFIG: "Change bot configuration",
    Capability.MANAGE_PERMISSIONS: "Manage permission settings",
    Capability.VIEW_HELP: "View help",
}


def parse_capability(name) -> Optional[Capability]:
    """
    Resolve a capability from its wire name.

    Accepts enum members, "use_bot" and "use-bot" spellings (any case).
    Returns None for anything outside the catalog.
    """
    if isinstance(name, Capability):
        return name
    if not isinstance(name, str):
        return None
    normalized = name.strip().lower().replace("-", "_")
    try:
        return Capability(normalized)
    except ValueError:
        return None


def parse_capabilities(names: Iterable) -> tuple[frozenset[Capability], list[str]]:
    """
    Split raw names into a capability set and the names that were dropped.

    Dropped names are returned in input order, as strings, so callers can
    report them.
    """
    kept: set[Capability] = set()
    dropped: list[str] = []
    for name in names:
        capability = parse_capability(name)
        if capability is None:
            dropped.append(str(name))
        else:
            kept.add(capability)
    return frozenset(kept), dropped


def describe_capability(capability: Capability) -> str:
    return CAPABILITY_DESCRIPTIONS.get(capability, capability.value)


def list_capabilities() -> list[Capability]:
    """All capabilities in catalog order."""
    return list(Capability)


def capabilities_to_record(capabilities: Iterable[Capability]) -> list[str]:
    """Serialize a capability set as a sorted list of wire names."""
    return sorted(c.value for c in capabilities)
