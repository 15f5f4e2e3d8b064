"""
Admin Classifier.

An actor is a tenant admin if they own the guild, hold an elevated
platform permission, or hold one of the tenant's configured admin roles.
"""

from typing import Iterable

from guildgate.models.policy import Actor
from guildgate.models.tenant import TenantConfig

# Platform permission names that count as elevated
ELEVATED_PERMISSIONS = frozenset({"administrator", "manage_guild"})


def is_admin(config: TenantConfig, actor: Actor) -> bool:
    if actor.is_guild_owner or actor.has_elevated_permission:
        return True
    return not actor.role_ids.isdisjoint(config.admin_role_ids)


def has_elevated_permission(permission_names: Iterable[str]) -> bool:
    """Map the platform's permission names (e.g. "ManageGuild") to the elevated flag."""
    normalized = {_normalize(name) for name in permission_names}
    return not normalized.isdisjoint(ELEVATED_PERMISSIONS)


def _normalize(name: str) -> str:
    # "ManageGuild", "manage-guild", "MANAGE_GUILD" -> "manage_guild"
    name = name.strip()
    out = []
    for i, ch in enumerate(name):
        if ch in "- ":
            out.append("_")
        elif ch.isupper() and i > 0 and name[i - 1].islower():
            out.append("_" + ch.lower())
        else:
            out.append(ch.lower())
    return "".join(out)
