"""
Tenant isolation tests.

Verifies that per-guild data stays separated:
- Bindings in guild A grant nothing in guild B
- Config changes for guild A don't affect guild B
- Admin roles are scoped to the guild that configured them
"""

import pytest

from guildgate.models.capability import Capability
from guildgate.service.access_service import GuildAccessService
from guildgate.store.policy_store import PolicyStore


# --- Fixtures ---


@pytest.fixture
def service(sqlite_backend, file_backend):
    """Service over a fresh SQLite primary and file fallback."""
    return GuildAccessService(PolicyStore(fallback=file_backend, primary=sqlite_backend))


# --- Policy isolation ---


async def test_role_binding_is_guild_scoped(service):
    """A role bound in alpha should grant nothing in beta."""
    await service.bind_role("alpha", "R1", "Members", ["use_bot"])

    assert await service.authorize("alpha", "U1", ["R1"], False, False, "use_bot")
    assert not await service.authorize("beta", "U1", ["R1"], False, False, "use_bot")


async def test_unbind_doesnt_affect_other_guild(service):
    """Removing alpha's user binding shouldn't touch beta's."""
    await service.bind_user("alpha", "U1", "gina", ["consult"])
    await service.bind_user("beta", "U1", "gina", ["consult"])

    await service.unbind_user("alpha", "U1")

    assert (await service.describe_policy("alpha")).find_user_binding("U1") is None
    assert (await service.describe_policy("beta")).find_user_binding("U1") is not None


async def test_defaults_independent(service):
    await service.set_default_capabilities("alpha", ["use_bot", "view_help"])

    beta = await service.describe_policy("beta")
    assert beta.default_capabilities == {Capability.VIEW_HELP}


# --- Config isolation ---


async def test_configs_independent(service):
    """Two guilds should have independent settings."""
    await service.set_ai_provider("alpha", "chatgpt")
    await service.add_analyzed_channel("alpha", "general")

    beta = await service.get_tenant_config("beta")
    assert beta.ai_provider.value == "claude"
    assert beta.analyzed_channel_ids == []


async def test_admin_role_is_guild_scoped(service):
    await service.add_admin_role("alpha", "staff")

    assert await service.authorize("alpha", "U1", ["staff"], False, False, "manage_config")
    assert not await service.authorize("beta", "U1", ["staff"], False, False, "manage_config")
