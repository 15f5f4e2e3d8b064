"""
GuildAccessService — authorization and administration for every tenant.

One instance per process, constructed with its PolicyStore. Mutations
are load-mutate-save under a per-tenant asyncio.Lock, so concurrent
commands against the same guild in this process can't lose each
other's changes. Nothing else is cached between calls.
"""

import asyncio
import logging
import weakref
from typing import Callable, Iterable, Optional, Union

from guildgate.access.admin import is_admin
from guildgate.access.resolver import authorize, resolve
from guildgate.models.capability import Capability, parse_capabilities, parse_capability
from guildgate.models.policy import Actor, GuildPolicy, RoleBinding, UserBinding
from guildgate.models.tenant import AIProvider, AnalysisPeriod, TenantConfig
from guildgate.service.prompts import DEFAULT_ANALYSIS_PROMPT, validate_prompt
from guildgate.store.policy_store import PolicyStore

logger = logging.getLogger("guildgate.access")

CapabilityNames = Iterable[Union[Capability, str]]


class GuildAccessService:
    """Authorizes actors and administers tenant policies and configs."""

    def __init__(self, store: PolicyStore):
        self.store = store
        # Entries vanish once no mutation holds or awaits the lock
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, tenant_id: str) -> asyncio.Lock:
        lock = self._locks.get(tenant_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[tenant_id] = lock
        return lock

    # --- Authorization ---

    async def authorize(
        self,
        tenant_id: str,
        actor_id: str,
        role_ids: Iterable[str],
        is_owner: bool,
        has_elevated_permission: bool,
        capability: Union[Capability, str],
    ) -> bool:
        """Whether a guild member may use a capability."""
        actor = Actor(
            user_id=str(actor_id),
            role_ids=frozenset(str(r) for r in role_ids),
            is_guild_owner=is_owner,
            has_elevated_permission=has_elevated_permission,
        )
        return await self.authorize_actor(tenant_id, actor, capability)

    async def authorize_actor(
        self, tenant_id: str, actor: Actor, capability: Union[Capability, str],
    ) -> bool:
        requested = parse_capability(capability)
        if requested is None:
            logger.warning(
                f"[{tenant_id}] permission check for unknown capability "
                f"'{capability}' by user={actor.user_id}: denied"
            )
            return False

        config = await self.store.load_tenant_config(tenant_id)
        admin = is_admin(config, actor)
        allowed = authorize(config.policy, actor, admin, requested)

        logger.info(
            f"[{tenant_id}] permission check user={actor.user_id} "
            f"capability={requested.value} owner={actor.is_guild_owner} "
            f"elevated={actor.has_elevated_permission} admin={admin} allowed={allowed}"
        )
        return allowed

    async def effective_capabilities(self, tenant_id: str, actor: Actor) -> frozenset[Capability]:
        """
        What the actor can actually use, for display.

        Admin-only capabilities are left out for non-admins, matching what
        authorize() allows.
        """
        config = await self.store.load_tenant_config(tenant_id)
        admin = is_admin(config, actor)
        capabilities = resolve(config.policy, actor, admin)
        if admin:
            return capabilities
        return capabilities - config.policy.admin_only_capabilities

    async def describe_policy(self, tenant_id: str) -> GuildPolicy:
        """Current policy for display and audit views."""
        return await self.store.load_guild_policy(tenant_id)

    # --- Policy administration ---

    async def set_default_capabilities(
        self, tenant_id: str, capabilities: CapabilityNames,
    ) -> list[str]:
        """
        Replace the default capability set.

        Returns:
            Capability names that were dropped as unknown
        """
        parsed, dropped = self._parse(tenant_id, capabilities)

        def mutate(policy: GuildPolicy) -> bool:
            policy.default_capabilities = parsed
            return True

        await self._update_policy(tenant_id, mutate)
        logger.info(f"[{tenant_id}] default capabilities set to {_names(parsed)}")
        return dropped

    async def bind_role(
        self,
        tenant_id: str,
        role_id: str,
        display_name: str,
        capabilities: CapabilityNames,
    ) -> list[str]:
        """Bind capabilities to a role, replacing any previous binding for it."""
        parsed, dropped = self._parse(tenant_id, capabilities)
        binding = RoleBinding(
            role_id=str(role_id),
            display_name=display_name,
            capabilities=parsed,
            enabled=True,
        )

        def mutate(policy: GuildPolicy) -> bool:
            policy.upsert_role_binding(binding)
            return True

        await self._update_policy(tenant_id, mutate)
        logger.info(
            f"[{tenant_id}] role {role_id} ({display_name}) bound to {_names(parsed)}"
        )
        return dropped

    async def unbind_role(self, tenant_id: str, role_id: str) -> bool:
        """Delete a role binding. Returns False if there was none."""
        removed = await self._update_policy(
            tenant_id, lambda policy: policy.remove_role_binding(str(role_id)),
        )
        logger.info(f"[{tenant_id}] role {role_id} unbound (removed={removed})")
        return removed

    async def bind_user(
        self,
        tenant_id: str,
        user_id: str,
        display_name: str,
        capabilities: CapabilityNames,
        is_custom: bool = True,
    ) -> list[str]:
        """
        Bind capabilities to a user, replacing any previous binding for them.

        is_custom=True makes the binding the user's whole capability set;
        is_custom=False adds it on top of default and role capabilities.
        """
        parsed, dropped = self._parse(tenant_id, capabilities)
        binding = UserBinding(
            user_id=str(user_id),
            display_name=display_name,
            capabilities=parsed,
            enabled=True,
            is_custom=is_custom,
        )

        def mutate(policy: GuildPolicy) -> bool:
            policy.upsert_user_binding(binding)
            return True

        await self._update_policy(tenant_id, mutate)
        logger.info(
            f"[{tenant_id}] user {user_id} ({display_name}) bound to "
            f"{_names(parsed)} custom={is_custom}"
        )
        return dropped

    async def unbind_user(self, tenant_id: str, user_id: str) -> bool:
        removed = await self._update_policy(
            tenant_id, lambda policy: policy.remove_user_binding(str(user_id)),
        )
        logger.info(f"[{tenant_id}] user {user_id} unbound (removed={removed})")
        return removed

    # --- Tenant configuration ---

    async def get_tenant_config(self, tenant_id: str) -> TenantConfig:
        return await self.store.load_tenant_config(tenant_id)

    async def set_display_name(self, tenant_id: str, display_name: str) -> None:
        def mutate(config: TenantConfig) -> bool:
            if config.display_name == display_name:
                return False
            config.display_name = display_name
            return True

        await self._update_config(tenant_id, mutate)

    async def set_ai_provider(self, tenant_id: str, provider: Union[AIProvider, str]) -> None:
        """Raises ValueError for a provider outside AIProvider."""
        chosen = AIProvider(provider)

        def mutate(config: TenantConfig) -> bool:
            config.ai_provider = chosen
            return True

        await self._update_config(tenant_id, mutate)
        logger.info(f"[{tenant_id}] AI provider set to {chosen.value}")

    async def get_ai_provider(self, tenant_id: str) -> AIProvider:
        config = await self.store.load_tenant_config(tenant_id)
        return config.ai_provider

    async def set_custom_prompt(self, tenant_id: str, prompt: str) -> list[str]:
        """
        Store and enable a custom analysis prompt.

        Returns:
            Validation warnings (the prompt is stored anyway)

        Raises:
            ValueError: If the prompt fails validation
        """
        validation = validate_prompt(prompt)
        if not validation.is_valid:
            raise ValueError("; ".join(validation.errors))

        def mutate(config: TenantConfig) -> bool:
            config.custom_prompt = prompt
            config.settings.use_custom_prompt = True
            return True

        await self._update_config(tenant_id, mutate)
        logger.info(f"[{tenant_id}] custom prompt set ({len(prompt)} chars)")
        return validation.warnings

    async def reset_prompt(self, tenant_id: str) -> None:
        def mutate(config: TenantConfig) -> bool:
            config.custom_prompt = None
            config.settings.use_custom_prompt = False
            return True

        await self._update_config(tenant_id, mutate)
        logger.info(f"[{tenant_id}] prompt reset to default")

    async def get_effective_prompt(self, tenant_id: str) -> str:
        config = await self.store.load_tenant_config(tenant_id)
        if config.settings.use_custom_prompt and config.custom_prompt:
            return config.custom_prompt
        return DEFAULT_ANALYSIS_PROMPT

    async def set_default_analysis_period(
        self, tenant_id: str, period: Union[AnalysisPeriod, str],
    ) -> None:
        chosen = AnalysisPeriod(period)

        def mutate(config: TenantConfig) -> bool:
            config.settings.default_analysis_period = chosen
            return True

        await self._update_config(tenant_id, mutate)

    async def add_analyzed_channel(self, tenant_id: str, channel_id: str) -> bool:
        """Append a channel to the analysis list. Returns False if already present."""
        channel_id = str(channel_id)

        def mutate(config: TenantConfig) -> bool:
            if channel_id in config.analyzed_channel_ids:
                return False
            config.analyzed_channel_ids.append(channel_id)
            return True

        return await self._update_config(tenant_id, mutate)

    async def remove_analyzed_channel(self, tenant_id: str, channel_id: str) -> bool:
        channel_id = str(channel_id)

        def mutate(config: TenantConfig) -> bool:
            if channel_id not in config.analyzed_channel_ids:
                return False
            config.analyzed_channel_ids.remove(channel_id)
            return True

        return await self._update_config(tenant_id, mutate)

    async def set_rules(self, tenant_id: str, rules: list[str]) -> None:
        def mutate(config: TenantConfig) -> bool:
            config.community_rules = list(rules)
            return True

        await self._update_config(tenant_id, mutate)

    async def set_client_requirements(self, tenant_id: str, requirements: list[str]) -> None:
        def mutate(config: TenantConfig) -> bool:
            config.client_requirements = list(requirements)
            return True

        await self._update_config(tenant_id, mutate)

    async def add_admin_role(self, tenant_id: str, role_id: str) -> bool:
        role_id = str(role_id)

        def mutate(config: TenantConfig) -> bool:
            if role_id in config.admin_role_ids:
                return False
            config.admin_role_ids.append(role_id)
            return True

        added = await self._update_config(tenant_id, mutate)
        if added:
            logger.info(f"[{tenant_id}] role {role_id} added as admin role")
        return added

    async def remove_admin_role(self, tenant_id: str, role_id: str) -> bool:
        role_id = str(role_id)

        def mutate(config: TenantConfig) -> bool:
            if role_id not in config.admin_role_ids:
                return False
            config.admin_role_ids.remove(role_id)
            return True

        removed = await self._update_config(tenant_id, mutate)
        if removed:
            logger.info(f"[{tenant_id}] role {role_id} removed from admin roles")
        return removed

    # --- Helpers ---

    async def _update_policy(
        self, tenant_id: str, mutate: Callable[[GuildPolicy], bool],
    ) -> bool:
        async with self._lock_for(tenant_id):
            policy = await self.store.load_guild_policy(tenant_id, for_update=True)
            changed = mutate(policy)
            if changed:
                await self.store.save_guild_policy(tenant_id, policy)
            return changed

    async def _update_config(
        self, tenant_id: str, mutate: Callable[[TenantConfig], bool],
    ) -> bool:
        async with self._lock_for(tenant_id):
            config = await self.store.load_tenant_config(tenant_id, for_update=True)
            changed = mutate(config)
            if changed:
                await self.store.save_tenant_config(config)
            return changed

    @staticmethod
    def _parse(
        tenant_id: str, capabilities: CapabilityNames,
    ) -> tuple[frozenset[Capability], list[str]]:
        parsed, dropped = parse_capabilities(capabilities)
        if dropped:
            logger.warning(
                f"[{tenant_id}] UNKNOWN_CAPABILITY_IGNORED: dropping {dropped}"
            )
        return parsed, dropped


def _names(capabilities: Optional[Iterable[Capability]]) -> list[str]:
    return sorted(c.value for c in capabilities or ())
