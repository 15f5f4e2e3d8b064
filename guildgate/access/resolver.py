"""
Capability Resolver — computes what an actor may do under a policy.

Precedence, highest first:
  1. Admins hold every capability.
  2. Admin-only capabilities are never granted to non-admins.
  3. Default capabilities.
  4. Union of enabled role bindings the actor holds.
  5. Enabled user binding: custom replaces, inherited adds.

Pure functions, no I/O, safe to call concurrently.
"""

from guildgate.models.capability import ALL_CAPABILITIES, Capability
from guildgate.models.policy import Actor, GuildPolicy


def resolve(policy: GuildPolicy, actor: Actor, is_admin: bool) -> frozenset[Capability]:
    """Effective capability set for an actor."""
    if is_admin:
        return ALL_CAPABILITIES

    base = set(policy.default_capabilities)
    for binding in policy.role_bindings:
        if binding.enabled and binding.role_id in actor.role_ids:
            base |= binding.capabilities

    user_binding = _enabled_user_binding(policy, actor.user_id)
    if user_binding is None:
        return frozenset(base)
    if user_binding.is_custom:
        return frozenset(user_binding.capabilities)
    return frozenset(base | user_binding.capabilities)


def authorize(
    policy: GuildPolicy,
    actor: Actor,
    is_admin: bool,
    capability: Capability,
) -> bool:
    """Whether the actor may use a capability."""
    if is_admin:
        return True
    if capability in policy.admin_only_capabilities:
        return False
    return capability in resolve(policy, actor, is_admin=False)


def _enabled_user_binding(policy: GuildPolicy, user_id: str):
    # Disabled bindings are kept in storage but ignored here
    for binding in policy.user_bindings:
        if binding.user_id == user_id and binding.enabled:
            return binding
    return None
