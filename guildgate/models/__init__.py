from guildgate.models.capability import (
    Capability, ALL_CAPABILITIES, DEFAULT_CAPABILITIES, DEFAULT_ADMIN_ONLY,
    parse_capability, parse_capabilities, describe_capability, list_capabilities,
)
from guildgate.models.policy import (
    Actor, GuildPolicy, RoleBinding, UserBinding, validate_guild_policy_record,
)
from guildgate.models.tenant import (
    AIProvider, AnalysisPeriod, TenantConfig, TenantSettings,
    validate_tenant_config_record,
)

__all__ = [
    "Capability", "ALL_CAPABILITIES", "DEFAULT_CAPABILITIES", "DEFAULT_ADMIN_ONLY",
    "parse_capability", "parse_capabilities", "describe_capability", "list_capabilities",
    "Actor", "GuildPolicy", "RoleBinding", "UserBinding", "validate_guild_policy_record",
    "AIProvider", "AnalysisPeriod", "TenantConfig", "TenantSettings",
    "validate_tenant_config_record",
]
