"""
Tenant configuration models.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from guildgate.models.policy import GuildPolicy


class AIProvider(str, Enum):
    CHATGPT = "chatgpt"
    GEMINI = "gemini"
    CLAUDE = "claude"


class AnalysisPeriod(str, Enum):
    TODAY = "today"
    YESTERDAY = "yesterday"


@dataclass
class TenantSettings:
    """Analysis settings per tenant."""

    default_analysis_period: AnalysisPeriod = AnalysisPeriod.TODAY
    use_custom_prompt: bool = False


@dataclass
class TenantConfig:
    """
    A chat server's bot configuration.

    The policy is stored as its own record; it is attached on load and is
    not written by save_tenant_config.
    """

    tenant_id: str
    display_name: str = ""
    ai_provider: AIProvider = AIProvider.CLAUDE
    custom_prompt: Optional[str] = None
    analyzed_channel_ids: list[str] = field(default_factory=list)
    community_rules: list[str] = field(default_factory=list)
    client_requirements: list[str] = field(default_factory=list)
    admin_role_ids: list[str] = field(default_factory=list)
    policy: GuildPolicy = field(default_factory=GuildPolicy)
    settings: TenantSettings = field(default_factory=TenantSettings)

    def to_record(self) -> dict:
        return {
            "tenant_id": self.tenant_id,
            "display_name": self.display_name,
            "ai_provider": self.ai_provider.value,
            "custom_prompt": self.custom_prompt,
            "analyzed_channel_ids": list(self.analyzed_channel_ids),
            "community_rules": list(self.community_rules),
            "client_requirements": list(self.client_requirements),
            "admin_role_ids": list(self.admin_role_ids),
            "settings": {
                "default_analysis_period": self.settings.default_analysis_period.value,
                "use_custom_prompt": self.settings.use_custom_prompt,
            },
        }

    @classmethod
    def from_record(cls, record: dict, tenant_id: str = "") -> "TenantConfig":
        """Build a config from a stored record, falling back to defaults per field."""
        settings_dict = record.get("settings")
        if not isinstance(settings_dict, dict):
            settings_dict = {}

        try:
            provider = AIProvider(record.get("ai_provider"))
        except ValueError:
            provider = AIProvider.CLAUDE
        try:
            period = AnalysisPeriod(settings_dict.get("default_analysis_period"))
        except ValueError:
            period = AnalysisPeriod.TODAY

        return cls(
            tenant_id=str(record.get("tenant_id") or tenant_id),
            display_name=str(record.get("display_name") or ""),
            ai_provider=provider,
            custom_prompt=record.get("custom_prompt") or None,
            analyzed_channel_ids=_str_list(record.get("analyzed_channel_ids")),
            community_rules=_str_list(record.get("community_rules")),
            client_requirements=_str_list(record.get("client_requirements")),
            admin_role_ids=list(dict.fromkeys(_str_list(record.get("admin_role_ids")))),
            settings=TenantSettings(
                default_analysis_period=period,
                use_custom_prompt=bool(settings_dict.get("use_custom_prompt", False)),
            ),
        )


def validate_tenant_config_record(record) -> list[str]:
    """Return the structural problems of a stored config record (empty if valid)."""
    if not isinstance(record, dict):
        return ["config record is not an object"]

    problems = []
    tenant_id = record.get("tenant_id")
    if not tenant_id or not isinstance(tenant_id, str):
        problems.append("'tenant_id' is required")

    if not isinstance(record.get("analyzed_channel_ids"), list):
        problems.append("'analyzed_channel_ids' must be a list")

    if record.get("ai_provider") not in {p.value for p in AIProvider}:
        problems.append(
            f"'ai_provider' must be one of {[p.value for p in AIProvider]}"
        )

    for key in ("community_rules", "client_requirements", "admin_role_ids"):
        if key in record and not isinstance(record[key], list):
            problems.append(f"'{key}' must be a list")

    settings = record.get("settings")
    if not isinstance(settings, dict):
        problems.append("'settings' object is required")
    elif "default_analysis_period" in settings and (
        settings["default_analysis_period"] not in {p.value for p in AnalysisPeriod}
    ):
        problems.append("'settings.default_analysis_period' is not a known period")

    return problems


def _str_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value]
