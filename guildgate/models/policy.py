"""
Permission policy models.

A GuildPolicy is the per-tenant layered permission policy: a default
capability set, role bindings, user bindings and the admin-only set.
Actor is the transient description of whoever is asking.
"""

from dataclasses import dataclass, field
from typing import Optional

from guildgate.models.capability import (
    Capability,
    DEFAULT_ADMIN_ONLY,
    DEFAULT_CAPABILITIES,
    capabilities_to_record,
    parse_capabilities,
)

POLICY_REQUIRED_KEYS = (
    "default_capabilities",
    "role_bindings",
    "user_bindings",
    "admin_only_capabilities",
)


@dataclass
class RoleBinding:
    """Capabilities granted to every holder of a role."""

    role_id: str
    display_name: str = ""               # cached, advisory only
    capabilities: frozenset[Capability] = frozenset()
    enabled: bool = True

    def to_record(self) -> dict:
        return {
            "role_id": self.role_id,
            "display_name": self.display_name,
            "capabilities": capabilities_to_record(self.capabilities),
            "enabled": self.enabled,
        }

    @classmethod
    def from_record(cls, item: dict) -> "RoleBinding":
        capabilities, _ = parse_capabilities(item.get("capabilities") or [])
        return cls(
            role_id=str(item["role_id"]),
            display_name=str(item.get("display_name") or ""),
            capabilities=capabilities,
            enabled=_flag(item, "enabled", invalid=False),
        )


@dataclass
class UserBinding:
    """
    Capabilities bound to a single user.

    is_custom=True replaces the user's default and role capabilities,
    is_custom=False adds to them.
    """

    user_id: str
    display_name: str = ""
    capabilities: frozenset[Capability] = frozenset()
    enabled: bool = True
    is_custom: bool = True

    def to_record(self) -> dict:
        return {
            "user_id": self.user_id,
            "display_name": self.display_name,
            "capabilities": capabilities_to_record(self.capabilities),
            "enabled": self.enabled,
            "is_custom": self.is_custom,
        }

    @classmethod
    def from_record(cls, item: dict) -> "UserBinding":
        capabilities, _ = parse_capabilities(item.get("capabilities") or [])
        return cls(
            user_id=str(item["user_id"]),
            display_name=str(item.get("display_name") or ""),
            capabilities=capabilities,
            enabled=_flag(item, "enabled", invalid=False),
            is_custom=_flag(item, "is_custom", invalid=True),
        )


@dataclass
class GuildPolicy:
    """A tenant's permission policy."""

    default_capabilities: frozenset[Capability] = DEFAULT_CAPABILITIES
    role_bindings: list[RoleBinding] = field(default_factory=list)
    user_bindings: list[UserBinding] = field(default_factory=list)
    # Stored per tenant; consumers must not assume the global default
    admin_only_capabilities: frozenset[Capability] = DEFAULT_ADMIN_ONLY

    # --- Lookups ---

    def find_role_binding(self, role_id: str) -> Optional[RoleBinding]:
        for binding in self.role_bindings:
            if binding.role_id == role_id:
                return binding
        return None

    def find_user_binding(self, user_id: str) -> Optional[UserBinding]:
        for binding in self.user_bindings:
            if binding.user_id == user_id:
                return binding
        return None

    # --- Mutations (upsert by key, replace not merge) ---

    def upsert_role_binding(self, binding: RoleBinding) -> None:
        for i, existing in enumerate(self.role_bindings):
            if existing.role_id == binding.role_id:
                self.role_bindings[i] = binding
                return
        self.role_bindings.append(binding)

    def upsert_user_binding(self, binding: UserBinding) -> None:
        for i, existing in enumerate(self.user_bindings):
            if existing.user_id == binding.user_id:
                self.user_bindings[i] = binding
                return
        self.user_bindings.append(binding)

    def remove_role_binding(self, role_id: str) -> bool:
        before = len(self.role_bindings)
        self.role_bindings = [b for b in self.role_bindings if b.role_id != role_id]
        return len(self.role_bindings) != before

    def remove_user_binding(self, user_id: str) -> bool:
        before = len(self.user_bindings)
        self.user_bindings = [b for b in self.user_bindings if b.user_id != user_id]
        return len(self.user_bindings) != before

    # --- Serialization ---

    def to_record(self) -> dict:
        return {
            "default_capabilities": capabilities_to_record(self.default_capabilities),
            "role_bindings": [b.to_record() for b in self.role_bindings],
            "user_bindings": [b.to_record() for b in self.user_bindings],
            "admin_only_capabilities": capabilities_to_record(self.admin_only_capabilities),
        }

    @classmethod
    def from_record(cls, record: dict) -> "GuildPolicy":
        """
        Build a policy from a stored record, best effort.

        Unknown capabilities are dropped, bindings without an id are
        skipped and a repeated id keeps its last occurrence.
        """
        policy = cls()

        if "default_capabilities" in record:
            policy.default_capabilities, _ = parse_capabilities(
                _as_list(record.get("default_capabilities"))
            )
        if "admin_only_capabilities" in record:
            policy.admin_only_capabilities, _ = parse_capabilities(
                _as_list(record.get("admin_only_capabilities"))
            )

        for item in _as_list(record.get("role_bindings")):
            if isinstance(item, dict) and item.get("role_id"):
                policy.upsert_role_binding(RoleBinding.from_record(item))
        for item in _as_list(record.get("user_bindings")):
            if isinstance(item, dict) and item.get("user_id"):
                policy.upsert_user_binding(UserBinding.from_record(item))

        return policy


@dataclass(frozen=True)
class Actor:
    """Whoever is invoking a capability. Never persisted."""

    user_id: str
    role_ids: frozenset[str] = frozenset()
    is_guild_owner: bool = False
    has_elevated_permission: bool = False


def validate_guild_policy_record(record) -> list[str]:
    """Return the structural problems of a stored policy record (empty if valid)."""
    if not isinstance(record, dict):
        return ["policy record is not an object"]

    problems = []
    for key in POLICY_REQUIRED_KEYS:
        if key not in record:
            problems.append(f"missing '{key}'")
        elif not isinstance(record[key], list):
            problems.append(f"'{key}' must be a list")

    for key in ("default_capabilities", "admin_only_capabilities"):
        if isinstance(record.get(key), list):
            _, dropped = parse_capabilities(record[key])
            if dropped:
                problems.append(f"unknown capabilities in '{key}': {dropped}")

    for list_key, id_key in (("role_bindings", "role_id"), ("user_bindings", "user_id")):
        items = record.get(list_key)
        if not isinstance(items, list):
            continue
        for i, item in enumerate(items):
            if not isinstance(item, dict):
                problems.append(f"{list_key}[{i}] is not an object")
                continue
            if not item.get(id_key):
                problems.append(f"{list_key}[{i}] missing '{id_key}'")
            capabilities = item.get("capabilities")
            if not isinstance(capabilities, list):
                problems.append(f"{list_key}[{i}].capabilities must be a list")
            else:
                _, dropped = parse_capabilities(capabilities)
                if dropped:
                    problems.append(f"unknown capabilities in {list_key}[{i}]: {dropped}")
            if "enabled" in item and not isinstance(item["enabled"], bool):
                problems.append(f"{list_key}[{i}].enabled must be a boolean")
            if "is_custom" in item and not isinstance(item["is_custom"], bool):
                problems.append(f"{list_key}[{i}].is_custom must be a boolean")

    return problems


def _as_list(value) -> list:
    return value if isinstance(value, list) else []


def _flag(item: dict, key: str, invalid: bool, default: bool = True) -> bool:
    """
    Read a boolean field from a hand-editable record.

    Real booleans and the strings "true"/"false" are honoured; a missing
    key gives the default and anything else gives the invalid value.
    """
    if key not in item:
        return default
    value = item[key]
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return invalid
