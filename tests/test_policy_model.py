"""
Policy and tenant config records: serialization and validation.
"""

import json

import pytest

from guildgate.models.capability import Capability
from guildgate.models.policy import (
    GuildPolicy,
    RoleBinding,
    UserBinding,
    validate_guild_policy_record,
)
from guildgate.models.tenant import (
    AIProvider,
    AnalysisPeriod,
    TenantConfig,
    validate_tenant_config_record,
)

C = Capability


def test_default_policy_record():
    assert GuildPolicy().to_record() == {
        "default_capabilities": ["view_help"],
        "role_bindings": [],
        "user_bindings": [],
        "admin_only_capabilities": ["manage_config", "manage_permissions"],
    }


def test_equal_policies_serialize_identically():
    a = GuildPolicy(default_capabilities=frozenset({C.USE_BOT, C.CONSULT, C.VIEW_HELP}))
    b = GuildPolicy(default_capabilities=frozenset({C.VIEW_HELP, C.CONSULT, C.USE_BOT}))
    assert json.dumps(a.to_record()) == json.dumps(b.to_record())
    assert a.to_record()["default_capabilities"] == ["consult", "use_bot", "view_help"]


def test_upsert_replaces_in_place():
    policy = GuildPolicy(role_bindings=[
        RoleBinding("R1", "Old", frozenset({C.USE_BOT})),
        RoleBinding("R2", "Other", frozenset({C.CONSULT})),
    ])
    policy.upsert_role_binding(RoleBinding("R1", "New", frozenset({C.RUN_ANALYSIS})))

    assert [b.role_id for b in policy.role_bindings] == ["R1", "R2"]
    assert policy.find_role_binding("R1").capabilities == {C.RUN_ANALYSIS}
    assert policy.find_role_binding("R1").display_name == "New"


def test_remove_reports_whether_anything_changed():
    policy = GuildPolicy(user_bindings=[UserBinding("U1")])
    assert policy.remove_user_binding("U1") is True
    assert policy.remove_user_binding("U1") is False


def test_from_record_is_lenient():
    record = {
        "default_capabilities": ["view_help", "teleport"],
        "role_bindings": [
            {"role_id": "R1", "capabilities": ["use_bot"], "enabled": True},
            {"display_name": "no id", "capabilities": ["consult"]},
            {"role_id": "R1", "capabilities": ["consult"], "enabled": False},
            "garbage",
        ],
        "user_bindings": [
            {"user_id": "U1", "capabilities": ["consult"], "is_custom": False},
        ],
    }
    policy = GuildPolicy.from_record(record)

    assert policy.default_capabilities == {C.VIEW_HELP}
    assert len(policy.role_bindings) == 1
    # Last occurrence of a repeated id wins
    assert policy.role_bindings[0].capabilities == {C.CONSULT}
    assert policy.role_bindings[0].enabled is False
    assert policy.user_bindings[0].is_custom is False
    # Missing admin-only set falls back to the default
    assert policy.admin_only_capabilities == {C.MANAGE_CONFIG, C.MANAGE_PERMISSIONS}


@pytest.mark.parametrize("raw,expected", [
    (True, True),
    (False, False),
    ("true", True),
    ("FALSE", False),
    ("false ", False),
    ("no", False),
    (0, False),
    (1, False),
    (None, False),
])
def test_role_binding_enabled_flag_fails_closed(raw, expected):
    binding = RoleBinding.from_record(
        {"role_id": "R1", "capabilities": ["run_analysis"], "enabled": raw}
    )
    assert binding.enabled is expected


def test_user_binding_flags_from_strings():
    binding = UserBinding.from_record({
        "user_id": "U1",
        "capabilities": ["consult"],
        "enabled": "false",
        "is_custom": "false",
    })
    assert binding.enabled is False
    assert binding.is_custom is False

    odd = UserBinding.from_record({"user_id": "U2", "capabilities": [], "is_custom": 0})
    assert odd.enabled is True
    assert odd.is_custom is True


def test_string_flags_are_reported_by_validation():
    problems = validate_guild_policy_record({
        "default_capabilities": [],
        "role_bindings": [{"role_id": "R1", "capabilities": [], "enabled": "false"}],
        "user_bindings": [{"user_id": "U1", "capabilities": [], "is_custom": "yes"}],
        "admin_only_capabilities": [],
    })
    assert problems == [
        "role_bindings[0].enabled must be a boolean",
        "user_bindings[0].is_custom must be a boolean",
    ]


def test_valid_policy_record_has_no_problems():
    policy = GuildPolicy(
        role_bindings=[RoleBinding("R1", "Mods", frozenset({C.USE_BOT}))],
        user_bindings=[UserBinding("U1", "bob", frozenset({C.CONSULT}))],
    )
    assert validate_guild_policy_record(policy.to_record()) == []


def test_policy_validation_finds_problems():
    problems = validate_guild_policy_record({
        "default_capabilities": ["view_help", "fly"],
        "role_bindings": [{"capabilities": "use_bot"}],
        "user_bindings": "nope",
    })
    text = " | ".join(problems)
    assert "missing 'admin_only_capabilities'" in text
    assert "'user_bindings' must be a list" in text
    assert "unknown capabilities in 'default_capabilities'" in text
    assert "role_bindings[0] missing 'role_id'" in text
    assert "role_bindings[0].capabilities must be a list" in text


def test_policy_validation_rejects_non_objects():
    assert validate_guild_policy_record(["not", "a", "dict"]) == [
        "policy record is not an object"
    ]


def test_default_tenant_config_record_is_valid():
    record = TenantConfig("g1").to_record()
    assert validate_tenant_config_record(record) == []
    assert record["ai_provider"] == "claude"
    assert record["settings"] == {"default_analysis_period": "today", "use_custom_prompt": False}
    assert "policy" not in record


def test_tenant_config_validation():
    problems = validate_tenant_config_record({
        "tenant_id": "",
        "analyzed_channel_ids": "c1",
        "ai_provider": "llama",
    })
    text = " | ".join(problems)
    assert "'tenant_id' is required" in text
    assert "'analyzed_channel_ids' must be a list" in text
    assert "'ai_provider' must be one of" in text
    assert "'settings' object is required" in text


def test_tenant_config_from_partial_record():
    config = TenantConfig.from_record(
        {"ai_provider": "gemini", "admin_role_ids": ["a", "b", "a"],
         "settings": {"default_analysis_period": "yesterday"}},
        tenant_id="g7",
    )
    assert config.tenant_id == "g7"
    assert config.ai_provider is AIProvider.GEMINI
    assert config.admin_role_ids == ["a", "b"]
    assert config.settings.default_analysis_period is AnalysisPeriod.YESTERDAY
    assert config.analyzed_channel_ids == []
