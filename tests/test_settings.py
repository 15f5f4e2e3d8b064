"""
Settings loading and store wiring.
"""

import pytest

from adapters.local.file_policy_backend import FilePolicyBackend
from adapters.local.sqlite_policy_backend import SQLitePolicyBackend
from guildgate.bootstrap import build_service, build_store
from guildgate.settings import ENV_VARS, Settings, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # Set then delete so anything load_settings writes is undone afterwards
    for env_var in ENV_VARS.values():
        monkeypatch.setenv(env_var, "")
        monkeypatch.delenv(env_var)


def test_defaults_have_no_primary(tmp_path):
    settings = load_settings(env_file=str(tmp_path / "missing.env"))

    assert settings.resolved_primary() == "none"
    assert settings.read_timeout == 5.0


def test_yaml_then_env_precedence(tmp_path, monkeypatch):
    config_file = tmp_path / "guildgate.yaml"
    config_file.write_text(
        "primary: sqlite\n"
        "sqlite_path: from-yaml.db\n"
        "read_timeout: 2\n"
        "colour: blue\n"
    )
    monkeypatch.setenv("GUILDGATE_SQLITE_PATH", "from-env.db")

    settings = load_settings(str(config_file), env_file=str(tmp_path / "missing.env"))

    assert settings.primary == "sqlite"
    assert settings.sqlite_path == "from-env.db"
    assert settings.read_timeout == 2.0


def test_env_file_does_not_override_environment(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# local overrides\n"
        "GUILDGATE_DATA_DIR=/from/file\n"
        "GUILDGATE_WRITE_TIMEOUT=3.5\n"
    )
    monkeypatch.setenv("GUILDGATE_DATA_DIR", "/from/env")

    settings = load_settings(env_file=str(env_file))

    assert settings.data_dir == "/from/env"
    assert settings.write_timeout == 3.5


def test_table_implies_dynamodb(tmp_path, monkeypatch):
    monkeypatch.setenv("GUILDGATE_DYNAMODB_TABLE", "guildgate-policies")
    settings = load_settings(env_file=str(tmp_path / "missing.env"))
    assert settings.resolved_primary() == "dynamodb"


def test_invalid_primary_is_rejected(tmp_path, monkeypatch):
    monkeypatch.setenv("GUILDGATE_PRIMARY", "postgres")
    with pytest.raises(ValueError, match="Unknown primary backend"):
        load_settings(env_file=str(tmp_path / "missing.env"))


def test_dynamodb_requires_table(tmp_path, monkeypatch):
    monkeypatch.setenv("GUILDGATE_PRIMARY", "dynamodb")
    with pytest.raises(ValueError, match="GUILDGATE_DYNAMODB_TABLE"):
        load_settings(env_file=str(tmp_path / "missing.env"))


def test_build_store_for_local_development(tmp_path):
    settings = Settings(
        primary="sqlite",
        sqlite_path=str(tmp_path / "g.db"),
        data_dir=str(tmp_path / "tenants"),
        read_timeout=1.0,
    )

    store = build_store(settings)

    assert isinstance(store.primary, SQLitePolicyBackend)
    assert isinstance(store.fallback, FilePolicyBackend)
    assert store.read_timeout == 1.0


async def test_built_service_round_trips(tmp_path):
    service = build_service(Settings(data_dir=str(tmp_path / "tenants")))

    await service.bind_role("g1", "R1", "Members", ["consult"])

    assert await service.authorize("g1", "U1", ["R1"], False, False, "consult")
    assert (tmp_path / "tenants" / "policy" / "g1.json").exists()
