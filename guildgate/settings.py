"""
Settings — where tenant records live and how long to wait for them.

Sources, lowest precedence first:
  1. Defaults below
  2. An optional YAML file (flat keys matching the Settings fields)
  3. Environment variables (a .env file is loaded first, never
     overriding variables that are already set)
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger("guildgate.settings")

PRIMARY_CHOICES = ("dynamodb", "sqlite", "none")

ENV_VARS = {
    "primary": "GUILDGATE_PRIMARY",
    "dynamodb_table": "GUILDGATE_DYNAMODB_TABLE",
    "aws_region": "AWS_REGION",
    "sqlite_path": "GUILDGATE_SQLITE_PATH",
    "data_dir": "GUILDGATE_DATA_DIR",
    "read_timeout": "GUILDGATE_READ_TIMEOUT",
    "write_timeout": "GUILDGATE_WRITE_TIMEOUT",
    "log_level": "GUILDGATE_LOG_LEVEL",
}


@dataclass
class Settings:
    # Empty means: dynamodb if a table is configured, otherwise none
    primary: str = ""
    dynamodb_table: str = ""
    aws_region: str = "us-east-1"
    sqlite_path: str = "data/guildgate.db"
    data_dir: str = "data/tenants"       # fallback JSON files
    read_timeout: float = 5.0
    write_timeout: float = 10.0
    log_level: str = "INFO"

    def resolved_primary(self) -> str:
        if self.primary:
            return self.primary
        return "dynamodb" if self.dynamodb_table else "none"


def load_settings(config_file: Optional[str] = None, env_file: str = ".env") -> Settings:
    """Build Settings from defaults, an optional YAML file and the environment."""
    _load_env_file(env_file)

    values: dict = {}
    if config_file:
        with open(config_file) as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{config_file} must contain a mapping")
        known = {f.name for f in fields(Settings)}
        for key, value in loaded.items():
            if key in known:
                values[key] = value
            else:
                logger.warning(f"Ignoring unknown setting '{key}' in {config_file}")

    for key, env_var in ENV_VARS.items():
        value = os.getenv(env_var)
        if value:
            values[key] = value

    settings = Settings(**values)
    settings.primary = str(settings.primary).strip().lower()
    settings.read_timeout = float(settings.read_timeout)
    settings.write_timeout = float(settings.write_timeout)

    if settings.primary and settings.primary not in PRIMARY_CHOICES:
        raise ValueError(
            f"Unknown primary backend '{settings.primary}'. "
            f"Known: {list(PRIMARY_CHOICES)}"
        )
    if settings.resolved_primary() == "dynamodb" and not settings.dynamodb_table:
        raise ValueError("GUILDGATE_DYNAMODB_TABLE is required for the dynamodb backend")

    return settings


def _load_env_file(env_file: str):
    """Load a .env file into os.environ."""
    path = Path(env_file)
    if not path.exists():
        return
    with open(path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                os.environ.setdefault(key.strip(), value.strip())
