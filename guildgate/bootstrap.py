"""
Wires backends, store and service together from Settings.

Usage:
    from guildgate.bootstrap import build_service, configure_logging
    from guildgate.settings import load_settings

    settings = load_settings()
    configure_logging(settings.log_level)
    service = build_service(settings)
"""

import logging
from typing import Optional

from adapters.aws.dynamodb_policy_backend import DynamoDBPolicyBackend
from adapters.local.file_policy_backend import FilePolicyBackend
from adapters.local.sqlite_policy_backend import SQLitePolicyBackend
from guildgate.interfaces.policy_backend import PolicyBackend
from guildgate.service.access_service import GuildAccessService
from guildgate.settings import Settings
from guildgate.store.policy_store import PolicyStore

logger = logging.getLogger("guildgate.bootstrap")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def build_primary(settings: Settings) -> Optional[PolicyBackend]:
    choice = settings.resolved_primary()
    if choice == "dynamodb":
        return DynamoDBPolicyBackend(settings.dynamodb_table, region=settings.aws_region)
    if choice == "sqlite":
        return SQLitePolicyBackend(settings.sqlite_path)
    return None


def build_store(settings: Settings) -> PolicyStore:
    primary = build_primary(settings)
    fallback = FilePolicyBackend(settings.data_dir)
    logger.info(
        f"Policy store: primary={primary.name if primary else 'none'} "
        f"fallback={fallback.name}:{settings.data_dir}"
    )
    return PolicyStore(
        fallback=fallback,
        primary=primary,
        read_timeout=settings.read_timeout,
        write_timeout=settings.write_timeout,
    )


def build_service(settings: Settings) -> GuildAccessService:
    return GuildAccessService(build_store(settings))
