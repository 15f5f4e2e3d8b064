"""
Policy Store — tiered persistence for tenant configs and policies.

Reads go primary -> fallback -> synthesized default:
  1. A primary hit is authoritative.
  2. On primary miss (or primary unreachable / timed out) the fallback is read.
  3. A valid fallback record is copied into the primary ("migration") and
     returned. A failed copy is logged, never surfaced.
  4. When no backend has a record, a default is synthesized, persisted to
     the primary if reachable (else the fallback), and returned.

Writes go to the primary if one is configured, otherwise the fallback.
There is no dual-write; once the primary is in use the fallback copy goes
stale and is only consulted on a primary miss.

Loads made with for_update=True (before a mutation) never degrade: any
backend failure raises PersistenceError, so an outage can't turn into a
write of stale or default data over the stored record.
"""

import asyncio
import logging
from typing import Callable, Optional

from guildgate.interfaces.policy_backend import (
    BackendUnavailable,
    PersistenceError,
    PolicyBackend,
    PolicyNotFound,
    RecordKind,
    ValidationError,
)
from guildgate.models.policy import GuildPolicy, validate_guild_policy_record
from guildgate.models.tenant import TenantConfig, validate_tenant_config_record

logger = logging.getLogger("guildgate.store")

DEFAULT_READ_TIMEOUT = 5.0
DEFAULT_WRITE_TIMEOUT = 10.0

VALIDATORS: dict[RecordKind, Callable[[object], list[str]]] = {
    RecordKind.TENANT_CONFIG: validate_tenant_config_record,
    RecordKind.GUILD_POLICY: validate_guild_policy_record,
}


class PolicyStore:
    """
    Loads and saves TenantConfig and GuildPolicy records across two backends.

    Holds no cache: every load reads storage, so two service instances
    sharing the same backends see each other's writes.
    """

    def __init__(
        self,
        fallback: PolicyBackend,
        primary: Optional[PolicyBackend] = None,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT,
    ):
        self.fallback = fallback
        self.primary = primary if primary is not None and primary.is_configured() else None
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout

    # --- Tenant config ---

    async def load_tenant_config(
        self, tenant_id: str, timeout: Optional[float] = None, for_update: bool = False,
    ) -> TenantConfig:
        """
        Load a tenant's config with its policy attached. Never raises for a missing tenant.

        With for_update=True the read is strict: see load_guild_policy.
        """
        record = await self._load(RecordKind.TENANT_CONFIG, tenant_id, timeout, for_update)
        config = TenantConfig.from_record(record, tenant_id=tenant_id)
        config.policy = await self.load_guild_policy(tenant_id, timeout, for_update)
        return config

    async def save_tenant_config(
        self, config: TenantConfig, timeout: Optional[float] = None,
    ) -> None:
        """Persist the config fields. The embedded policy is saved by save_guild_policy."""
        await self._save(
            RecordKind.TENANT_CONFIG, config.tenant_id, config.to_record(), timeout,
        )

    # --- Guild policy ---

    async def load_guild_policy(
        self, tenant_id: str, timeout: Optional[float] = None, for_update: bool = False,
    ) -> GuildPolicy:
        """
        Load a tenant's policy, or the default if no backend has one.

        Args:
            for_update: Read before a mutation. A backend that fails, times out
                or holds an unreadable record raises instead of falling
                through, so a stale or default record is never written back
                over the real one.

        Raises:
            PersistenceError: Only with for_update=True
        """
        record = await self._load(RecordKind.GUILD_POLICY, tenant_id, timeout, for_update)
        return GuildPolicy.from_record(record)

    async def save_guild_policy(
        self, tenant_id: str, policy: GuildPolicy, timeout: Optional[float] = None,
    ) -> None:
        await self._save(RecordKind.GUILD_POLICY, tenant_id, policy.to_record(), timeout)

    # --- Read path ---

    async def _load(
        self, kind: RecordKind, tenant_id: str, timeout: Optional[float],
        for_update: bool = False,
    ) -> dict:
        timeout = self.read_timeout if timeout is None else timeout
        try:
            return await self._read_through(kind, tenant_id, timeout, for_update)
        except PolicyNotFound as missing:
            target = missing.persist_to

        logger.info(f"[{tenant_id}] creating default {kind.value}")
        record = self._default_record(kind, tenant_id)
        if target is None:
            return record
        try:
            await self._write(target, kind, tenant_id, record, self.write_timeout)
        except (BackendUnavailable, asyncio.TimeoutError) as e:
            logger.error(
                f"[{tenant_id}] failed to persist default {kind.value} to "
                f"'{target.name}': {_describe(e)}"
            )
        return record

    async def _read_through(
        self, kind: RecordKind, tenant_id: str, timeout: float, strict: bool = False,
    ) -> dict:
        """
        Find a record in the primary, then the fallback.

        Raises:
            PersistenceError: In strict mode, when either backend fails or holds
                an unreadable record
            PolicyNotFound: carrying the backend a default should be written to
                (None when nothing is reachable or the fallback record is damaged)
        """
        primary_reachable = False
        if self.primary is not None:
            try:
                record = await self._read(self.primary, kind, tenant_id, timeout)
                primary_reachable = True
            except (BackendUnavailable, ValidationError, asyncio.TimeoutError) as e:
                if strict:
                    raise _load_error(kind, tenant_id, self.primary, e) from e
                logger.warning(
                    f"[{tenant_id}] primary '{self.primary.name}' unavailable for "
                    f"{kind.value} read, using fallback: {_describe(e)}"
                )
            else:
                if record is not None:
                    return record

        try:
            record = await self._read(self.fallback, kind, tenant_id, timeout)
        except ValidationError as e:
            if strict:
                raise _load_error(kind, tenant_id, self.fallback, e) from e
            # Keep the damaged record in place for inspection
            logger.error(
                f"[{tenant_id}] unreadable {kind.value} record in "
                f"'{self.fallback.name}': {e}"
            )
            raise PolicyNotFound(tenant_id, persist_to=None) from e
        except (BackendUnavailable, asyncio.TimeoutError) as e:
            if strict:
                raise _load_error(kind, tenant_id, self.fallback, e) from e
            logger.error(
                f"[{tenant_id}] fallback '{self.fallback.name}' unavailable for "
                f"{kind.value} read: {_describe(e)}"
            )
            raise PolicyNotFound(
                tenant_id, persist_to=self.primary if primary_reachable else None,
            ) from e

        if record is None:
            raise PolicyNotFound(
                tenant_id, persist_to=self.primary if primary_reachable else self.fallback,
            )

        problems = VALIDATORS[kind](record)
        if problems:
            error = ValidationError(
                f"invalid {kind.value} record for tenant '{tenant_id}'", problems,
            )
            logger.warning(
                f"[{tenant_id}] {error}: {'; '.join(problems)} "
                f"(serving best effort, not migrating)"
            )
        elif primary_reachable:
            await self._migrate(kind, tenant_id, record, timeout)
        return record

    async def _migrate(
        self, kind: RecordKind, tenant_id: str, record: dict, timeout: float,
    ) -> None:
        try:
            await self._write(self.primary, kind, tenant_id, record, timeout)
        except (BackendUnavailable, asyncio.TimeoutError) as e:
            logger.warning(
                f"[{tenant_id}] migration of {kind.value} to '{self.primary.name}' "
                f"failed: {_describe(e)}"
            )
        else:
            logger.info(
                f"[{tenant_id}] migrated {kind.value} from '{self.fallback.name}' "
                f"to '{self.primary.name}'"
            )

    # --- Write path ---

    async def _save(
        self, kind: RecordKind, tenant_id: str, record: dict, timeout: Optional[float],
    ) -> None:
        target = self.primary or self.fallback
        timeout = self.write_timeout if timeout is None else timeout
        try:
            await self._write(target, kind, tenant_id, record, timeout)
        except (BackendUnavailable, asyncio.TimeoutError) as e:
            raise PersistenceError(
                f"Failed to save {kind.value} for tenant '{tenant_id}' to "
                f"'{target.name}': {_describe(e)}",
                tenant_id=tenant_id,
                backend=target.name,
            ) from e
        logger.debug(f"[{tenant_id}] saved {kind.value} to '{target.name}'")

    # --- Helpers ---

    @staticmethod
    async def _read(
        backend: PolicyBackend, kind: RecordKind, tenant_id: str, timeout: float,
    ) -> Optional[dict]:
        return await asyncio.wait_for(backend.get_record(kind, tenant_id), timeout)

    @staticmethod
    async def _write(
        backend: PolicyBackend, kind: RecordKind, tenant_id: str, record: dict,
        timeout: float,
    ) -> None:
        await asyncio.wait_for(backend.put_record(kind, tenant_id, record), timeout)

    @staticmethod
    def _default_record(kind: RecordKind, tenant_id: str) -> dict:
        if kind is RecordKind.TENANT_CONFIG:
            return TenantConfig(tenant_id=tenant_id).to_record()
        return GuildPolicy().to_record()


def _describe(error: Exception) -> str:
    if isinstance(error, asyncio.TimeoutError):
        return "timed out"
    return str(error) or type(error).__name__


def _load_error(
    kind: RecordKind, tenant_id: str, backend: PolicyBackend, error: Exception,
) -> PersistenceError:
    return PersistenceError(
        f"Failed to load {kind.value} for tenant '{tenant_id}' from "
        f"'{backend.name}': {_describe(error)}",
        tenant_id=tenant_id,
        backend=backend.name,
    )
