"""
Policy Backend Interface

Storage abstraction for per-tenant records. Each tenant has one record
per RecordKind, stored as a JSON-compatible dict keyed by tenant_id.
Implementations: DynamoDBPolicyBackend (AWS), SQLitePolicyBackend (local),
FilePolicyBackend (fallback).
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional


class RecordKind(str, Enum):
    TENANT_CONFIG = "config"
    GUILD_POLICY = "policy"


class PolicyBackend(ABC):
    """
    Abstract base class for tenant record storage.

    Implementations raise BackendUnavailable when the underlying store
    can't be reached or rejects an operation. "Not found" is not an error:
    get_record returns None.
    """

    name: str = "backend"

    def is_configured(self) -> bool:
        """Whether this backend has what it needs to be tried at all."""
        return True

    @abstractmethod
    async def get_record(self, kind: RecordKind, tenant_id: str) -> Optional[dict]:
        """
        Read a tenant's record.

        Returns:
            The stored dict, or None if the tenant has no record of this kind

        Raises:
            BackendUnavailable: If the store can't be read
            ValidationError: If the stored bytes aren't a JSON object
        """
        ...

    @abstractmethod
    async def put_record(self, kind: RecordKind, tenant_id: str, record: dict) -> None:
        """
        Upsert a tenant's record, replacing any previous one.

        Raises:
            BackendUnavailable: If the store rejects the write
        """
        ...


class BackendUnavailable(Exception):
    """The backend couldn't be reached or refused the operation."""
    pass


class PolicyNotFound(Exception):
    """
    No record exists in any reachable backend.

    Raised inside the store and resolved to a default record; never
    surfaced to callers. persist_to names the backend the default
    should be written to, if any.
    """

    def __init__(self, tenant_id: str, persist_to: Optional["PolicyBackend"] = None):
        self.tenant_id = tenant_id
        self.persist_to = persist_to
        super().__init__(f"No record for tenant '{tenant_id}'")


class PersistenceError(Exception):
    """A write, or a strict read made before one, failed."""

    def __init__(self, message: str, tenant_id: str = "", backend: str = ""):
        self.tenant_id = tenant_id
        self.backend = backend
        super().__init__(message)


class ValidationError(Exception):
    """A stored record is structurally malformed."""

    def __init__(self, message: str, problems: Optional[list[str]] = None):
        self.problems = problems or []
        super().__init__(message)
