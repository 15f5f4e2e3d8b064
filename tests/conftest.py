"""
Shared fixtures: real SQLite/file backends on tmp_path and an in-memory
backend that can be made slow or unreachable.
"""

import asyncio
import copy
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from guildgate.interfaces.policy_backend import BackendUnavailable, PolicyBackend
from adapters.local.file_policy_backend import FilePolicyBackend
from adapters.local.sqlite_policy_backend import SQLitePolicyBackend


class MemoryBackend(PolicyBackend):
    """Dict-backed backend with switchable failures and latency."""

    def __init__(self, name: str = "memory"):
        self.name = name
        self.records: dict = {}
        self.writes: list = []
        self.fail_reads = False
        self.fail_writes = False
        self.delay = 0.0

    async def get_record(self, kind, tenant_id):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_reads:
            raise BackendUnavailable("connection refused")
        return copy.deepcopy(self.records.get((kind, tenant_id)))

    async def put_record(self, kind, tenant_id, record):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_writes:
            raise BackendUnavailable("write rejected")
        self.records[(kind, tenant_id)] = copy.deepcopy(record)
        self.writes.append((kind, tenant_id))


@pytest.fixture
def memory_backend():
    return MemoryBackend("memory-primary")


@pytest.fixture
def memory_fallback():
    return MemoryBackend("memory-fallback")


@pytest.fixture
def sqlite_backend(tmp_path):
    """Fresh SQLite primary."""
    return SQLitePolicyBackend(str(tmp_path / "guildgate.db"))


@pytest.fixture
def file_backend(tmp_path):
    """Fresh JSON-file fallback."""
    return FilePolicyBackend(str(tmp_path / "tenants"))
