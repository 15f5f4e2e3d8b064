"""
Fallback Policy Backend — JSON files.

Durable store that needs nothing but a writable directory:
    {root}/config/{tenant_id}.json
    {root}/policy/{tenant_id}.json

Files are pretty-printed so operators can inspect and hand-edit them.
Writes go through a temp file and an atomic rename.
"""

import asyncio
import json
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from guildgate.interfaces.policy_backend import (
    BackendUnavailable,
    PolicyBackend,
    RecordKind,
    ValidationError,
)

# Tenant ids become file names; anything else is rejected
_SAFE_TENANT_ID = re.compile(r"^[A-Za-z0-9_.-]+$")


class FilePolicyBackend(PolicyBackend):
    """One JSON file per tenant per record kind."""

    name = "file"

    def __init__(self, root: str = "data/tenants"):
        self.root = Path(root)

    def _path(self, kind: RecordKind, tenant_id: str) -> Path:
        if not _SAFE_TENANT_ID.match(tenant_id) or tenant_id in (".", ".."):
            raise BackendUnavailable(f"Tenant id '{tenant_id}' is not a valid file name")
        return self.root / kind.value / f"{tenant_id}.json"

    async def get_record(self, kind: RecordKind, tenant_id: str) -> Optional[dict]:
        return await asyncio.to_thread(self._get, kind, tenant_id)

    async def put_record(self, kind: RecordKind, tenant_id: str, record: dict) -> None:
        await asyncio.to_thread(self._put, kind, tenant_id, record)

    def _get(self, kind: RecordKind, tenant_id: str) -> Optional[dict]:
        path = self._path(kind, tenant_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise BackendUnavailable(f"Failed to read {path}: {e}") from e

        try:
            record = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Corrupt JSON in {path}: {e}") from e
        if not isinstance(record, dict):
            raise ValidationError(f"{path} does not contain a JSON object")
        return record

    def _put(self, kind: RecordKind, tenant_id: str, record: dict) -> None:
        path = self._path(kind, tenant_id)
        data = json.dumps(record, indent=2, sort_keys=True, ensure_ascii=False)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise BackendUnavailable(f"Failed to write {path}: {e}") from e
