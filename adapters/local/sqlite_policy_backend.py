"""
Local Policy Backend — SQLite.

Primary store for local development. One row per tenant per record kind,
with the record serialized as JSON.
"""

import asyncio
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from guildgate.interfaces.policy_backend import (
    BackendUnavailable,
    PolicyBackend,
    RecordKind,
    ValidationError,
)


class SQLitePolicyBackend(PolicyBackend):
    """SQLite-backed tenant record store for local development."""

    name = "sqlite"

    def __init__(self, db_path: str = "data/guildgate.db"):
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tenant_records (
                    tenant_id TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    data TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (tenant_id, kind)
                )
            """)

    async def get_record(self, kind: RecordKind, tenant_id: str) -> Optional[dict]:
        return await asyncio.to_thread(self._get, kind, tenant_id)

    async def put_record(self, kind: RecordKind, tenant_id: str, record: dict) -> None:
        await asyncio.to_thread(self._put, kind, tenant_id, record)

    def _get(self, kind: RecordKind, tenant_id: str) -> Optional[dict]:
        try:
            with sqlite3.connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT data FROM tenant_records WHERE tenant_id = ? AND kind = ?",
                    (tenant_id, kind.value),
                ).fetchone()
        except sqlite3.Error as e:
            raise BackendUnavailable(f"SQLite read failed: {e}") from e

        if not row:
            return None
        return _decode(row[0], f"{self.db_path}:{tenant_id}/{kind.value}")

    def _put(self, kind: RecordKind, tenant_id: str, record: dict) -> None:
        now = datetime.now(timezone.utc).isoformat()
        data = json.dumps(record, sort_keys=True)
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    """INSERT INTO tenant_records (tenant_id, kind, data, updated_at)
                       VALUES (?, ?, ?, ?)
                       ON CONFLICT(tenant_id, kind)
                       DO UPDATE SET data = ?, updated_at = ?""",
                    (tenant_id, kind.value, data, now, data, now),
                )
        except sqlite3.Error as e:
            raise BackendUnavailable(f"SQLite write failed: {e}") from e


def _decode(raw: str, where: str) -> dict:
    try:
        record = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Corrupt JSON at {where}: {e}") from e
    if not isinstance(record, dict):
        raise ValidationError(f"Record at {where} is not a JSON object")
    return record
