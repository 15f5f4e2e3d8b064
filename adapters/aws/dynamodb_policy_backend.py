"""
AWS Policy Backend — DynamoDB.

Schema (single-table design):
  Tenant config:
    pk: TENANT#{tenant_id}    sk: CONFIG
  Guild policy:
    pk: TENANT#{tenant_id}    sk: POLICY

The record is stored as a JSON string in the "data" attribute.
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from guildgate.interfaces.policy_backend import (
    BackendUnavailable,
    PolicyBackend,
    RecordKind,
    ValidationError,
)


class DynamoDBPolicyBackend(PolicyBackend):
    """DynamoDB-backed tenant record store (single-table design)."""

    name = "dynamodb"

    def __init__(self, table_name: str = "", region: str = "us-east-1", table=None):
        self.table_name = table_name
        if table is not None:
            self.table = table
        elif table_name:
            self.table = boto3.resource("dynamodb", region_name=region).Table(table_name)
        else:
            self.table = None

    def is_configured(self) -> bool:
        return self.table is not None

    async def get_record(self, kind: RecordKind, tenant_id: str) -> Optional[dict]:
        return await asyncio.to_thread(self._get, kind, tenant_id)

    async def put_record(self, kind: RecordKind, tenant_id: str, record: dict) -> None:
        await asyncio.to_thread(self._put, kind, tenant_id, record)

    def _get(self, kind: RecordKind, tenant_id: str) -> Optional[dict]:
        try:
            response = self.table.get_item(Key=self._key(kind, tenant_id))
        except (ClientError, BotoCoreError) as e:
            raise BackendUnavailable(f"DynamoDB get_item failed: {e}") from e

        item = response.get("Item")
        if not item:
            return None

        try:
            record = json.loads(item.get("data", ""))
        except json.JSONDecodeError as e:
            raise ValidationError(
                f"Corrupt {kind.value} item for tenant '{tenant_id}': {e}"
            ) from e
        if not isinstance(record, dict):
            raise ValidationError(f"{kind.value} item for tenant '{tenant_id}' is not an object")
        return record

    def _put(self, kind: RecordKind, tenant_id: str, record: dict) -> None:
        item = {
            **self._key(kind, tenant_id),
            "tenant_id": tenant_id,
            "kind": kind.value,
            "data": json.dumps(record, sort_keys=True),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self.table.put_item(Item=item)
        except (ClientError, BotoCoreError) as e:
            raise BackendUnavailable(f"DynamoDB put_item failed: {e}") from e

    @staticmethod
    def _key(kind: RecordKind, tenant_id: str) -> dict:
        return {"pk": f"TENANT#{tenant_id}", "sk": kind.value.upper()}
