import json
from typing import Any, Dict, List, Mapping, Optional, Sequence

from hotel_admin.core.logger import logger
from hotel_admin.models.audit import AuditChange
from hotel_admin.models.auth import AuthUser
from hotel_admin.models.common import UserSnapshot, new_id, utcnow
from hotel_admin.services.db_service import DocumentStore, Query


def diff_fields(old: Mapping[str, Any], new: Mapping[str, Any], keys: Sequence[str]) -> List[AuditChange]:
    """
    Structural comparison of two snapshots, one change per differing key.
    Both snapshots should be serialized the same way (e.g. `to_api()`), dict equality
    ignores key order so nested objects compare by value.
    """
    changes = []
    for key in keys:
        old_value, new_value = old.get(key), new.get(key)
        if old_value != new_value:
            changes.append(AuditChange(key=key, old_value=old_value, new_value=new_value))
    return changes


def format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return str(value)


def build_note(changes: Sequence[AuditChange]) -> str:
    return "; ".join(
        f"{c.key}: {format_value(c.old_value)} -> {format_value(c.new_value)}" for c in changes
    )


def creation_changes(snapshot: Mapping[str, Any], keys: Sequence[str]) -> List[AuditChange]:
    return [AuditChange(key=key, old_value=None, new_value=snapshot.get(key)) for key in keys]


class AuditLogger:
    """
    Append-only change log for one kind of entity.
    Writes are best effort: a failure is logged and swallowed so it never blocks
    or rolls back the mutation it describes.
    """

    def __init__(self, store: DocumentStore, table: str, owner_field: str):
        self.store = store
        self.table = table
        self.owner_field = owner_field

    async def record(
        self,
        owner_id: str,
        action: str,
        changes: Sequence[AuditChange],
        user: Optional[AuthUser] = None,
        note: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        doc = {
            "id": new_id(),
            self.owner_field: owner_id,
            "action": action,
            "changes": [c.to_doc() for c in changes],
            "user": UserSnapshot(id=user.id, email=user.email, role=user.role).to_doc() if user else None,
            "note": note,
            "created_at": utcnow().isoformat(),
        }
        try:
            stored = await self.store.insert(self.table, doc)
            logger.info(f"📝 Audit {action} written for {self.owner_field}={owner_id} ({len(changes)} changes)")
            return stored
        except Exception:
            logger.exception(f"❌ Failed to write audit log for {self.owner_field}={owner_id}")
            return None

    async def list_for(self, owner_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        query = Query().eq(self.owner_field, owner_id).order("created_at", desc=True).take(limit)
        rows, _ = await self.store.find(self.table, query)
        return rows
