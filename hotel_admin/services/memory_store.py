import copy
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from hotel_admin.services.db_service import DocumentStore, Filter, Query, to_storable

_ISO_DATETIME = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")


def _comparable(value: Any) -> Any:
    value = to_storable(value)
    if isinstance(value, str) and _ISO_DATETIME.match(value):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value


def _matches(doc: Dict[str, Any], f: Filter) -> bool:
    current = doc.get(f.field)
    if f.op == "is_null":
        return current is None
    if f.op == "not_null":
        return current is not None
    if f.op == "in":
        return current in to_storable(f.value)
    if f.op == "eq":
        return _comparable(current) == _comparable(f.value)
    if f.op == "neq":
        return _comparable(current) != _comparable(f.value)

    # Range comparisons never match missing values, as in SQL
    if current is None:
        return False
    left, right = _comparable(current), _comparable(f.value)
    if f.op == "lt":
        return left < right
    if f.op == "lte":
        return left <= right
    if f.op == "gt":
        return left > right
    if f.op == "gte":
        return left >= right
    raise ValueError(f"Unsupported filter operator: {f.op}")


def _search_hit(doc: Dict[str, Any], fields: List[str], term: str) -> bool:
    needle = term.lower()
    return any(needle in str(doc.get(name) or "").lower() for name in fields)


class MemoryStore(DocumentStore):
    """
    In-process store used for local development and tests.
    Rows are deep-copied on the way in and out, so callers never share state with the store.
    """

    def __init__(self):
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _table(self, table: str) -> Dict[str, Dict[str, Any]]:
        return self.tables.setdefault(table, {})

    async def insert(self, table: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        if "id" not in doc:
            raise ValueError("Documents must carry an id")
        stored = copy.deepcopy(to_storable_doc(doc))
        self._table(table)[doc["id"]] = stored
        return copy.deepcopy(stored)

    async def get(self, table: str, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = self._table(table).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def update(self, table: str, doc_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        doc = self._table(table).get(doc_id)
        if doc is None:
            return None
        doc.update(copy.deepcopy(to_storable_doc(fields)))
        return copy.deepcopy(doc)

    async def delete(self, table: str, doc_id: str) -> bool:
        return self._table(table).pop(doc_id, None) is not None

    async def delete_where(self, table: str, name: str, value: Any) -> int:
        rows = self._table(table)
        doomed = [doc_id for doc_id, doc in rows.items() if doc.get(name) == value]
        for doc_id in doomed:
            del rows[doc_id]
        return len(doomed)

    async def find(self, table: str, query: Optional[Query] = None) -> Tuple[List[Dict[str, Any]], int]:
        query = query or Query()
        rows = [
            doc for doc in self._table(table).values()
            if all(_matches(doc, f) for f in query.filters)
        ]
        if query.search_term:
            rows = [doc for doc in rows if _search_hit(doc, query.search_fields, query.search_term)]

        if query.order_by:
            present = [doc for doc in rows if doc.get(query.order_by) is not None]
            missing = [doc for doc in rows if doc.get(query.order_by) is None]
            present.sort(key=lambda doc: _comparable(doc[query.order_by]), reverse=query.descending)
            rows = present + missing

        total = len(rows)
        if query.limit is not None:
            rows = rows[query.offset:query.offset + query.limit]
        elif query.offset:
            rows = rows[query.offset:]
        return copy.deepcopy(rows), total


def to_storable_doc(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {key: to_storable(value) for key, value in doc.items()}
