import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from supabase import AsyncClient, create_async_client

from hotel_admin.core.config import Settings
from hotel_admin.core.logger import logger


@dataclass
class Filter:
    op: str
    field: str
    value: Any = None


@dataclass
class Query:
    """
    Backend-neutral description of a table read.
    Builder methods return self so calls can be chained.
    """

    filters: List[Filter] = field(default_factory=list)
    search_fields: List[str] = field(default_factory=list)
    search_term: Optional[str] = None
    order_by: Optional[str] = None
    descending: bool = False
    offset: int = 0
    limit: Optional[int] = None

    def _add(self, op: str, name: str, value: Any = None) -> "Query":
        self.filters.append(Filter(op, name, value))
        return self

    def eq(self, name: str, value: Any) -> "Query":
        return self._add("eq", name, value)

    def neq(self, name: str, value: Any) -> "Query":
        return self._add("neq", name, value)

    def lt(self, name: str, value: Any) -> "Query":
        return self._add("lt", name, value)

    def lte(self, name: str, value: Any) -> "Query":
        return self._add("lte", name, value)

    def gt(self, name: str, value: Any) -> "Query":
        return self._add("gt", name, value)

    def gte(self, name: str, value: Any) -> "Query":
        return self._add("gte", name, value)

    def in_(self, name: str, values: List[Any]) -> "Query":
        return self._add("in", name, list(values))

    def is_null(self, name: str) -> "Query":
        return self._add("is_null", name)

    def not_null(self, name: str) -> "Query":
        return self._add("not_null", name)

    def search(self, fields: List[str], term: Optional[str]) -> "Query":
        term = (term or "").strip()
        if term:
            self.search_fields = list(fields)
            self.search_term = term
        return self

    def order(self, name: str, desc: bool = False) -> "Query":
        self.order_by = name
        self.descending = desc
        return self

    def page(self, page: int, limit: int) -> "Query":
        self.offset = (page - 1) * limit
        self.limit = limit
        return self

    def take(self, limit: Optional[int]) -> "Query":
        self.limit = limit
        return self


def to_storable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [to_storable(v) for v in value]
    return value


def search_filter(fields: List[str], term: str) -> str:
    """
    PostgREST `or` filter matching `term` case-insensitively in any of `fields`.
    The pattern is double quoted so reserved characters such as `,.:()` stay literal.
    """
    escaped = term.replace("\\", "\\\\").replace('"', '\\"')
    return ",".join(f'{name}.ilike."%{escaped}%"' for name in fields)


class DocumentStore(ABC):
    """Storage collaborator. Documents are plain dicts keyed by snake_case column names."""

    @abstractmethod
    async def insert(self, table: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def get(self, table: str, doc_id: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    async def update(self, table: str, doc_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    async def delete(self, table: str, doc_id: str) -> bool:
        pass

    @abstractmethod
    async def delete_where(self, table: str, name: str, value: Any) -> int:
        pass

    @abstractmethod
    async def find(self, table: str, query: Optional[Query] = None) -> Tuple[List[Dict[str, Any]], int]:
        """Returns the requested page of rows and the total count matching the filters."""

    async def find_one(self, table: str, query: Query) -> Optional[Dict[str, Any]]:
        rows, _ = await self.find(table, query.take(1))
        return rows[0] if rows else None


class Database:
    """
    Process-wide handle on the Supabase async client.
    The client is created on first use and reused afterwards.
    """

    def __init__(self, url: str, key: str):
        self.url = url
        self.key = key
        self._client: Optional[AsyncClient] = None
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.url and self.key)

    async def get_client(self) -> AsyncClient:
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is None:
                if not self.configured:
                    raise RuntimeError("Supabase credentials missing (SUPABASE_URL / SUPABASE_KEY)")
                try:
                    self._client = await create_async_client(self.url, self.key)
                    logger.info("✅ Supabase Async client initialized")
                except Exception as e:
                    logger.error(f"❌ Failed to initialize Supabase Async: {e}")
                    raise
        return self._client


class SupabaseStore(DocumentStore):
    def __init__(self, database: Database):
        self.database = database

    async def _table(self, table: str):
        client = await self.database.get_client()
        return client.table(table)

    async def insert(self, table: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        response = await (await self._table(table)).insert(doc).execute()
        return response.data[0] if response.data else doc

    async def get(self, table: str, doc_id: str) -> Optional[Dict[str, Any]]:
        response = await (await self._table(table)).select("*").eq("id", doc_id).limit(1).execute()
        return response.data[0] if response.data else None

    async def update(self, table: str, doc_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        response = await (await self._table(table)).update(fields).eq("id", doc_id).execute()
        return response.data[0] if response.data else None

    async def delete(self, table: str, doc_id: str) -> bool:
        response = await (await self._table(table)).delete().eq("id", doc_id).execute()
        return bool(response.data)

    async def delete_where(self, table: str, name: str, value: Any) -> int:
        response = await (await self._table(table)).delete().eq(name, value).execute()
        return len(response.data or [])

    async def find(self, table: str, query: Optional[Query] = None) -> Tuple[List[Dict[str, Any]], int]:
        query = query or Query()
        builder = (await self._table(table)).select("*", count="exact")

        for f in query.filters:
            value = to_storable(f.value)
            if f.op == "is_null":
                builder = builder.is_(f.field, "null")
            elif f.op == "not_null":
                builder = builder.not_.is_(f.field, "null")
            elif f.op == "in":
                builder = builder.in_(f.field, value)
            else:
                builder = getattr(builder, f.op)(f.field, value)

        if query.search_term:
            builder = builder.or_(search_filter(query.search_fields, query.search_term))

        if query.order_by:
            builder = builder.order(query.order_by, desc=query.descending)

        if query.limit is not None:
            builder = builder.range(query.offset, query.offset + query.limit - 1)

        response = await builder.execute()
        rows = response.data or []
        total = response.count if response.count is not None else len(rows)
        return rows, total


def build_store(settings: Settings) -> DocumentStore:
    """Pick the storage backend once at process start."""
    from hotel_admin.services.memory_store import MemoryStore

    backend = settings.STORE_BACKEND.lower()
    database = Database(settings.SUPABASE_URL, settings.SUPABASE_KEY)

    if backend == "memory" or (backend == "auto" and not database.configured):
        if settings.is_production:
            raise RuntimeError("In-memory store is not allowed in production")
        logger.warning("⚠️ Supabase credentials missing, using in-memory store")
        return MemoryStore()

    logger.info("Using Supabase store")
    return SupabaseStore(database)
