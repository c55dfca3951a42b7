"""
Job Store — SQLite-backed document store for companies, jobs, caches and metadata.

Documents are JSON bodies addressed by (collection, partition key, id). Every
upsert stamps `_ts` with the write time in epoch seconds. Calls run on a worker
thread with one connection per call so the event loop never blocks on disk.
"""

import asyncio
import json
import os
import re
import sqlite3
import time
from enum import Enum
from typing import Any, Optional, Protocol

from tools.errors import ValidationFailed


DEFAULT_DB_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "data",
    "job_ingest.db",
)

# Field of each collection's documents that holds the partition key
PARTITION_KEYS = {
    "company": "provider",
    "job": "company_id",
    "location_cache": "pkey",
    "metadata": "id",
}

_FIELD_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Store(Protocol):
    """Persistent document store contract used by the engine and caches."""

    async def get_item(self, collection: str, id: str, partition_key: str) -> Optional[dict]: ...

    async def upsert(self, collection: str, item: dict) -> dict: ...

    async def delete_item(self, collection: str, id: str, partition_key: str) -> bool: ...

    async def query(self, collection: str, filters: Optional[dict] = None) -> list[dict]: ...

    async def count(self, collection: str, filters: Optional[dict] = None) -> int: ...


def _get_connection(db_path: str = None) -> sqlite3.Connection:
    """Get a SQLite connection, creating the database and directory if needed."""
    db_path = db_path or DEFAULT_DB_PATH
    directory = os.path.dirname(db_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return sqlite3.connect(db_path)


def init_db(db_path: str = None) -> None:
    """Create the documents table if it doesn't exist."""
    conn = _get_connection(db_path)
    try:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS documents (
                collection TEXT NOT NULL,
                pkey TEXT NOT NULL,
                id TEXT NOT NULL,
                ts INTEGER NOT NULL,
                body TEXT NOT NULL,
                PRIMARY KEY (collection, pkey, id)
            )
        """)
        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_documents_collection ON documents(collection, pkey)
        """)
        conn.commit()
    finally:
        conn.close()


def _partition_key(collection: str, item: dict) -> str:
    field_name = PARTITION_KEYS.get(collection)
    if field_name is None:
        raise ValidationFailed(f"Unknown collection: {collection}")

    value = item.get(field_name)
    if value is None or value == "":
        raise ValidationFailed(f"{collection} document is missing partition key '{field_name}'")
    return _text(value)


def _text(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _where(collection: str, filters: Optional[dict]) -> tuple[str, list]:
    """Build an equality WHERE clause over JSON body fields."""
    clause = "collection = ?"
    params: list[Any] = [collection]

    for name, value in (filters or {}).items():
        if not _FIELD_PATTERN.match(name):
            raise ValidationFailed(f"Invalid filter field: {name}")
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, bool):
            value = int(value)
        clause += f" AND json_extract(body, '$.{name}') = ?"
        params.append(value)

    return clause, params


class SqliteStore:
    """Store implementation on a local SQLite file."""

    def __init__(self, db_path: str = None):
        self.db_path = db_path or DEFAULT_DB_PATH
        init_db(self.db_path)

    async def get_item(self, collection: str, id: str, partition_key: str) -> Optional[dict]:
        return await asyncio.to_thread(self._get_item, collection, id, partition_key)

    async def upsert(self, collection: str, item: dict) -> dict:
        return await asyncio.to_thread(self._upsert, collection, item)

    async def delete_item(self, collection: str, id: str, partition_key: str) -> bool:
        return await asyncio.to_thread(self._delete_item, collection, id, partition_key)

    async def query(self, collection: str, filters: Optional[dict] = None) -> list[dict]:
        return await asyncio.to_thread(self._query, collection, filters)

    async def count(self, collection: str, filters: Optional[dict] = None) -> int:
        return await asyncio.to_thread(self._count, collection, filters)

    def _get_item(self, collection: str, id: str, partition_key: str) -> Optional[dict]:
        conn = _get_connection(self.db_path)
        try:
            cursor = conn.execute(
                "SELECT body FROM documents WHERE collection = ? AND pkey = ? AND id = ?",
                (collection, _text(partition_key), id),
            )
            row = cursor.fetchone()
            return json.loads(row[0]) if row else None
        finally:
            conn.close()

    def _upsert(self, collection: str, item: dict) -> dict:
        id = item.get("id")
        if not id:
            raise ValidationFailed(f"{collection} document is missing 'id'")

        pkey = _partition_key(collection, item)
        ts = int(time.time())
        doc = {**item, "_ts": ts}

        try:
            body = json.dumps(doc, default=str)
        except (TypeError, ValueError) as e:
            raise ValidationFailed(f"{collection} document could not be serialized", e) from e

        conn = _get_connection(self.db_path)
        try:
            conn.execute(
                "INSERT OR REPLACE INTO documents (collection, pkey, id, ts, body) VALUES (?, ?, ?, ?, ?)",
                (collection, pkey, str(id), ts, body),
            )
            conn.commit()
            return doc
        finally:
            conn.close()

    def _delete_item(self, collection: str, id: str, partition_key: str) -> bool:
        conn = _get_connection(self.db_path)
        try:
            cursor = conn.execute(
                "DELETE FROM documents WHERE collection = ? AND pkey = ? AND id = ?",
                (collection, _text(partition_key), id),
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def _query(self, collection: str, filters: Optional[dict]) -> list[dict]:
        clause, params = _where(collection, filters)
        conn = _get_connection(self.db_path)
        try:
            cursor = conn.execute(f"SELECT body FROM documents WHERE {clause} ORDER BY pkey, id", params)
            return [json.loads(row[0]) for row in cursor.fetchall()]
        finally:
            conn.close()

    def _count(self, collection: str, filters: Optional[dict]) -> int:
        clause, params = _where(collection, filters)
        conn = _get_connection(self.db_path)
        try:
            cursor = conn.execute(f"SELECT COUNT(*) FROM documents WHERE {clause}", params)
            return cursor.fetchone()[0]
        finally:
            conn.close()
