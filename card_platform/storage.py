"""
Storage Backend Module

Provides the abstract storage interface and implementations for in-memory
(testing) and SQLite (persistence). Every record carries an integer
``version`` that the backend increments on each successful
``compare_and_swap``. All monetary values are stored as Decimal strings.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Union, Tuple
from decimal import Decimal
from datetime import datetime, timezone
import sqlite3
import json
import threading
from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path
from contextlib import contextmanager


@dataclass
class StorageRecord:
    """Base class for all stored records"""
    id: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        result = asdict(self)
        # Convert datetime objects to ISO strings
        result['created_at'] = self.created_at.isoformat()
        result['updated_at'] = self.updated_at.isoformat()
        # Convert Decimal and Enum values to strings
        for key, value in result.items():
            if isinstance(value, Decimal):
                result[key] = str(value)
            elif isinstance(value, Enum):
                result[key] = value.value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StorageRecord':
        """Create instance from dictionary"""
        data = dict(data)
        # Convert ISO strings back to datetime objects
        if 'created_at' in data and isinstance(data['created_at'], str):
            data['created_at'] = datetime.fromisoformat(data['created_at'])
        if 'updated_at' in data and isinstance(data['updated_at'], str):
            data['updated_at'] = datetime.fromisoformat(data['updated_at'])

        return cls(**data)


@dataclass(frozen=True)
class SwapResult:
    """
    Outcome of a versioned write.

    ``swapped`` is False when the stored version did not match the expected
    one; ``current_version`` then holds the version found in storage, or None
    when the record does not exist.
    """
    swapped: bool
    data: Optional[Dict[str, Any]] = None
    current_version: Optional[int] = None


class StorageInterface(ABC):
    """Abstract interface for storage backends"""

    @abstractmethod
    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to storage"""
        pass

    @abstractmethod
    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from storage"""
        pass

    @abstractmethod
    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table in insertion order"""
        pass

    @abstractmethod
    def compare_and_swap(
        self,
        table: str,
        record_id: str,
        expected_version: int,
        data: Dict[str, Any]
    ) -> SwapResult:
        """
        Replace a record only if its stored version equals expected_version.

        On success the stored record gets ``version = expected_version + 1``
        and the written data is returned in the result.
        """
        pass

    @abstractmethod
    def exists(self, table: str, record_id: str) -> bool:
        """Check if a record exists"""
        pass

    @abstractmethod
    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters, in insertion order"""
        pass

    @abstractmethod
    def count(self, table: str) -> int:
        """Count records in table"""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close storage connection"""
        pass

    def begin_transaction(self) -> None:
        """Start a database transaction (default no-op)"""
        pass

    def commit(self) -> None:
        """Commit current transaction (default no-op)"""
        pass

    def rollback(self) -> None:
        """Rollback current transaction (default no-op)"""
        pass

    @contextmanager
    def atomic(self):
        """Context manager for atomic operations"""
        self.begin_transaction()
        try:
            yield
            self.commit()
        except BaseException:
            self.rollback()
            raise


def _copy(record: Dict[str, Any]) -> Dict[str, Any]:
    # JSON round trip doubles as a deep copy and keeps values storage-safe
    return json.loads(json.dumps(record, default=str))


class InMemoryStorage(StorageInterface):
    """
    In-memory storage implementation for testing.

    A transaction holds the storage lock for its whole duration and keeps an
    undo journal, so other threads never observe a partially applied unit of
    work and a rollback restores every touched record.
    """

    def __init__(self):
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.RLock()
        self._journal: Optional[List[Tuple[str, str, Optional[Dict[str, Any]]]]] = None
        self._depth = 0

    def _ensure_table(self, table: str) -> None:
        """Ensure table exists"""
        if table not in self._data:
            self._data[table] = {}

    def _remember(self, table: str, record_id: str) -> None:
        """Record the previous state of a record in the undo journal"""
        if self._journal is not None:
            self._journal.append((table, record_id, self._data[table].get(record_id)))

    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to memory"""
        with self._lock:
            self._ensure_table(table)
            self._remember(table, record_id)
            self._data[table][record_id] = _copy(data)

    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from memory"""
        with self._lock:
            self._ensure_table(table)
            record = self._data[table].get(record_id)
            if record:
                return _copy(record)
            return None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table"""
        with self._lock:
            self._ensure_table(table)
            return [_copy(record) for record in self._data[table].values()]

    def compare_and_swap(
        self,
        table: str,
        record_id: str,
        expected_version: int,
        data: Dict[str, Any]
    ) -> SwapResult:
        """Versioned write guarded by the storage lock"""
        with self._lock:
            self._ensure_table(table)
            current = self._data[table].get(record_id)
            if current is None:
                return SwapResult(swapped=False)

            current_version = current.get('version', 0)
            if current_version != expected_version:
                return SwapResult(swapped=False, current_version=current_version)

            new_data = _copy(data)
            new_data['version'] = expected_version + 1
            self._remember(table, record_id)
            self._data[table][record_id] = new_data
            return SwapResult(swapped=True, data=_copy(new_data),
                              current_version=new_data['version'])

    def exists(self, table: str, record_id: str) -> bool:
        """Check if a record exists"""
        with self._lock:
            self._ensure_table(table)
            return record_id in self._data[table]

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters"""
        with self._lock:
            self._ensure_table(table)
            results = []
            for record in self._data[table].values():
                match = True
                for key, value in filters.items():
                    if key not in record or record[key] != value:
                        match = False
                        break
                if match:
                    results.append(_copy(record))
            return results

    def count(self, table: str) -> int:
        """Count records in table"""
        with self._lock:
            self._ensure_table(table)
            return len(self._data[table])

    def close(self) -> None:
        """Close storage (no-op for in-memory)"""
        pass

    def begin_transaction(self) -> None:
        """Acquire the storage lock and start an undo journal"""
        self._lock.acquire()
        if self._depth == 0:
            self._journal = []
        self._depth += 1

    def commit(self) -> None:
        """Drop the undo journal and release the storage lock"""
        try:
            self._depth -= 1
            if self._depth == 0:
                self._journal = None
        finally:
            self._lock.release()

    def rollback(self) -> None:
        """Replay the undo journal and release the storage lock"""
        try:
            self._depth -= 1
            if self._depth == 0:
                for table, record_id, previous in reversed(self._journal or []):
                    if previous is None:
                        self._data[table].pop(record_id, None)
                    else:
                        self._data[table][record_id] = previous
                self._journal = None
        finally:
            self._lock.release()


class SQLiteStorage(StorageInterface):
    """SQLite storage implementation for persistence"""

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        # Set isolation_level to 'DEFERRED' to enable manual transaction control
        self._connection = sqlite3.connect(self.db_path, check_same_thread=False, isolation_level='DEFERRED')
        self._connection.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._in_transaction = False
        self._depth = 0
        self._tables: set = set()

        # Enable WAL mode for better concurrent access
        if self.db_path != ":memory:":
            with self._lock:
                self._connection.execute("PRAGMA journal_mode = WAL")
                self._connection.execute("PRAGMA synchronous = NORMAL")
                self._connection.commit()

    def _commit_unless_in_transaction(self) -> None:
        if not self._in_transaction:
            self._connection.commit()

    def _ensure_table(self, table: str) -> None:
        """Ensure table exists with proper schema"""
        with self._lock:
            if table in self._tables:
                return
            self._connection.execute(f"""
                CREATE TABLE IF NOT EXISTS {table} (
                    id TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    version INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            # Create index on timestamps for better query performance
            self._connection.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_{table}_created_at
                ON {table}(created_at)
            """)
            self._commit_unless_in_transaction()
            self._tables.add(table)

    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to SQLite"""
        with self._lock:
            self._ensure_table(table)

            now = datetime.now(timezone.utc).isoformat()
            data_json = json.dumps(data, default=str)

            # Upsert keeps the original row, its created_at and its position
            self._connection.execute(f"""
                INSERT INTO {table} (id, data, version, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    data = excluded.data,
                    version = excluded.version,
                    updated_at = excluded.updated_at
            """, (record_id, data_json, data.get('version', 0), now, now))

            self._commit_unless_in_transaction()

    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from SQLite"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT data FROM {table} WHERE id = ?
            """, (record_id,))
            row = cursor.fetchone()
            if row:
                return json.loads(row['data'])
            return None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT data FROM {table} ORDER BY created_at, rowid
            """)
            return [json.loads(row['data']) for row in cursor.fetchall()]

    def compare_and_swap(
        self,
        table: str,
        record_id: str,
        expected_version: int,
        data: Dict[str, Any]
    ) -> SwapResult:
        """Versioned write as a conditional UPDATE on the version column"""
        with self._lock:
            self._ensure_table(table)

            new_version = expected_version + 1
            new_data = dict(data)
            new_data['version'] = new_version
            now = datetime.now(timezone.utc).isoformat()

            cursor = self._connection.execute(f"""
                UPDATE {table} SET data = ?, version = ?, updated_at = ?
                WHERE id = ? AND version = ?
            """, (json.dumps(new_data, default=str), new_version, now,
                  record_id, expected_version))

            if cursor.rowcount == 1:
                self._commit_unless_in_transaction()
                return SwapResult(swapped=True, data=json.loads(json.dumps(new_data, default=str)),
                                  current_version=new_version)

            self._commit_unless_in_transaction()
            row = self._connection.execute(f"""
                SELECT version FROM {table} WHERE id = ?
            """, (record_id,)).fetchone()
            if row is None:
                return SwapResult(swapped=False)
            return SwapResult(swapped=False, current_version=row['version'])

    def exists(self, table: str, record_id: str) -> bool:
        """Check if a record exists"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT 1 FROM {table} WHERE id = ? LIMIT 1
            """, (record_id,))
            return cursor.fetchone() is not None

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters (simple JSON key matching)"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT data FROM {table} ORDER BY created_at, rowid
            """)

            results = []
            for row in cursor.fetchall():
                record = json.loads(row['data'])
                match = True
                for key, value in filters.items():
                    if key not in record or record[key] != value:
                        match = False
                        break
                if match:
                    results.append(record)

            return results

    def count(self, table: str) -> int:
        """Count records in table"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT COUNT(*) as count FROM {table}
            """)
            return cursor.fetchone()['count']

    def begin_transaction(self) -> None:
        """Start a database transaction owned by the calling thread"""
        self._lock.acquire()
        if self._depth == 0:
            # SQLite with isolation_level='DEFERRED' automatically starts transactions
            # We just need to track the state
            self._in_transaction = True
        self._depth += 1

    def commit(self) -> None:
        """Commit current transaction"""
        try:
            self._depth -= 1
            if self._depth == 0 and self._in_transaction:
                self._in_transaction = False
                self._connection.commit()
        finally:
            self._lock.release()

    def rollback(self) -> None:
        """Rollback current transaction"""
        try:
            self._depth -= 1
            if self._depth == 0 and self._in_transaction:
                self._in_transaction = False
                self._connection.rollback()
                # Tables created inside the transaction are gone too
                self._tables.clear()
        finally:
            self._lock.release()

    def close(self) -> None:
        """Close SQLite connection"""
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None


def create_storage(database_url: str) -> StorageInterface:
    """
    Build a storage backend from a database URL.

    Supported forms: ``memory://`` and ``sqlite:///path/to.db``
    (``sqlite://`` alone opens an in-process SQLite database).
    """
    if database_url.startswith("memory://"):
        return InMemoryStorage()
    if database_url.startswith("sqlite://"):
        path = database_url[len("sqlite://"):]
        if path.startswith("/"):
            path = path[1:]
        return SQLiteStorage(path or ":memory:")
    raise ValueError(f"Unsupported database URL: {database_url}")
