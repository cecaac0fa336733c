"""
PersonStore — SQLite-backed person records with a live change feed.

The store owns one connection, an in-memory cache mirroring the committed
table contents, and a :class:`SnapshotBroadcast` that receives the whole
cache after every successful write.

Contract:
  - Every operation returns ``True``/``False``; storage errors are logged,
    never raised to the caller.
  - The cache changes only after the matching write has been committed.
  - Operations on a store that is not open return ``False``.

Usage::

    store = PersonStore("people.sqlite", directory=path)
    await store.open()
    feed = store.all()
    await store.create("Ada", "Lovelace")
    people = await anext(feed)
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TypeVar

from rolodex.core.config import RolodexConfig, rolodex_dir
from rolodex.core.constants import (
    COLUMN_FIRST_NAME,
    COLUMN_ID,
    COLUMN_LAST_NAME,
    TABLE_NAME,
)
from rolodex.core.exceptions import StoreError, StoreOpenError
from rolodex.core.store.broadcast import SnapshotBroadcast, Subscription
from rolodex.core.store.models import Person

logger = logging.getLogger(__name__)

R = TypeVar("R")

_CREATE_TABLE = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    {COLUMN_ID}         INTEGER PRIMARY KEY AUTOINCREMENT,
    {COLUMN_FIRST_NAME} TEXT NOT NULL,
    {COLUMN_LAST_NAME}  TEXT NOT NULL
)
"""

_SELECT_ALL = (
    f"SELECT DISTINCT {COLUMN_ID}, {COLUMN_FIRST_NAME}, {COLUMN_LAST_NAME} "  # noqa: S608
    f"FROM {TABLE_NAME} ORDER BY {COLUMN_ID}"
)
_INSERT = f"INSERT INTO {TABLE_NAME} ({COLUMN_FIRST_NAME}, {COLUMN_LAST_NAME}) VALUES (?, ?)"
_UPDATE = (
    f"UPDATE {TABLE_NAME} SET {COLUMN_FIRST_NAME} = ?, {COLUMN_LAST_NAME} = ? "  # noqa: S608
    f"WHERE {COLUMN_ID} = ?"
)
_DELETE = f"DELETE FROM {TABLE_NAME} WHERE {COLUMN_ID} = ?"  # noqa: S608


class PersonStore:
    """Owns the connection, the record cache, and the snapshot broadcast."""

    def __init__(self, db_name: str, directory: Path | None = None) -> None:
        self.db_name = db_name
        self._directory = directory
        self._conn: sqlite3.Connection | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._opening: asyncio.Task[bool] | None = None
        self._people: list[Person] = []
        self._broadcast: SnapshotBroadcast[Person] = SnapshotBroadcast()

    @classmethod
    def from_config(cls, config: RolodexConfig) -> PersonStore:
        directory = (
            Path(config.database.directory).expanduser() if config.database.directory else None
        )
        return cls(config.database.name, directory=directory)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def path(self) -> Path | None:
        """Database file path, or None until the location has been resolved."""
        if self._directory is None:
            return None
        return self._directory / self.db_name

    @property
    def records(self) -> tuple[Person, ...]:
        """Current cache, ordered by id."""
        return tuple(sorted(self._people))

    def _emit(self) -> None:
        self._broadcast.publish(self._people)

    async def _run(self, fn: Callable[..., R], *args: object) -> R:
        """Run blocking SQLite work on the thread that owns the connection."""
        if self._executor is None:
            raise StoreError(f"Person store {self.db_name!r} is not open")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, fn, *args)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _resolve_path(self) -> Path:
        if self._directory is None:
            self._directory = rolodex_dir()
        else:
            self._directory.mkdir(mode=0o700, parents=True, exist_ok=True)
        return self._directory / self.db_name

    def _connect(self) -> tuple[sqlite3.Connection, list[Person]]:
        path = self._resolve_path()
        conn = sqlite3.connect(str(path))
        conn.row_factory = sqlite3.Row
        try:
            conn.execute(_CREATE_TABLE)
            conn.commit()
            rows = conn.execute(_SELECT_ALL).fetchall()
            people = [Person.from_row(row) for row in rows]
        except Exception:
            conn.close()
            raise
        return conn, people

    async def open(self) -> bool:
        """Connect, ensure the table exists, load every row, and emit.

        Overlapping calls share one in-flight open, so only one connection
        is ever made.
        """
        if self._conn is not None:
            return True
        if self._opening is None:
            self._opening = asyncio.get_running_loop().create_task(self._open())
        return await asyncio.shield(self._opening)

    async def _open(self) -> bool:
        try:
            return await self._open_connection()
        finally:
            self._opening = None

    async def _open_connection(self) -> bool:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="rolodex-db")
        try:
            conn, people = await self._run(self._connect)
        except (sqlite3.Error, OSError, ValueError, TypeError) as exc:
            logger.error("PersonStore: cannot open %s: %s", self.db_name, exc)
            self._shutdown_executor()
            return False

        self._conn = conn
        self._people = people
        logger.info("PersonStore: opened %s (%d record(s))", self.path, len(people))
        self._emit()
        return True

    async def close(self) -> bool:
        """Release the connection. The cache is kept until the next open()."""
        conn = self._conn
        if conn is None:
            return False
        self._conn = None
        try:
            await self._run(conn.close)
        except sqlite3.Error as exc:
            logger.warning("PersonStore: error closing %s: %s", self.path, exc)
            return False
        finally:
            self._shutdown_executor()
        logger.info("PersonStore: closed %s", self.path)
        return True

    def _shutdown_executor(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    async def __aenter__(self) -> PersonStore:
        if not await self.open():
            raise StoreOpenError(f"Cannot open person store {self.db_name!r}")
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    def _insert(conn: sqlite3.Connection, first_name: str, last_name: str) -> int:
        try:
            cur = conn.execute(_INSERT, (first_name, last_name))
        except sqlite3.Error:
            conn.rollback()
            raise
        conn.commit()
        return int(cur.lastrowid)  # type: ignore[arg-type]

    @staticmethod
    def _apply_single_row(conn: sqlite3.Connection, sql: str, params: tuple[object, ...]) -> int:
        """Run *sql*; commit only if exactly one row changed, else roll back."""
        try:
            count = conn.execute(sql, params).rowcount
        except sqlite3.Error:
            conn.rollback()
            raise
        if count == 1:
            conn.commit()
        else:
            conn.rollback()
        return count

    async def create(self, first_name: str, last_name: str) -> bool:
        conn = self._conn
        if conn is None:
            return False
        try:
            person_id = await self._run(self._insert, conn, first_name, last_name)
        except sqlite3.Error as exc:
            logger.error("PersonStore: failed to create person: %s", exc)
            return False

        person = Person(id=person_id, first_name=first_name, last_name=last_name)
        self._people.append(person)
        logger.debug("PersonStore: created %s", person)
        self._emit()
        return True

    async def update(self, person: Person) -> bool:
        conn = self._conn
        if conn is None:
            return False
        try:
            count = await self._run(
                self._apply_single_row,
                conn,
                _UPDATE,
                (person.first_name, person.last_name, person.id),
            )
        except sqlite3.Error as exc:
            logger.error("PersonStore: failed to update person %s: %s", person.id, exc)
            return False

        if count != 1:
            if count > 1:
                logger.error("PersonStore: update matched %d rows for id %s", count, person.id)
            return False

        self._people = [p for p in self._people if p.id != person.id]
        self._people.append(person)
        logger.debug("PersonStore: updated %s", person)
        self._emit()
        return True

    async def delete(self, person: Person) -> bool:
        conn = self._conn
        if conn is None:
            return False
        try:
            count = await self._run(self._apply_single_row, conn, _DELETE, (person.id,))
        except sqlite3.Error as exc:
            logger.error("PersonStore: deletion of %s failed: %s", person.id, exc)
            return False

        if count != 1:
            if count > 1:
                logger.error("PersonStore: delete matched %d rows for id %s", count, person.id)
            return False

        self._people = [p for p in self._people if p.id != person.id]
        logger.debug("PersonStore: deleted person %s", person.id)
        self._emit()
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def all(self) -> Subscription[Person]:
        """Subscribe to id-ordered snapshots of the cache."""
        return self._broadcast.subscribe(transform=sorted)
