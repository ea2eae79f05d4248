"""site_lingo.storage.sqlite_repository: SQLite engine of the translation repository.

One connection is kept for the process lifetime.  Calls run in a worker
thread (``asyncio.to_thread``) and are serialized by a lock, so the event
loop never blocks on disk I/O and the connection is never used concurrently.
"""

from __future__ import annotations

import asyncio
import sqlite3
import threading
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, TypeVar, Union

from site_lingo.errors import PersistenceError
from site_lingo.logger import get_logger
from site_lingo.storage.models import Fragment, Site
from site_lingo.storage.repository import TranslationRepository

T = TypeVar("T")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS websites (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    domain TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS translations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    website_id INTEGER NOT NULL,
    original_text TEXT NOT NULL,
    translated_text TEXT,
    language TEXT NOT NULL,
    path TEXT NOT NULL,
    element_type TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (website_id) REFERENCES websites (id)
);

CREATE INDEX IF NOT EXISTS idx_websites_domain ON websites (domain);
CREATE INDEX IF NOT EXISTS idx_translations_lookup ON translations (website_id, path, language);
CREATE INDEX IF NOT EXISTS idx_translations_text ON translations (website_id, original_text);
"""

_FRAGMENT_COLUMNS = (
    "t.id, t.website_id, t.original_text, t.translated_text, t.language, t.path, t.element_type, t.created_at"
)


def _site(row: sqlite3.Row) -> Site:
    return Site(id=row["id"], domain=row["domain"], created_at=row["created_at"])


def _fragment(row: sqlite3.Row) -> Fragment:
    return Fragment(
        id=row["id"],
        site_id=row["website_id"],
        original_text=row["original_text"],
        translated_text=row["translated_text"],
        language_code=row["language"],
        path=row["path"],
        element_kind=row["element_type"],
        created_at=row["created_at"],
        domain=row["domain"] if "domain" in row.keys() else None,
    )


class SqliteTranslationRepository(TranslationRepository):
    """Translation repository backed by a single SQLite database file."""

    def __init__(self, database_path: Union[str, Path] = "translations.db") -> None:
        self.database_path = str(database_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()
        self.logger = get_logger("storage")

    # -- lifecycle ----------------------------------------------------------

    async def open(self) -> None:
        if self._conn is not None:
            return
        await asyncio.to_thread(self._open_sync)
        self.logger.info("Repository opened: %s", self.database_path)

    def _open_sync(self) -> None:
        if self.database_path != ":memory:":
            Path(self.database_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(self.database_path, check_same_thread=False, isolation_level=None)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot open database {self.database_path}: {exc}") from exc
        self._conn = conn

    async def close(self) -> None:
        if self._conn is None:
            return
        await asyncio.to_thread(self._close_sync)
        self.logger.info("Repository closed: %s", self.database_path)

    def _close_sync(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    async def _run(self, func: Callable[[sqlite3.Connection], T]) -> T:
        return await asyncio.to_thread(self._call, func)

    def _call(self, func: Callable[[sqlite3.Connection], T]) -> T:
        with self._lock:
            if self._conn is None:
                raise PersistenceError("Repository is not open")
            try:
                return func(self._conn)
            except (sqlite3.Error, OverflowError) as exc:
                raise PersistenceError(str(exc)) from exc

    @staticmethod
    def _all(conn: sqlite3.Connection, sql: str, params: Sequence[Any]) -> List[sqlite3.Row]:
        return conn.execute(sql, tuple(params)).fetchall()

    # -- sites --------------------------------------------------------------

    async def get_or_create_site(self, domain: str) -> Site:
        def _tx(conn: sqlite3.Connection) -> Site:
            conn.execute("BEGIN IMMEDIATE")
            try:
                row = conn.execute(
                    "SELECT id, domain, created_at FROM websites WHERE domain = ? ORDER BY id LIMIT 1",
                    (domain,),
                ).fetchone()
                if row is None:
                    cur = conn.execute(
                        "INSERT INTO websites (domain, created_at) VALUES (?, datetime('now'))", (domain,)
                    )
                    row = conn.execute(
                        "SELECT id, domain, created_at FROM websites WHERE id = ?", (cur.lastrowid,)
                    ).fetchone()
                    self.logger.info("Created new website %s (id=%s)", domain, row["id"])
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
            return _site(row)

        return await self._run(_tx)

    async def find_site_by_domain(self, domain: str) -> Optional[Site]:
        rows = await self._run(
            lambda c: self._all(
                c, "SELECT id, domain, created_at FROM websites WHERE domain = ? ORDER BY id LIMIT 1", (domain,)
            )
        )
        return _site(rows[0]) if rows else None

    async def find_site_by_id(self, site_id: int) -> Optional[Site]:
        rows = await self._run(
            lambda c: self._all(c, "SELECT id, domain, created_at FROM websites WHERE id = ?", (site_id,))
        )
        return _site(rows[0]) if rows else None

    async def list_sites(self) -> List[Site]:
        rows = await self._run(
            lambda c: self._all(
                c, "SELECT id, domain, created_at FROM websites ORDER BY created_at DESC, id DESC", ()
            )
        )
        return [_site(r) for r in rows]

    # -- fragments ----------------------------------------------------------

    @staticmethod
    def _insert_sync(
        conn: sqlite3.Connection,
        site_id: int,
        original_text: str,
        translated_text: Optional[str],
        language_code: str,
        path: str,
        element_kind: str,
    ) -> Fragment:
        cur = conn.execute(
            "INSERT INTO translations "
            "(website_id, original_text, translated_text, language, path, element_type, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, datetime('now'))",
            (site_id, original_text, translated_text, language_code, path, element_kind),
        )
        row = conn.execute(
            f"SELECT {_FRAGMENT_COLUMNS} FROM translations t WHERE t.id = ?", (cur.lastrowid,)
        ).fetchone()
        return _fragment(row)

    async def insert(
        self,
        site_id: int,
        original_text: str,
        translated_text: Optional[str],
        language_code: str,
        path: str,
        element_kind: str,
    ) -> Fragment:
        return await self._run(
            lambda c: self._insert_sync(c, site_id, original_text, translated_text, language_code, path, element_kind)
        )

    async def insert_if_absent(
        self,
        site_id: int,
        original_text: str,
        language_code: str,
        path: str,
        element_kind: str,
    ) -> Optional[Fragment]:
        def _tx(conn: sqlite3.Connection) -> Optional[Fragment]:
            exists = conn.execute(
                "SELECT 1 FROM translations "
                "WHERE website_id = ? AND original_text = ? AND language = ? AND path = ? AND element_type = ? "
                "LIMIT 1",
                (site_id, original_text, language_code, path, element_kind),
            ).fetchone()
            if exists:
                return None
            return self._insert_sync(conn, site_id, original_text, None, language_code, path, element_kind)

        return await self._run(_tx)

    async def find_untranslated(self, site_id: int) -> List[Fragment]:
        rows = await self._run(
            lambda c: self._all(
                c,
                f"SELECT {_FRAGMENT_COLUMNS} FROM translations t "
                "WHERE t.website_id = ? AND t.translated_text IS NULL ORDER BY t.id",
                (site_id,),
            )
        )
        return [_fragment(r) for r in rows]

    async def update_translation(self, fragment_id: int, translated_text: str, language_code: str) -> None:
        def _update(conn: sqlite3.Connection) -> int:
            cur = conn.execute(
                "UPDATE translations SET translated_text = ?, language = ? WHERE id = ?",
                (translated_text, language_code, fragment_id),
            )
            return cur.rowcount

        if await self._run(_update) == 0:
            raise PersistenceError(f"Fragment {fragment_id} does not exist")

    async def find_by_path_and_language(self, site_id: int, path: str, language_code: str) -> List[Fragment]:
        rows = await self._run(
            lambda c: self._all(
                c,
                f"SELECT {_FRAGMENT_COLUMNS} FROM translations t "
                "WHERE t.website_id = ? AND t.path = ? AND t.language = ? ORDER BY t.id",
                (site_id, path, language_code),
            )
        )
        return [_fragment(r) for r in rows]

    async def find_translation_by_text(self, domain: str, original_text: str, language_code: str) -> Optional[str]:
        rows = await self._run(
            lambda c: self._all(
                c,
                "SELECT t.translated_text FROM translations t "
                "JOIN websites w ON t.website_id = w.id "
                "WHERE w.domain = ? AND t.original_text = ? AND t.language = ? "
                "AND t.translated_text IS NOT NULL ORDER BY t.id LIMIT 1",
                (domain, original_text, language_code),
            )
        )
        return rows[0]["translated_text"] if rows else None

    async def list_fragments(self, site_id: int) -> List[Fragment]:
        rows = await self._run(
            lambda c: self._all(
                c,
                f"SELECT {_FRAGMENT_COLUMNS}, w.domain AS domain FROM translations t "
                "JOIN websites w ON t.website_id = w.id "
                "WHERE t.website_id = ? ORDER BY t.created_at DESC, t.id DESC",
                (site_id,),
            )
        )
        return [_fragment(r) for r in rows]
