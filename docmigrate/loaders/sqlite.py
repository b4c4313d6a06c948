"""SQLite destination adapter."""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from ..exceptions import AdapterError
from ..extractors.base import SelectStatement
from ..extractors.sqlite import connect, describe_table, quote_identifier
from ..models.schema import Document
from .base import BaseDestination

logger = logging.getLogger(__name__)


class SQLiteDestination(BaseDestination):
    """
    Destination writing to tables of an SQLite database.

    Source databases listed in ``attached`` (alias -> path) are attached to
    the connection so that set-based copies can read them directly.
    """

    def __init__(
        self,
        path: str,
        prefix: str = "",
        attached: Optional[Dict[str, str]] = None,
        timeout: float = 5.0
    ):
        """
        Initialize the destination.

        Args:
            path: Database file path
            prefix: Table name prefix
            attached: Alias -> database path of sources to attach
            timeout: Connection timeout in seconds
        """
        super().__init__(prefix=prefix)
        self.path = path
        self.attached = dict(attached or {})
        self.timeout = timeout
        self.conn: Optional[sqlite3.Connection] = None
        self._documents: Dict[str, Optional[Document]] = {}

    def connect(self) -> sqlite3.Connection:
        """Connect to the database and attach the configured sources (once)."""
        if self.conn is None:
            self.conn = connect(self.path, self.timeout)
            for alias, path in self.attached.items():
                self.conn.execute(f"ATTACH DATABASE ? AS {quote_identifier(alias)}", (path,))
                logger.debug(f"Attached {path} as {alias}")
            logger.info(f"Connected to SQLite destination: {self.path}")
        return self.conn

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.info(f"Disconnected from SQLite destination: {self.path}")

    def get_document(self, name: str) -> Optional[Document]:
        if name not in self._documents:
            self._documents[name] = describe_table(self.connect(), self.add_document_prefix(name), name)
        return self._documents[name]

    def clear_document(self, name: str) -> None:
        conn = self.connect()
        with conn:
            conn.execute(f"DELETE FROM {quote_identifier(self.add_document_prefix(name))}")

    def get_records_count(self, name: str) -> int:
        table = quote_identifier(self.add_document_prefix(name))
        return self.connect().execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]

    def get_rows(self, name: str) -> List[Dict[str, Any]]:
        """All rows of a document, in rowid order."""
        table = quote_identifier(self.add_document_prefix(name))
        return [dict(row) for row in self.connect().execute(f"SELECT * FROM {table} ORDER BY rowid")]

    def write_rows(
        self,
        name: str,
        columns: List[str],
        rows: List[List[Any]],
        fields_update_on_duplicate: List[str]
    ) -> int:
        document = self.get_document(name)
        if document is None:
            raise AdapterError(f"Document not found in destination: {name}")

        table = quote_identifier(self.add_document_prefix(name))
        column_list = ", ".join(quote_identifier(c) for c in columns)
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {table} ({column_list}) VALUES ({placeholders})"

        updates = [f for f in fields_update_on_duplicate if f in columns]
        key = document.primary_key
        if updates and key:
            assignments = ", ".join(
                f"{quote_identifier(f)} = excluded.{quote_identifier(f)}" for f in updates
            )
            sql += f" ON CONFLICT({quote_identifier(key)}) DO UPDATE SET {assignments}"

        conn = self.connect()
        with conn:
            conn.executemany(sql, rows)
        return len(rows)

    def insert_from_select(self, select: SelectStatement, table: str, columns: List[str]) -> int:
        source = quote_identifier(select.document)
        if select.schema:
            source = f"{quote_identifier(select.schema)}.{source}"
        selected = ", ".join(
            f"{quote_identifier(src)} AS {quote_identifier(dst)}" for dst, src in select.columns.items()
        )
        sql = (
            f"INSERT INTO {quote_identifier(table)} ({', '.join(quote_identifier(c) for c in columns)}) "
            f"SELECT {selected} FROM {source}"
        )

        conn = self.connect()
        with conn:
            cursor = conn.execute(sql)
        return cursor.rowcount
