"""SQLite source adapter."""

import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..exceptions import AdapterError
from ..models.schema import Document, FieldDefinition, FieldType
from .base import BaseSource

logger = logging.getLogger(__name__)


def quote_identifier(name: str) -> str:
    """Quote an SQL identifier."""
    return '"' + name.replace('"', '""') + '"'


def field_type_from_declared(declared: str) -> FieldType:
    """Map a declared SQLite column type onto a FieldType."""
    declared = (declared or "").upper()
    if "INT" in declared:
        return FieldType.INTEGER
    if "BOOL" in declared:
        return FieldType.BOOLEAN
    if "JSON" in declared:
        return FieldType.JSON
    if "TIMESTAMP" in declared:
        return FieldType.TIMESTAMP
    if "DATETIME" in declared:
        return FieldType.DATETIME
    if "DATE" in declared:
        return FieldType.DATE
    if "TEXT" in declared or "CLOB" in declared:
        return FieldType.TEXT
    if any(t in declared for t in ("REAL", "FLOA", "DOUB", "DEC", "NUM")):
        return FieldType.DECIMAL
    if "BLOB" in declared:
        return FieldType.BLOB
    return FieldType.STRING


def connect(path: str, timeout: float = 5.0) -> sqlite3.Connection:
    """Open a connection with dict-like rows."""
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path, timeout=timeout)
    conn.row_factory = sqlite3.Row
    return conn


def describe_table(conn: sqlite3.Connection, table: str, name: str) -> Optional[Document]:
    """
    Build a Document from a table's column list.

    Args:
        conn: Open connection
        table: Table name in the database (prefixed)
        name: Document name to report (unprefixed)
    """
    rows = conn.execute(f"PRAGMA table_info({quote_identifier(table)})").fetchall()
    if not rows:
        return None

    fields = {}
    for row in rows:
        fields[row["name"]] = FieldDefinition(
            name=row["name"],
            type=field_type_from_declared(row["type"]),
            nullable=not row["notnull"],
            primary=bool(row["pk"]),
            default=row["dflt_value"],
        )
    return Document(name=name, fields=fields)


class SQLiteSource(BaseSource):
    """
    Source reading tables of an SQLite database.

    Pages are ordered by the primary key columns when the table has any
    (rowid otherwise). When the previous page's last record is known and the
    single key is an integer, the next page is read with a keyset condition instead
    of an OFFSET.
    """

    def __init__(
        self,
        path: str,
        prefix: str = "",
        schema: Optional[str] = "source",
        bulk_size: int = 100,
        page_sizes: Optional[Dict[str, int]] = None,
        timeout: float = 5.0
    ):
        """
        Initialize the source.

        Args:
            path: Database file path
            prefix: Table name prefix
            schema: Alias the database is attached under for set-based copies
            bulk_size: Default page size
            page_sizes: Per-document page size overrides
            timeout: Connection timeout in seconds
        """
        super().__init__(prefix=prefix, schema=schema, bulk_size=bulk_size, page_sizes=page_sizes)
        self.path = path
        self.timeout = timeout
        self.conn: Optional[sqlite3.Connection] = None
        self._documents: Dict[str, Optional[Document]] = {}

    def connect(self) -> sqlite3.Connection:
        """Connect to the database (once)."""
        if self.conn is None:
            self.conn = connect(self.path, self.timeout)
            logger.info(f"Connected to SQLite source: {self.path}")
        return self.conn

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.info(f"Disconnected from SQLite source: {self.path}")

    def list_documents(self) -> List[str]:
        rows = self.connect().execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        ).fetchall()
        names = [row["name"] for row in rows]
        return [n[len(self.prefix):] for n in names if n.startswith(self.prefix)]

    def get_document(self, name: str) -> Optional[Document]:
        if name not in self._documents:
            self._documents[name] = describe_table(self.connect(), self.add_document_prefix(name), name)
        return self._documents[name]

    def get_records_count(self, name: str) -> int:
        table = quote_identifier(self.add_document_prefix(name))
        return self.connect().execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]

    def fetch_page(
        self,
        name: str,
        page_number: int,
        page_size: int,
        last_loaded: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        document = self.get_document(name)
        if document is None:
            raise AdapterError(f"Document not found in source: {name}")

        table = quote_identifier(self.add_document_prefix(name))
        key = document.primary_key
        keys = document.primary_keys
        # WITHOUT ROWID tables have no rowid but always have a primary key
        order = ", ".join(quote_identifier(k) for k in keys) if keys else "rowid"

        if (
            key
            and last_loaded
            and last_loaded.get(key) is not None
            and document.fields[key].type == FieldType.INTEGER
        ):
            sql = f"SELECT * FROM {table} WHERE {order} > ? ORDER BY {order} LIMIT ?"
            params: tuple = (last_loaded[key], page_size)
        else:
            sql = f"SELECT * FROM {table} ORDER BY {order} LIMIT ? OFFSET ?"
            params = (page_size, page_number * page_size)

        rows = self.connect().execute(sql, params).fetchall()
        return [dict(row) for row in rows]
