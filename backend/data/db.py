"""SQLite document store for development and tests"""

import sqlite3
import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence, Tuple

from data.document_store import (
    COLLECTIONS,
    DocumentStore,
    OrderBy,
    StoreError,
    Where,
    decode_document,
    encode_document,
    encode_value,
)


class SQLiteDocumentStore(DocumentStore):
    """
    SQLite-backed document store.

    Each collection is a table of (id, data) rows where data holds the JSON
    document; predicates and ordering are evaluated with json_extract.
    """

    def __init__(self, db_path: str = "findora.db"):
        self.db_path = db_path
        self._ensure_tables_exist()

    def _ensure_tables_exist(self):
        """Ensure all collection tables exist (migration-friendly for existing databases)"""
        with self.get_connection() as conn:
            for collection in COLLECTIONS:
                conn.execute(f"""
                    CREATE TABLE IF NOT EXISTS {collection} (
                        id TEXT PRIMARY KEY,
                        data TEXT NOT NULL,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)

            # Indexes for the native orderings and the trend calculation lookup
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_tools_category
                ON tools(json_extract(data, '$.category'))
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_mentions_tool_time
                ON mentions(json_extract(data, '$.toolId'), json_extract(data, '$.mentionedAt'))
            """)

            conn.commit()

    @contextmanager
    def get_connection(self):
        """Get database connection context manager"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row  # Enable dict-like access
        try:
            yield conn
        except sqlite3.Error as e:
            raise StoreError(f"SQLite error: {e}") from e
        finally:
            conn.close()

    @staticmethod
    def _where_clause(where: Optional[Sequence[Where]]) -> Tuple[str, list]:
        clauses = []
        params: list = []
        for field, op, value in where or ():
            column = f"json_extract(data, '$.{field}')"
            if op == "in":
                values = [encode_value(v) for v in value]
                if not values:
                    clauses.append("0")
                    continue
                placeholders = ", ".join("?" for _ in values)
                clauses.append(f"{column} IN ({placeholders})")
                params.extend(values)
            else:
                sql_op = "=" if op == "==" else op
                clauses.append(f"{column} {sql_op} ?")
                params.append(encode_value(value))
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        self._check_collection(collection)
        with self.get_connection() as conn:
            row = conn.execute(f"SELECT data FROM {collection} WHERE id = ?", (doc_id,)).fetchone()
            return decode_document(row["data"]) if row else None

    def get_many(self, collection: str, doc_ids: Sequence[str]) -> Dict[str, Dict[str, Any]]:
        self._check_collection(collection)
        ids = list(dict.fromkeys(doc_ids))
        if not ids:
            return {}
        placeholders = ", ".join("?" for _ in ids)
        with self.get_connection() as conn:
            rows = conn.execute(
                f"SELECT id, data FROM {collection} WHERE id IN ({placeholders})", ids
            ).fetchall()
            return {row["id"]: decode_document(row["data"]) for row in rows}

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._check_collection(collection)
        with self.get_connection() as conn:
            conn.execute(
                f"""
                INSERT INTO {collection} (id, data) VALUES (?, ?)
                ON CONFLICT(id) DO UPDATE SET data = excluded.data
                """,
                (doc_id, encode_document(data)),
            )
            conn.commit()

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> bool:
        self._check_collection(collection)
        with self.get_connection() as conn:
            row = conn.execute(f"SELECT data FROM {collection} WHERE id = ?", (doc_id,)).fetchone()
            if not row:
                return False
            document = decode_document(row["data"])
            document.update(fields)
            conn.execute(
                f"UPDATE {collection} SET data = ? WHERE id = ?",
                (encode_document(document), doc_id),
            )
            conn.commit()
            return True

    def delete(self, collection: str, doc_id: str) -> bool:
        self._check_collection(collection)
        with self.get_connection() as conn:
            cursor = conn.execute(f"DELETE FROM {collection} WHERE id = ?", (doc_id,))
            conn.commit()
            return cursor.rowcount > 0

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        self.set(collection, doc_id, data)
        return doc_id

    def query(
        self,
        collection: str,
        where: Optional[Sequence[Where]] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Tuple[str, Dict[str, Any]]]:
        self._check_collection(collection)
        self._check_where(where)

        sql_where, params = self._where_clause(where)
        sql = f"SELECT id, data FROM {collection}{sql_where}"

        if order_by:
            field, descending = order_by
            self._check_where([(field, "==", None)])
            direction = "DESC" if descending else "ASC"
            # rowid keeps insertion order among ties
            sql += f" ORDER BY json_extract(data, '$.{field}') {direction}, rowid ASC"
        else:
            sql += " ORDER BY rowid ASC"

        if limit is not None or offset:
            # SQLite needs a LIMIT before OFFSET; -1 means unbounded
            sql += " LIMIT ? OFFSET ?"
            params.append(max(0, int(limit)) if limit is not None else -1)
            params.append(max(0, int(offset)))

        with self.get_connection() as conn:
            rows = conn.execute(sql, params).fetchall()
            return [(row["id"], decode_document(row["data"])) for row in rows]

    def count(self, collection: str, where: Optional[Sequence[Where]] = None) -> int:
        self._check_collection(collection)
        self._check_where(where)
        sql_where, params = self._where_clause(where)
        with self.get_connection() as conn:
            row = conn.execute(f"SELECT COUNT(*) AS n FROM {collection}{sql_where}", params).fetchone()
            return int(row["n"])
