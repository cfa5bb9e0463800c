"""PostgreSQL document store for production"""

import json
import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence, Tuple

import psycopg2
import psycopg2.extras

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


class PostgresDocumentStore(DocumentStore):
    """PostgreSQL-backed document store: one JSONB table per collection"""

    def __init__(self, database_url: Optional[str], connect_timeout: int = 5):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgreSQL")
        self.database_url = database_url
        self.connect_timeout = connect_timeout

        self._ensure_tables_exist()

    def _ensure_tables_exist(self):
        """Ensure all collection tables exist (migration-friendly)"""
        with self.get_connection() as conn:
            with conn.cursor() as cursor:
                for collection in COLLECTIONS:
                    cursor.execute(f"""
                        CREATE TABLE IF NOT EXISTS {collection} (
                            seq BIGSERIAL,
                            id TEXT PRIMARY KEY,
                            data JSONB NOT NULL,
                            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                        )
                    """)

                cursor.execute("""
                    CREATE INDEX IF NOT EXISTS idx_tools_category
                    ON tools ((data->>'category'))
                """)

                cursor.execute("""
                    CREATE INDEX IF NOT EXISTS idx_mentions_tool_time
                    ON mentions ((data->>'toolId'), (data->>'mentionedAt'))
                """)

                conn.commit()

    @contextmanager
    def get_connection(self):
        """Get database connection context manager with RealDictCursor"""
        try:
            conn = psycopg2.connect(
                self.database_url,
                cursor_factory=psycopg2.extras.RealDictCursor,
                connect_timeout=self.connect_timeout,
            )
        except psycopg2.Error as e:
            raise StoreError(f"PostgreSQL connection failed: {e}") from e
        try:
            yield conn
        except psycopg2.Error as e:
            conn.rollback()
            raise StoreError(f"PostgreSQL error: {e}") from e
        finally:
            conn.close()

    @staticmethod
    def _where_clause(where: Optional[Sequence[Where]]) -> Tuple[str, list]:
        # jsonb comparison keeps numbers numeric and ISO timestamps lexicographic
        clauses = []
        params: list = []
        for field, op, value in where or ():
            column = f"data->'{field}'"
            if op == "in":
                values = [json.dumps(encode_value(v)) for v in value]
                if not values:
                    clauses.append("FALSE")
                    continue
                placeholders = ", ".join("%s::jsonb" for _ in values)
                clauses.append(f"{column} IN ({placeholders})")
                params.extend(values)
            else:
                sql_op = "=" if op == "==" else op
                clauses.append(f"{column} {sql_op} %s::jsonb")
                params.append(json.dumps(encode_value(value)))
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        self._check_collection(collection)
        with self.get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(f"SELECT data FROM {collection} WHERE id = %s", (doc_id,))
                row = cursor.fetchone()
                return decode_document(row["data"]) if row else None

    def get_many(self, collection: str, doc_ids: Sequence[str]) -> Dict[str, Dict[str, Any]]:
        self._check_collection(collection)
        ids = list(dict.fromkeys(doc_ids))
        if not ids:
            return {}
        with self.get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(f"SELECT id, data FROM {collection} WHERE id = ANY(%s)", (ids,))
                return {row["id"]: decode_document(row["data"]) for row in cursor.fetchall()}

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._check_collection(collection)
        with self.get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(
                    f"""
                    INSERT INTO {collection} (id, data) VALUES (%s, %s::jsonb)
                    ON CONFLICT (id) DO UPDATE SET data = EXCLUDED.data
                    """,
                    (doc_id, encode_document(data)),
                )
                conn.commit()

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> bool:
        self._check_collection(collection)
        with self.get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(
                    f"UPDATE {collection} SET data = data || %s::jsonb WHERE id = %s",
                    (encode_document(fields), doc_id),
                )
                conn.commit()
                return cursor.rowcount > 0

    def delete(self, collection: str, doc_id: str) -> bool:
        self._check_collection(collection)
        with self.get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(f"DELETE FROM {collection} WHERE id = %s", (doc_id,))
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
            direction = "DESC NULLS LAST" if descending else "ASC NULLS LAST"
            sql += f" ORDER BY data->'{field}' {direction}, seq ASC"
        else:
            sql += " ORDER BY seq ASC"

        if limit is not None:
            sql += " LIMIT %s"
            params.append(max(0, int(limit)))
        if offset:
            sql += " OFFSET %s"
            params.append(max(0, int(offset)))

        with self.get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(sql, params)
                return [(row["id"], decode_document(row["data"])) for row in cursor.fetchall()]

    def count(self, collection: str, where: Optional[Sequence[Where]] = None) -> int:
        self._check_collection(collection)
        self._check_where(where)
        sql_where, params = self._where_clause(where)
        with self.get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(f"SELECT COUNT(*) AS n FROM {collection}{sql_where}", params)
                return int(cursor.fetchone()["n"])
