"""Document store interface shared by the SQLite and PostgreSQL backends"""

import json
from abc import ABC, abstractmethod
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from schemas.domain import format_timestamp

# Collections persisted by the application, keyed by document id
COLLECTIONS = ("tools", "pricing", "trust_scores", "mentions", "analysis_jobs")

SUPPORTED_OPERATORS = ("==", ">=", "<=", ">", "<", "in")

Where = Tuple[str, str, Any]
OrderBy = Tuple[str, bool]  # (field, descending)


class StoreError(Exception):
    """Raised when the document store cannot complete an operation"""
    pass


def _json_default(value):
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_document(data: Dict[str, Any]) -> str:
    """Serialize a document, storing datetimes as ISO-8601 strings"""
    return json.dumps(data, default=_json_default)


def encode_value(value: Any) -> Any:
    """Normalize a predicate value the same way documents are stored"""
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, Enum):
        return value.value
    return value


def decode_document(raw: Any) -> Dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return raw
    return json.loads(raw)


class DocumentStore(ABC):
    """
    Minimal document database: collections of JSON documents keyed by id.

    Queries support equality/range/IN predicates on top-level fields, a single
    ordering and a limit, which is what the directory needs natively.
    """

    @staticmethod
    def _check_collection(collection: str):
        if collection not in COLLECTIONS:
            raise StoreError(f"Unknown collection: {collection}")

    @staticmethod
    def _check_where(where: Optional[Sequence[Where]]):
        for field, op, _ in where or ():
            if op not in SUPPORTED_OPERATORS:
                raise StoreError(f"Unsupported operator '{op}' on field '{field}'")
            if not field.replace("_", "").isalnum():
                raise StoreError(f"Invalid field name: {field}")

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the document or None"""

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or replace a document"""

    @abstractmethod
    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> bool:
        """Merge fields into an existing document; False when it does not exist"""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document; False when it did not exist"""

    @abstractmethod
    def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Insert a document under a generated id and return the id"""

    @abstractmethod
    def query(
        self,
        collection: str,
        where: Optional[Sequence[Where]] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Tuple[str, Dict[str, Any]]]:
        """Return (id, document) pairs matching every predicate, skipping the first `offset`"""

    def get_many(self, collection: str, doc_ids: Sequence[str]) -> Dict[str, Dict[str, Any]]:
        """Fetch several documents by id; missing ids are absent from the result"""
        found = {}
        for doc_id in doc_ids:
            document = self.get(collection, doc_id)
            if document is not None:
                found[doc_id] = document
        return found

    @abstractmethod
    def count(self, collection: str, where: Optional[Sequence[Where]] = None) -> int:
        """Count documents matching every predicate"""

    def close(self) -> None:
        """Release backend resources"""
        return None
