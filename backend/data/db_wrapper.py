"""Document store factory - PostgreSQL in production, SQLite in dev"""

import logging

from data.document_store import DocumentStore

logger = logging.getLogger(__name__)


def create_store(settings) -> DocumentStore:
    """Build the document store selected by configuration; the caller owns the instance"""
    if settings.USE_POSTGRES:
        from data.postgres_db import PostgresDocumentStore
        logger.info("🗄️  [STORE] Using PostgreSQL document store")
        return PostgresDocumentStore(settings.DATABASE_URL)

    from data.db import SQLiteDocumentStore
    logger.info(f"🗄️  [STORE] Using SQLite document store at {settings.SQLITE_PATH}")
    return SQLiteDocumentStore(settings.SQLITE_PATH)
