"""
PostgreSQL checkpoint store - Implements CheckpointStore protocol.

This module provides the PostgreSQL implementation of the domain's
checkpoint port using psycopg3 with raw SQL. Each checkpoint is one row
keyed by a store key, holding the manager record as JSONB, so several
independent managers can share one database.

The document is validated by the record codec on every load; a row that
does not match the layout raises RecordFormatError rather than being
silently dropped.
"""

import logging
from pathlib import Path

from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from namereg.domain.records import ManagerRecord

from .records import decode_manager, encode_manager

logger = logging.getLogger(__name__)

DEFAULT_KEY = "default"


class PostgresCheckpointStore:
    """
    Implements CheckpointStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries.
    """

    def __init__(self, pool: ConnectionPool, key: str = DEFAULT_KEY) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
            key: Checkpoint key, one row per manager
        """
        self._pool = pool
        self._key = key

    def load(self) -> ManagerRecord | None:
        """Fetch the checkpoint row for this key, or None if absent."""
        sql = "SELECT document FROM registration_checkpoints WHERE key = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (self._key,))
            row = cursor.fetchone()

        if row is None:
            logger.info("No checkpoint stored under key %s", self._key)
            return None
        # psycopg3 decodes JSONB columns to Python objects.
        return decode_manager(row[0])

    def save(self, record: ManagerRecord) -> None:
        """Upsert the checkpoint row for this key."""
        sql = """
            INSERT INTO registration_checkpoints (key, document, updated_at)
            VALUES (%s, %s, NOW())
            ON CONFLICT (key) DO UPDATE
            SET document = EXCLUDED.document,
                updated_at = NOW()
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (self._key, Jsonb(encode_manager(record))))
            conn.commit()
        logger.info("Checkpoint %s saved (%d registration(s))", self._key, len(record.elements))


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/namereg/adapters/storage/postgres.py -> migrations/
    migrations_dir = Path(__file__).parents[4] / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
