"""PostgreSQL storage for the curated repository snapshot."""

import logging
import os
from typing import Optional

from psycopg2.extras import Json
from psycopg2.pool import ThreadedConnectionPool

from goodfirst.domain.repository import RepoRecord, StoreState, parse_timestamp

logger = logging.getLogger(__name__)


class PostgresStore:
    """Stores the StoreState as a single row in PostgreSQL."""

    SNAPSHOT_ID = 1

    def __init__(self, connection_string: Optional[str] = None):
        """
        Initialize PostgreSQL store.

        Args:
            connection_string: PostgreSQL connection string. If None, uses env vars.
        """
        if connection_string is None:
            db_host = os.getenv("POSTGRES_HOST", "localhost")
            db_port = os.getenv("POSTGRES_PORT", "5432")
            db_name = os.getenv("POSTGRES_DB", "goodfirst")
            db_user = os.getenv("POSTGRES_USER", "postgres")
            db_password = os.getenv("POSTGRES_PASSWORD", "postgres")

            connection_string = (
                f"host={db_host} port={db_port} dbname={db_name} "
                f"user={db_user} password={db_password}"
            )

        self.connection_string = connection_string
        self.pool: Optional[ThreadedConnectionPool] = None

    def connect(self):
        """Initialize connection pool."""
        try:
            self.pool = ThreadedConnectionPool(1, 2, self.connection_string)
            logger.info("Database connection pool created")
        except Exception as e:
            logger.error(f"Error creating connection pool: {e}")
            raise

    def close(self):
        """Close connection pool."""
        if self.pool:
            self.pool.closeall()
            self.pool = None
            logger.info("Database connection pool closed")

    def _get_connection(self):
        if not self.pool:
            self.connect()
        return self.pool.getconn()

    def _return_connection(self, conn):
        if self.pool:
            self.pool.putconn(conn)

    def initialize_schema(self):
        """Create the snapshot table if it doesn't exist."""
        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    CREATE TABLE IF NOT EXISTS store_state (
                        id SMALLINT PRIMARY KEY CHECK (id = 1),
                        last_modified TIMESTAMPTZ,
                        details JSONB NOT NULL DEFAULT '[]'::jsonb
                    );
                """)
                conn.commit()
                logger.info("Database schema initialized")
        except Exception as e:
            conn.rollback()
            logger.error(f"Error initializing schema: {e}")
            raise
        finally:
            self._return_connection(conn)

    def read_store(self) -> StoreState:
        """Load the snapshot row, or an empty state when none was written yet."""
        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT last_modified, details FROM store_state WHERE id = %s",
                    (self.SNAPSHOT_ID,),
                )
                row = cur.fetchone()
        except Exception as e:
            logger.error(f"Error reading store: {e}")
            raise
        finally:
            self._return_connection(conn)

        if row is None:
            return StoreState.empty()

        last_modified, details = row
        return StoreState(
            last_modified=parse_timestamp(last_modified),
            details=tuple(RepoRecord.from_dict(item) for item in details or []),
        )

    def write_store(self, state: StoreState):
        """Replace the snapshot row wholesale."""
        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO store_state (id, last_modified, details)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (id)
                    DO UPDATE SET
                        last_modified = EXCLUDED.last_modified,
                        details = EXCLUDED.details
                    """,
                    (
                        self.SNAPSHOT_ID,
                        state.last_modified,
                        Json([record.to_dict() for record in state.details]),
                    ),
                )
                conn.commit()
                logger.info(f"Stored {len(state.details)} repositories")
        except Exception as e:
            conn.rollback()
            logger.error(f"Error writing store: {e}")
            raise
        finally:
            self._return_connection(conn)
