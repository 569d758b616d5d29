#!/usr/bin/env python3
"""Script to create the PostgreSQL table holding the curated snapshot."""

import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from goodfirst.config import Settings
from goodfirst.infrastructure.database import PostgresStore

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main():
    """Create the store_state table."""
    store = PostgresStore()
    try:
        if Settings.from_env().store_backend != "postgres":
            logger.warning("STORE_BACKEND is not 'postgres'; the populate script will not use this table")

        store.initialize_schema()
        state = store.read_store()
        logger.info(f"Store schema ready ({len(state.details)} repositories currently stored)")
        return 0
    except Exception as e:
        logger.error(f"Failed to set up store schema: {e}")
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
