#!/usr/bin/env python3
"""Script to dump the curated repository snapshot to CSV and JSON."""

import logging
import sys
import os
import csv
import json
from datetime import datetime

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from goodfirst.config import Settings
from goodfirst.domain.repository import StoreState
from goodfirst.infrastructure.store import create_store

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

CSV_FIELDS = ["id", "owner", "name", "language", "stars", "url", "last_modified", "issues_count"]


def dump_to_csv(state: StoreState, output_file: str):
    """Dump one row per repository to CSV."""
    if not state.details:
        logger.warning("No data to dump")
        return

    with open(output_file, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for record in state.details:
            writer.writerow({
                "id": record.id,
                "owner": record.owner,
                "name": record.name,
                "language": record.language,
                "stars": record.stars,
                "url": record.url,
                "last_modified": record.last_modified,
                "issues_count": len(record.issues),
            })

    logger.info(f"Dumped {len(state.details)} repositories to {output_file}")


def dump_to_json(state: StoreState, output_file: str):
    """Dump the full snapshot to JSON."""
    if not state.details:
        logger.warning("No data to dump")
        return

    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(state.to_dict(), f, indent=2, ensure_ascii=False)

    logger.info(f"Dumped {len(state.details)} repositories to {output_file}")


def main():
    """Dump the store to CSV and JSON."""
    try:
        settings = Settings.from_env()
        store = create_store(settings.store_backend, settings.store_path)
        state = store.read_store()
        if hasattr(store, "close"):
            store.close()

        os.makedirs(settings.output_dir, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        csv_file = os.path.join(settings.output_dir, f"repositories_{timestamp}.csv")
        json_file = os.path.join(settings.output_dir, f"repositories_{timestamp}.json")

        dump_to_csv(state, csv_file)
        dump_to_json(state, json_file)

        logger.info(f"Store dump completed. Files: {csv_file}, {json_file}")
        return 0
    except Exception as e:
        logger.error(f"Store dump failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
