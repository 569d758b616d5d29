"""JSON file storage for the curated repository snapshot."""

import json
import logging
import os

from goodfirst.domain.repository import StoreState

logger = logging.getLogger(__name__)


class JsonFileStore:
    """Stores the whole StoreState as a single JSON document."""

    def __init__(self, path: str):
        self.path = path

    def read_store(self) -> StoreState:
        """
        Load the persisted snapshot.

        A missing or empty file reads as an empty, infinitely stale state.

        Raises:
            json.JSONDecodeError: If the file exists but is not valid JSON
        """
        if not os.path.exists(self.path):
            logger.info(f"No store at {self.path}, starting empty")
            return StoreState.empty()

        with open(self.path, "r", encoding="utf-8") as f:
            content = f.read()

        if not content.strip():
            return StoreState.empty()

        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError(f"Store at {self.path} is not a JSON object")

        return StoreState.from_dict(data)

    def write_store(self, state: StoreState):
        """Replace the persisted snapshot wholesale."""
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(state.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.info(f"Wrote {len(state.details)} repositories to {self.path}")


def create_store(backend: str, path: str):
    """
    Build the store for a configured backend.

    Args:
        backend: "json" or "postgres"
        path: JSON file path, ignored for postgres
    """
    if backend == "postgres":
        from goodfirst.infrastructure.database import PostgresStore

        return PostgresStore()
    if backend == "json":
        return JsonFileStore(path)
    raise ValueError(f"Unknown store backend: {backend!r}")
