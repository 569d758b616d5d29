#!/usr/bin/env python3
"""Script to populate curated repository details from GitHub."""

import asyncio
import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from goodfirst.config import Settings, load_repo_ids
from goodfirst.infrastructure.github_client import GitHubRESTClient
from goodfirst.infrastructure.store import create_store
from goodfirst.application.population_service import PopulationService
from goodfirst.application.export import write_repo_details

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


async def populate(settings: Settings, repo_ids):
    """Run the pipeline inside one GitHub client session."""
    store = create_store(settings.store_backend, settings.store_path)
    try:
        async with GitHubRESTClient(
            token=settings.github_token,
            user_agent=settings.user_agent,
            base_url=settings.api_url,
        ) as github_client:
            service = PopulationService(github_client, store=store, cache_window=settings.cache_window)
            return await service.run(repo_ids, use_cache=settings.use_cache)
    finally:
        if hasattr(store, "close"):
            store.close()


def main():
    """Populate curated repositories and export them grouped by language."""
    try:
        settings = Settings.from_env()
        if not settings.github_token:
            logger.warning("GITHUB_TOKEN not found. Using unauthenticated requests (limited rate).")

        repo_ids = load_repo_ids(settings.repos_file)
        logger.info(f"Loaded {len(repo_ids)} repository identifiers from {settings.repos_file}")

        records = asyncio.run(populate(settings, repo_ids))

        write_repo_details(settings.output_dir, records)
        logger.info(f"Population completed. {len(records)} curated repositories")
        return 0

    except Exception as e:
        logger.error(f"Population failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
