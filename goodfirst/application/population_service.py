"""Application service that enriches, filters and stores curated repositories."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Optional

from goodfirst.application.cache_gate import DEFAULT_CACHE_WINDOW, should_refresh
from goodfirst.domain.repository import (
    RawIssue,
    RawMetadata,
    RepoRecord,
    StoreState,
    parse_repo_identifier,
)

logger = logging.getLogger(__name__)


class PopulationService:
    """Service for populating curated repository details from GitHub."""

    MIN_GOOD_FIRST_ISSUES = 3

    def __init__(
        self,
        github_client,
        store=None,
        cache_window: timedelta = DEFAULT_CACHE_WINDOW,
        logger: logging.Logger = logger,
    ):
        """
        Initialize population service.

        Args:
            github_client: Object with async ``get_repository`` and
                ``get_good_first_issues`` methods (see GitHubRESTClient)
            store: Object with ``read_store`` and ``write_store``; optional
            cache_window: Age below which a stored snapshot is reused
            logger: Sink for all diagnostics emitted by the pipeline
        """
        self.github_client = github_client
        self.store = store
        self.cache_window = cache_window
        self.logger = logger

    def _settle(self, full_name: str, what: str, result: Any) -> Any:
        if isinstance(result, BaseException):
            self.logger.warning(f"[{full_name}]: Failed to fetch {what}: {result!r}")
            return None
        return result

    async def fetch_one(self, owner: str, name: str) -> Optional[RepoRecord]:
        """
        Fetch, filter and assemble a single repository.

        Returns:
            The built record, or None if the repository was rejected or failed
        """
        full_name = f"{owner}/{name}"
        try:
            self.logger.info(f"[{full_name}]: Getting info...")

            metadata_result, issues_result = await asyncio.gather(
                self.github_client.get_repository(owner, name),
                self.github_client.get_good_first_issues(owner, name),
                return_exceptions=True,
            )
            metadata = RawMetadata.from_payload(self._settle(full_name, "metadata", metadata_result))
            issues = RawIssue.list_from_payload(self._settle(full_name, "issues", issues_result))

            # Filters
            if metadata is not None and metadata.archived:
                self.logger.info(f"[{full_name}]: Repository is archived.")
                return None

            if len(issues or []) < self.MIN_GOOD_FIRST_ISSUES:
                self.logger.info(f"[{full_name}]: Does not have enough good first issues.")
                return None

            if metadata is None or not metadata.has_identity:
                self.logger.info(f"[{full_name}]: Repository metadata is unavailable.")
                return None

            return RepoRecord.build(owner, name, metadata, issues)

        except Exception as e:
            self.logger.error(f"[{full_name}]: {e}")
            return None

    async def _fetch_identifier(self, repo_id: str) -> Optional[RepoRecord]:
        try:
            owner, name = parse_repo_identifier(repo_id)
        except ValueError as e:
            self.logger.error(f"[{repo_id}]: {e}")
            return None
        return await self.fetch_one(owner, name)

    async def populate(self, repo_ids: Iterable[str]) -> List[RepoRecord]:
        """
        Fetch every repository concurrently and keep the accepted ones.

        Args:
            repo_ids: Identifiers in owner/name form

        Returns:
            Accepted records, in the order of the input identifiers
        """
        repo_ids = list(repo_ids)
        self.logger.info(f"Populating {len(repo_ids)} repositories")

        results = await asyncio.gather(
            *(self._fetch_identifier(repo_id) for repo_id in repo_ids),
            return_exceptions=True,
        )

        records = []
        for repo_id, result in zip(repo_ids, results):
            if isinstance(result, RepoRecord):
                records.append(result)
            elif isinstance(result, BaseException):
                self.logger.error(f"[{repo_id}]: {result!r}")

        self.logger.info(f"Kept {len(records)}/{len(repo_ids)} repositories")
        return records

    async def run(self, repo_ids: Iterable[str], use_cache: bool = True) -> List[RepoRecord]:
        """
        Return curated records, reusing the stored snapshot while it is fresh.

        Store read and write errors propagate to the caller.

        Args:
            repo_ids: Identifiers in owner/name form
            use_cache: Consult the cache gate before refreshing

        Returns:
            Stored records on a cache hit, freshly populated records otherwise
        """
        if self.store is not None and use_cache:
            state = self.store.read_store()
            if not should_refresh(state, window=self.cache_window, logger=self.logger):
                return list(state.details)

        records = await self.populate(repo_ids)

        if self.store is not None:
            self.store.write_store(
                StoreState(last_modified=datetime.now(timezone.utc), details=tuple(records))
            )

        return records
