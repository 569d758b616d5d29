"""GitHub REST API client built on aiohttp."""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from goodfirst.domain.repository import MAX_CURATED_ISSUES

logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """Raised when GitHub answers with a non-2xx status or an undecodable body."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class RateLimitExceeded(GitHubAPIError):
    """Raised when GitHub API rate limit is exceeded."""
    pass


class GitHubRESTClient:
    """Async client for the GitHub REST endpoints used by the curation pipeline."""

    API_URL = "https://api.github.com"
    GOOD_FIRST_ISSUE_LABEL = "good first issue"
    ISSUES_PAGE_SIZE = MAX_CURATED_ISSUES
    MAX_RETRIES = 3
    RETRY_DELAY_SECONDS = 1
    REQUEST_TIMEOUT = 30

    def __init__(
        self,
        token: Optional[str] = None,
        user_agent: str = "goodfirst",
        base_url: Optional[str] = None,
        timeout: float = REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
    ):
        """
        Initialize GitHub REST client.

        Args:
            token: GitHub personal access token. Anonymous requests are made when None.
            user_agent: Client-identifying User-Agent header value
            base_url: API root, defaults to https://api.github.com
            timeout: Total timeout per request in seconds
            max_retries: Attempts per request for connection errors and timeouts
        """
        self.token = token
        self.base_url = (base_url or self.API_URL).rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": user_agent,
        }

        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"

        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self._session = aiohttp.ClientSession(
            headers=self.headers,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        )
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def close(self):
        """Close the underlying HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("GitHubRESTClient must be used as an async context manager")
        return self._session

    async def fetch_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a URL and decode its JSON body.

        Args:
            url: Absolute URL or a path relative to the API root
            params: Query parameters

        Returns:
            Decoded JSON value

        Raises:
            RateLimitExceeded: If the rate limit is exhausted
            GitHubAPIError: On non-2xx status or a non-JSON body
            aiohttp.ClientError: If the connection keeps failing after retries
        """
        if not url.startswith(("http://", "https://")):
            url = f"{self.base_url}/{url.lstrip('/')}"

        session = self._get_session()
        for attempt in range(self.max_retries):
            try:
                async with session.get(url, params=params) as response:
                    if response.status in (403, 429) and response.headers.get("X-RateLimit-Remaining") == "0":
                        raise RateLimitExceeded(
                            f"Rate limit exceeded (resets at {response.headers.get('X-RateLimit-Reset')})",
                            status=response.status,
                        )

                    if response.status >= 400:
                        body = await response.text()
                        raise GitHubAPIError(f"HTTP {response.status} for {url}: {body[:200]}", status=response.status)

                    try:
                        return await response.json(content_type=None)
                    except ValueError as e:
                        raise GitHubAPIError(f"Invalid JSON from {url}: {e}", status=response.status) from e

            except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
                if attempt < self.max_retries - 1:
                    delay = self.RETRY_DELAY_SECONDS * (2 ** attempt)  # Exponential backoff
                    logger.warning(f"Request to {url} failed (attempt {attempt + 1}/{self.max_retries}): {e!r}. Retrying in {delay}s...")
                    await asyncio.sleep(delay)
                else:
                    raise

        raise GitHubAPIError(f"Max retries exceeded for {url}")

    async def get_repository(self, owner: str, name: str) -> Any:
        """Fetch repository metadata."""
        return await self.fetch_json(f"/repos/{owner}/{name}")

    async def get_good_first_issues(self, owner: str, name: str) -> Any:
        """Fetch the newest open issues labelled "good first issue"."""
        params = {
            "labels": self.GOOD_FIRST_ISSUE_LABEL,
            "state": "open",
            "per_page": self.ISSUES_PAGE_SIZE,
            "sort": "created",
            "direction": "desc",
        }
        return await self.fetch_json(f"/repos/{owner}/{name}/issues", params=params)
