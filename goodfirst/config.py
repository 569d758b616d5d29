"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional

STORE_BACKENDS = ("json", "postgres")


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Configuration threaded into the client, store and service at start-up."""

    github_token: Optional[str] = None
    user_agent: str = "goodfirst"
    api_url: str = "https://api.github.com"
    store_backend: str = "json"
    store_path: str = os.path.join("data", "repo_details.json")
    cache_window_hours: float = 8.0
    use_cache: bool = True
    repos_file: str = "repos.txt"
    output_dir: str = "artifacts"

    @property
    def cache_window(self) -> timedelta:
        return timedelta(hours=self.cache_window_hours)

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            ValueError: If a numeric or enumerated variable is invalid
        """
        env = os.environ if environ is None else environ

        store_backend = env.get("STORE_BACKEND", cls.store_backend).strip().lower()
        if store_backend not in STORE_BACKENDS:
            raise ValueError(f"STORE_BACKEND must be one of {STORE_BACKENDS}, got {store_backend!r}")

        cache_window_hours = float(env.get("CACHE_WINDOW_HOURS", cls.cache_window_hours))
        if cache_window_hours < 0:
            raise ValueError("CACHE_WINDOW_HOURS must not be negative")

        return cls(
            github_token=env.get("GITHUB_TOKEN") or None,
            user_agent=env.get("GITHUB_USER_AGENT", cls.user_agent),
            api_url=env.get("GITHUB_API_URL", cls.api_url),
            store_backend=store_backend,
            store_path=env.get("STORE_PATH", cls.store_path),
            cache_window_hours=cache_window_hours,
            use_cache=_env_bool(env.get("USE_CACHE", "true")),
            repos_file=env.get("REPOS_FILE", cls.repos_file),
            output_dir=env.get("OUTPUT_DIR", cls.output_dir),
        )


def load_repo_ids(path: str) -> List[str]:
    """Read one owner/name identifier per line, skipping blanks and # comments."""
    repo_ids = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.split("#", 1)[0].strip()
            if line:
                repo_ids.append(line)
    return repo_ids
