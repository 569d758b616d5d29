"""Domain entities for curated GitHub repositories."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union


# Upper bound on curated issues per repository, also the issues page size
MAX_CURATED_ISSUES = 10


class InvalidRepoIdentifier(ValueError):
    """Raised when a repository identifier is not of the form owner/name."""
    pass


def parse_repo_identifier(value: str) -> Tuple[str, str]:
    """
    Split an ``owner/name`` identifier.

    Args:
        value: Repository identifier, e.g. "pallets/flask"

    Returns:
        Tuple of (owner, name)

    Raises:
        InvalidRepoIdentifier: If there is not exactly one separator or a part is empty
    """
    if not isinstance(value, str) or value.count("/") != 1:
        raise InvalidRepoIdentifier(f"Invalid repository identifier: {value!r}")

    owner, name = (part.strip() for part in value.split("/"))
    if not owner or not name:
        raise InvalidRepoIdentifier(f"Invalid repository identifier: {value!r}")
    return owner, name


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Leniently parse a stored timestamp into an aware UTC datetime.

    Accepts datetimes, ISO-8601 strings (with or without a trailing "Z") and
    epoch seconds. Returns None for anything else instead of raising.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_iso8601(value: Union[str, datetime, None]) -> str:
    """
    Format a timestamp as UTC ISO-8601 with millisecond precision.

    The output looks like ``2024-03-01T12:00:00.000Z``.

    Raises:
        ValueError: If the value is absent or cannot be parsed
    """
    if not isinstance(value, (str, datetime)):
        raise ValueError(f"Invalid timestamp: {value!r}")

    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValueError(f"Invalid timestamp: {value!r}")

    return parsed.strftime("%Y-%m-%dT%H:%M:%S.") + f"{parsed.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class RawMetadata:
    """Repository fields consumed from ``GET /repos/{owner}/{name}``."""

    archived: bool = False
    description: Optional[str] = None
    language: Optional[str] = None
    html_url: Optional[str] = None
    stargazers_count: Optional[int] = None
    pushed_at: Optional[str] = None
    id: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["RawMetadata"]:
        """Narrow an untyped JSON value, or return None if it is not an object."""
        if not isinstance(payload, dict):
            return None

        return cls(
            archived=payload.get("archived") is True,
            description=payload.get("description"),
            language=payload.get("language"),
            html_url=payload.get("html_url"),
            stargazers_count=payload.get("stargazers_count"),
            pushed_at=payload.get("pushed_at"),
            id=payload.get("id"),
        )

    @property
    def has_identity(self) -> bool:
        """True when the upstream numeric id is present."""
        return isinstance(self.id, int) and not isinstance(self.id, bool)


@dataclass(frozen=True)
class RawIssue:
    """Issue fields consumed from ``GET /repos/{owner}/{name}/issues``."""

    title: Optional[str] = None
    html_url: Optional[str] = None
    number: Optional[int] = None
    comments: Optional[int] = None
    created_at: Optional[str] = None

    @classmethod
    def list_from_payload(cls, payload: Any) -> Optional[List["RawIssue"]]:
        """Narrow an untyped JSON array, or return None if it is not a list."""
        if not isinstance(payload, list):
            return None

        return [
            cls(
                title=item.get("title"),
                html_url=item.get("html_url"),
                number=item.get("number"),
                comments=item.get("comments"),
                created_at=item.get("created_at"),
            )
            for item in payload
            if isinstance(item, dict)
        ]


@dataclass(frozen=True)
class CuratedIssue:
    """Normalized good-first-issue entry."""

    title: Optional[str]
    url: Optional[str]
    number: Optional[int]
    comments_count: Optional[int]
    created_at: str

    @classmethod
    def from_raw(cls, issue: RawIssue) -> "CuratedIssue":
        return cls(
            title=issue.title,
            url=issue.html_url,
            number=issue.number,
            comments_count=issue.comments,
            created_at=to_iso8601(issue.created_at),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "number": self.number,
            "comments_count": self.comments_count,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CuratedIssue":
        return cls(
            title=data.get("title"),
            url=data.get("url"),
            number=data.get("number"),
            comments_count=data.get("comments_count"),
            created_at=data.get("created_at"),
        )


@dataclass(frozen=True)
class RepoRecord:
    """Immutable curated repository entity, identified by ``id``."""

    id: str
    name: str
    owner: str
    description: Optional[str]
    language: Optional[str]
    url: Optional[str]
    stars: Optional[int]
    last_modified: str
    issues: Tuple[CuratedIssue, ...] = ()

    @property
    def full_name(self) -> str:
        """Return the full repository name in owner/name format."""
        return f"{self.owner}/{self.name}"

    @classmethod
    def build(cls, owner: str, name: str, metadata: RawMetadata, issues: List[RawIssue]) -> "RepoRecord":
        """
        Assemble a record from narrowed upstream data.

        Raises:
            ValueError: If the metadata has no numeric id or a timestamp cannot be converted
        """
        if not metadata.has_identity:
            raise ValueError(f"Missing repository id for {owner}/{name}")

        return cls(
            id=str(metadata.id),
            name=name,
            owner=owner,
            description=metadata.description,
            language=metadata.language,
            url=metadata.html_url,
            stars=metadata.stargazers_count,
            last_modified=to_iso8601(metadata.pushed_at),
            issues=tuple(CuratedIssue.from_raw(issue) for issue in issues[:MAX_CURATED_ISSUES]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "owner": self.owner,
            "description": self.description,
            "language": self.language,
            "url": self.url,
            "stars": self.stars,
            "last_modified": self.last_modified,
            "issues": [issue.to_dict() for issue in self.issues],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepoRecord":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            owner=data["owner"],
            description=data.get("description"),
            language=data.get("language"),
            url=data.get("url"),
            stars=data.get("stars"),
            last_modified=data.get("last_modified"),
            issues=tuple(CuratedIssue.from_dict(issue) for issue in data.get("issues") or []),
        )


@dataclass(frozen=True)
class StoreState:
    """Full persisted snapshot: curated records plus the last refresh time."""

    last_modified: Optional[datetime] = None
    details: Tuple[RepoRecord, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> "StoreState":
        return cls(last_modified=None, details=())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "last_modified": to_iso8601(self.last_modified) if self.last_modified else None,
            "details": [record.to_dict() for record in self.details],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoreState":
        return cls(
            last_modified=parse_timestamp(data.get("last_modified")),
            details=tuple(RepoRecord.from_dict(item) for item in data.get("details") or []),
        )
