"""Data models for the GitHub to Todoist sync."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class RemotePR:
    """Pull request as returned by the issue search endpoint."""
    url: str
    number: int
    title: str
    author: str
    repo: Optional[str]  # "owner/name", None when repository_url is missing


@dataclass
class PRDetail:
    """Fields from the pull request endpoint the policies care about."""
    merged: bool
    requested_reviewers: List[str] = field(default_factory=list)  # logins
    requested_teams: List[str] = field(default_factory=list)  # slugs

    @property
    def has_pending_requests(self) -> bool:
        return bool(self.requested_reviewers or self.requested_teams)


@dataclass
class Review:
    """Single review submission on a PR."""
    review_id: int
    author: str
    state: str  # "APPROVED" | "CHANGES_REQUESTED" | "COMMENTED" | ...


@dataclass
class TrackedEntry:
    """Persisted link between a PR URL and its Todoist task."""
    task_id: Optional[str] = None
    last_review_id: Optional[int] = None
    # Fields found on disk that this version does not know about
    extra: Dict[str, Any] = field(default_factory=dict)
    # Known keys present when read from disk; () means a bare task id, None means new
    stored_fields: Optional[Tuple[str, ...]] = field(default=None, compare=False)

    @property
    def has_open_task(self) -> bool:
        return self.task_id is not None


@dataclass
class SyncStats:
    """Counters for one policy run."""
    policy: str
    aborted: bool = False
    created: int = 0
    closed: int = 0
    create_failures: int = 0
    close_failures: int = 0

    def summary(self) -> str:
        if self.aborted:
            return f"{self.policy}: aborted"
        return (
            f"{self.policy}: created={self.created} closed={self.closed} "
            f"create_failures={self.create_failures} "
            f"close_failures={self.close_failures}"
        )
