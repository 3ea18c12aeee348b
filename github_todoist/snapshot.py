"""Turns GitHub responses into the models the policies reconcile against."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from .errors import DetailFetchError, SnapshotFetchError
from .github_client import GitHubClient
from .models import PRDetail, RemotePR, Review


def extract_repo_full_name(repository_url: Optional[str]) -> Optional[str]:
    """Return "owner/name" from an API repository URL."""
    if not repository_url:
        return None
    parts = repository_url.rstrip("/").split("/")
    if len(parts) < 2:
        return None
    return "/".join(parts[-2:])


def parse_search_item(item: Dict[str, Any]) -> RemotePR:
    user = item.get("user") or {}
    return RemotePR(
        url=item["html_url"],
        number=item.get("number"),
        title=item.get("title", ""),
        author=user.get("login", ""),
        repo=extract_repo_full_name(item.get("repository_url"))
    )


class SnapshotFetcher:
    """Fetches one run's view of GitHub.

    Owns the per-run caches for PR detail and the authenticated login; the
    engine creates a fresh instance for each run and clears it afterwards.
    """

    def __init__(self, client: GitHubClient):
        self.client = client
        self.logger = logging.getLogger(__name__)
        self._detail_cache: Dict[Tuple[str, int], PRDetail] = {}
        self._user_login: Optional[str] = None
        self._login_resolved = False

    def fetch_open_prs(self, query: str) -> List[RemotePR]:
        """Run a search query. Raises SnapshotFetchError on failure."""
        items = self.client.search_issues(query)
        if items is None:
            raise SnapshotFetchError(f"search failed: {query}")

        prs: List[RemotePR] = []
        for item in items:
            if not item.get("html_url"):
                self.logger.warning(f"Skipping search result without html_url: {item.get('id')}")
                continue
            prs.append(parse_search_item(item))
        return prs

    def fetch_pr_detail(self, repo: str, pr_number: int) -> PRDetail:
        """Fetch PR detail, at most once per (repo, number) per run."""
        key = (repo, pr_number)
        if key in self._detail_cache:
            return self._detail_cache[key]

        data = self.client.get_pull_request(repo, pr_number)
        if data is None:
            raise DetailFetchError(f"could not fetch {repo}#{pr_number}")

        detail = PRDetail(
            merged=bool(data.get("merged")),
            requested_reviewers=[
                r.get("login") for r in data.get("requested_reviewers") or []
            ],
            requested_teams=[
                t.get("slug") or t.get("name")
                for t in data.get("requested_teams") or []
            ]
        )
        self._detail_cache[key] = detail
        return detail

    def fetch_reviews(self, repo: str, pr_number: int) -> List[Review]:
        """Reviews oldest first; empty when they cannot be fetched."""
        data = self.client.get_pr_reviews(repo, pr_number)
        if data is None:
            self.logger.warning(f"Could not fetch reviews for {repo}#{pr_number}, treating as none")
            return []

        return [
            Review(
                review_id=r["id"],
                author=(r.get("user") or {}).get("login", ""),
                state=r.get("state", "")
            )
            for r in data
        ]

    def authenticated_login(self) -> Optional[str]:
        """Login of the token owner, fetched once per run."""
        if not self._login_resolved:
            # A failed lookup is not retried within the run
            self._login_resolved = True
            user = self.client.get_authenticated_user()
            if user is None:
                self.logger.warning("Could not fetch authenticated user info")
            else:
                self._user_login = user.get("login")
        return self._user_login

    def clear(self) -> None:
        self._detail_cache.clear()
        self._user_login = None
        self._login_resolved = False
