"""GitHub API client with rate limit reporting and pagination."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from .errors import MissingConfigurationError
from .throttle import Throttle


class GitHubClient:
    """Thin wrapper over the GitHub REST endpoints the sync reads.

    Requests are made once with no retries. Every method returns ``None`` when
    the call (or any page of it) fails so callers can tell a failure apart
    from an empty result.
    """

    BASE_URL = "https://api.github.com"
    USER_AGENT = "github-todoist"

    def __init__(
        self,
        token: str,
        throttle: Optional[Throttle] = None,
        timeout: float = 30.0
    ):
        if not token:
            raise MissingConfigurationError("GITHUB_TOKEN environment variable required")
        self.token = token
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": self.USER_AGENT
        })
        self.throttle = throttle or Throttle()
        self.timeout = timeout
        self.rate_limit_remaining: Optional[int] = None
        self.logger = logging.getLogger(__name__)

    def _log_rate_limit(self, response: requests.Response) -> None:
        """Report rate limit usage from response headers."""
        limit_header = response.headers.get("X-RateLimit-Limit")
        if not limit_header:
            return

        try:
            limit = int(limit_header)
            remaining = int(response.headers.get("X-RateLimit-Remaining", limit))
            reset_at = datetime.fromtimestamp(
                int(response.headers.get("X-RateLimit-Reset", 0))
            ).strftime("%H:%M:%S")
        except (TypeError, ValueError, OverflowError, OSError) as e:
            self.logger.debug(f"Ignoring malformed rate limit headers: {e}")
            return
        self.rate_limit_remaining = remaining

        used_percent = (limit - remaining) / limit * 100 if limit else 0.0
        if used_percent > 50:
            self.logger.info(
                f"Rate limit: {remaining}/{limit} remaining "
                f"({used_percent:.1f}% used), resets at {reset_at}"
            )
        if remaining < 100:
            self.logger.warning(
                f"Only {remaining} API calls remaining until {reset_at}"
            )

    def _request(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Optional[requests.Response]:
        """Make a single GET request. Returns None on any failure."""
        if not url.startswith("http"):
            url = f"{self.BASE_URL}{url}"

        self.throttle.wait()
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.warning(f"Request exception for {url}: {e}")
            return None

        self._log_rate_limit(response)

        if 200 <= response.status_code < 300:
            return response

        self.logger.warning(
            f"Request failed ({response.status_code}): {url} - {response.text[:200]}"
        )
        return None

    def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Optional[Any]:
        response = self._request(url, params)
        if response is None:
            return None
        try:
            return response.json()
        except ValueError as e:
            self.logger.warning(f"Invalid JSON from {url}: {e}")
            return None

    def _get_all_pages(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        items_key: Optional[str] = None
    ) -> Optional[List[Dict[str, Any]]]:
        """Collect every page following the Link header.

        A failure on any page fails the whole call; a truncated list would
        look like items had disappeared.
        """
        params = dict(params or {})
        params.setdefault("per_page", 100)
        items: List[Dict[str, Any]] = []

        while url:
            response = self._request(url, params)
            if response is None:
                return None
            try:
                data = response.json()
            except ValueError as e:
                self.logger.warning(f"Invalid JSON from {url}: {e}")
                return None

            if items_key is not None:
                if data.get("incomplete_results"):
                    # Search timed out server side; the item list is partial
                    self.logger.warning(f"Incomplete search results from {url}")
                    return None
                data = data.get(items_key) or []
            items.extend(data)

            url = None
            link_header = response.headers.get("Link", "")
            for link in link_header.split(","):
                if 'rel="next"' in link:
                    url = link.split(";")[0].strip("<> ")
                    params = {}
                    break

        return items

    def search_issues(
        self,
        query: str,
        per_page: int = 100
    ) -> Optional[List[Dict[str, Any]]]:
        """Search issues and pull requests."""
        return self._get_all_pages(
            "/search/issues",
            {"q": query, "per_page": per_page},
            items_key="items"
        )

    def get_pull_request(
        self,
        repo: str,
        pr_number: int
    ) -> Optional[Dict[str, Any]]:
        """Get full detail for a PR."""
        return self._get_json(f"/repos/{repo}/pulls/{pr_number}")

    def get_pr_reviews(
        self,
        repo: str,
        pr_number: int
    ) -> Optional[List[Dict[str, Any]]]:
        """Get review submissions for a PR, oldest first."""
        return self._get_all_pages(f"/repos/{repo}/pulls/{pr_number}/reviews")

    def get_authenticated_user(self) -> Optional[Dict[str, Any]]:
        """Get the user the token belongs to."""
        return self._get_json("/user")
