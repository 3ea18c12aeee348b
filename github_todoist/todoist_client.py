"""Todoist REST API client."""

import logging
from typing import Any, Dict, List, Optional

import requests

from .errors import MissingConfigurationError
from .throttle import Throttle


class TodoistClient:
    """Creates, closes and lists Todoist objects. No business logic."""

    BASE_URL = "https://api.todoist.com/rest/v2"

    def __init__(
        self,
        token: str,
        throttle: Optional[Throttle] = None,
        timeout: float = 30.0
    ):
        if not token:
            raise MissingConfigurationError("TODOIST_TOKEN environment variable required")
        self.token = token
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.token}"
        })
        self.throttle = throttle or Throttle()
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any
    ) -> Optional[requests.Response]:
        """Make a single request. Returns None on transport errors."""
        self.throttle.wait()
        try:
            return self.session.request(
                method, f"{self.BASE_URL}{path}", timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            self.logger.warning(f"Request exception for {method} {path}: {e}")
            return None

    def create_task(
        self,
        content: str,
        description: str,
        priority: int,
        project_id: Optional[str] = None,
        section_id: Optional[str] = None,
        due_date: Optional[str] = None
    ) -> Optional[str]:
        """Create a task and return its id, or None on failure."""
        body: Dict[str, Any] = {
            "content": content,
            "description": description,
            "priority": priority
        }
        if due_date:
            body["due_date"] = due_date
        if project_id:
            body["project_id"] = project_id
        if section_id:
            body["section_id"] = section_id

        response = self._request("POST", "/tasks", json=body)
        if response is None:
            return None
        if not response.ok:
            self.logger.error(
                f"Error creating task ({response.status_code}): {response.text[:200]}"
            )
            return None

        try:
            task_id = response.json().get("id")
        except ValueError as e:
            self.logger.error(f"Invalid JSON creating task: {e}")
            return None
        return str(task_id) if task_id is not None else None

    def close_task(self, task_id: str) -> bool:
        """Close a task. 204 and other 2xx responses count as closed."""
        response = self._request("POST", f"/tasks/{task_id}/close")
        if response is None:
            return False
        if response.status_code == 204 or response.ok:
            return True

        self.logger.error(
            f"Error closing task {task_id} ({response.status_code}): "
            f"{response.text[:200]}"
        )
        return False

    def _get_list(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Optional[List[Dict[str, Any]]]:
        response = self._request("GET", path, params=params)
        if response is None:
            return None
        if not response.ok:
            self.logger.error(
                f"Error fetching {path} ({response.status_code}): {response.text[:200]}"
            )
            return None
        return response.json()

    def list_projects(self) -> Optional[List[Dict[str, Any]]]:
        """All projects visible to the token."""
        return self._get_list("/projects")

    def list_sections(self, project_id: str) -> Optional[List[Dict[str, Any]]]:
        """Sections of one project."""
        return self._get_list("/sections", {"project_id": project_id})
