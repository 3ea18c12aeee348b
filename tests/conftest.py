"""In-memory stand-ins for the GitHub and Todoist clients."""

from __future__ import annotations

import pytest

from github_todoist.reconciler import ReconciliationEngine
from github_todoist.review_received import ReviewReceivedPolicy
from github_todoist.review_requests import ReviewRequestPolicy
from github_todoist.state_manager import StateManager
from github_todoist.throttle import Throttle

REQUESTS_QUERY = ReviewRequestPolicy.query
AUTHORED_QUERY = ReviewReceivedPolicy.query


def pr_url(number, repo="octo/app"):
    return f"https://github.com/{repo}/pull/{number}"


def pr_item(number, repo="octo/app", title=None, author="alice"):
    return {
        "id": 1000 + number,
        "number": number,
        "title": title or f"Change {number}",
        "html_url": pr_url(number, repo),
        "repository_url": f"https://api.github.com/repos/{repo}",
        "user": {"login": author},
    }


def pr_detail(merged=False, reviewers=(), teams=()):
    return {
        "merged": merged,
        "requested_reviewers": [{"login": login} for login in reviewers],
        "requested_teams": [{"slug": slug} for slug in teams],
    }


def review(review_id, state="COMMENTED", author="bob"):
    return {"id": review_id, "state": state, "user": {"login": author}}


class FakeGitHub:
    """Serves canned responses; ``None`` means the call failed."""

    def __init__(self, login="me"):
        self.searches = {}
        self.details = {}
        self.reviews = {}
        self.user = {"login": login} if login else None
        self.throttle = Throttle()
        self.calls = []

    def search_issues(self, query):
        self.calls.append(("search", query))
        return self.searches.get(query, [])

    def get_pull_request(self, repo, number):
        self.calls.append(("detail", repo, number))
        return self.details.get((repo, number), pr_detail())

    def get_pr_reviews(self, repo, number):
        self.calls.append(("reviews", repo, number))
        return self.reviews.get((repo, number), [])

    def get_authenticated_user(self):
        self.calls.append(("user",))
        return self.user

    def count(self, kind):
        return sum(1 for call in self.calls if call[0] == kind)


class FakeTodoist:
    """Records task operations and hands out sequential ids."""

    def __init__(self):
        self.created = []
        self.closed = []
        self.fail_create = False
        self.fail_close = set()
        self._next_id = 1

    def create_task(self, content, description, priority, project_id=None, section_id=None, due_date=None):
        if self.fail_create:
            return None
        task_id = f"task-{self._next_id}"
        self._next_id += 1
        self.created.append(
            {
                "id": task_id,
                "content": content,
                "description": description,
                "priority": priority,
                "project_id": project_id,
                "section_id": section_id,
                "due_date": due_date,
            }
        )
        return task_id

    def close_task(self, task_id):
        if task_id in self.fail_close:
            return False
        self.closed.append(task_id)
        return True

    def reset(self):
        self.created = []
        self.closed = []


@pytest.fixture
def github():
    return FakeGitHub()


@pytest.fixture
def todoist():
    return FakeTodoist()


@pytest.fixture
def state(tmp_path):
    return StateManager(str(tmp_path / "state.json"))


@pytest.fixture
def make_engine(github, todoist, state):
    def _make(policies=None, **kwargs):
        if policies is None:
            policies = [ReviewRequestPolicy(), ReviewReceivedPolicy()]
        return ReconciliationEngine(github, todoist, state, policies, **kwargs)

    return _make
