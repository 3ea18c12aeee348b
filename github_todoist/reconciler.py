"""Reconciliation engine shared by both sync policies."""

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from .errors import SnapshotFetchError
from .github_client import GitHubClient
from .models import RemotePR, SyncStats, TrackedEntry
from .snapshot import SnapshotFetcher
from .state_manager import StateManager
from .todoist_client import TodoistClient


@dataclass
class RunContext:
    """Everything a policy touches during one run."""
    fetcher: SnapshotFetcher
    tasks: TodoistClient
    stats: SyncStats
    project_id: Optional[str] = None
    section_id: Optional[str] = None

    def create_task(self, content: str, description: str, priority: int) -> Optional[str]:
        task_id = self.tasks.create_task(
            content,
            description,
            priority,
            project_id=self.project_id,
            section_id=self.section_id,
            due_date=date.today().isoformat()
        )
        if task_id is None:
            self.stats.create_failures += 1
        else:
            self.stats.created += 1
        return task_id

    def close_task(self, task_id: str) -> bool:
        if self.tasks.close_task(task_id):
            self.stats.closed += 1
            return True
        self.stats.close_failures += 1
        return False


class ReconciliationPolicy:
    """Skeleton for one policy: fetch the snapshot, then reconcile.

    Subclasses set ``name`` and ``query`` and implement ``reconcile``. When
    the snapshot cannot be fetched nothing is reconciled, so tracked tasks are
    never closed on partial information.
    """

    name = ""
    query = ""

    def __init__(self) -> None:
        self.logger = logging.getLogger(type(self).__module__)

    def run(self, ctx: RunContext, entries: Dict[str, TrackedEntry]) -> None:
        self.logger.info(f"--- Syncing {self.name} ---")
        try:
            prs = ctx.fetcher.fetch_open_prs(self.query)
        except SnapshotFetchError as e:
            ctx.stats.aborted = True
            self.logger.error(f"Aborting {self.name} sync: {e}")
            return

        self.reconcile(ctx, prs, entries)
        self.logger.info(ctx.stats.summary())

    def reconcile(
        self,
        ctx: RunContext,
        prs: List[RemotePR],
        entries: Dict[str, TrackedEntry]
    ) -> None:
        raise NotImplementedError


class ReconciliationEngine:
    """Runs each policy in order against one state document, then saves it."""

    def __init__(
        self,
        github: GitHubClient,
        todoist: TodoistClient,
        state: StateManager,
        policies: List[ReconciliationPolicy],
        project_id: Optional[str] = None,
        section_id: Optional[str] = None
    ):
        self.github = github
        self.todoist = todoist
        self.state = state
        self.policies = policies
        self.project_id = project_id
        self.section_id = section_id
        self.logger = logging.getLogger(__name__)

    def run(self) -> Dict[str, SyncStats]:
        """Execute one full sync. Partial failures are logged, not raised."""
        start_time = time.monotonic()
        self.state.load()
        fetcher = SnapshotFetcher(self.github)
        results: Dict[str, SyncStats] = {}

        try:
            for policy in self.policies:
                ctx = RunContext(
                    fetcher=fetcher,
                    tasks=self.todoist,
                    stats=SyncStats(policy=policy.name),
                    project_id=self.project_id,
                    section_id=self.section_id
                )
                policy.run(ctx, self.state.entries(policy.name))
                results[policy.name] = ctx.stats
        finally:
            fetcher.clear()
            # Tasks created before a crash must still be recorded
            self._save_state()

        elapsed = time.monotonic() - start_time
        self.logger.info(
            f"Sync completed in {elapsed:.2f}s "
            f"({self.github.throttle.calls} API calls)"
        )
        return results

    def _save_state(self) -> None:
        try:
            self.state.save()
        except OSError as e:
            self.logger.error(f"Error saving state file {self.state.state_file}: {e}")
