"""Tasks for pull requests waiting on my review."""

from typing import Dict, List, Tuple

from .errors import DetailFetchError
from .models import RemotePR, TrackedEntry
from .priority import REVIEW_REQUESTS, ReviewType, priority_for
from .reconciler import ReconciliationPolicy, RunContext


def review_request_task(pr: RemotePR) -> Tuple[str, str]:
    content = f"Review PR #{pr.number}: {pr.title}"
    description = (
        f"{pr.url}\n"
        f"Repository: {pr.repo or 'Unknown repo'}\n"
        f"Author: @{pr.author}"
    )
    return content, description


class ReviewRequestPolicy(ReconciliationPolicy):
    """One task per PR where I am directly requested as a reviewer.

    The task is closed once the PR stops showing up in the review-requested
    search (request withdrawn, review submitted, or PR closed).
    """

    name = REVIEW_REQUESTS
    query = "type:pr state:open review-requested:@me"

    def is_direct_request(self, ctx: RunContext, pr: RemotePR) -> bool:
        """True when my login is in the PR's individual reviewer list.

        Team-only requests are excluded. When the detail or my login cannot
        be fetched the PR is included; a missing review task is worse than a
        spurious one.
        """
        if not pr.repo or pr.number is None:
            return False

        try:
            detail = ctx.fetcher.fetch_pr_detail(pr.repo, pr.number)
        except DetailFetchError as e:
            self.logger.warning(f"Could not verify direct request for {pr.url}, including it: {e}")
            return True

        login = ctx.fetcher.authenticated_login()
        if login is None:
            self.logger.warning(f"Unknown authenticated user, including {pr.url}")
            return True

        return login in detail.requested_reviewers

    def reconcile(
        self,
        ctx: RunContext,
        prs: List[RemotePR],
        entries: Dict[str, TrackedEntry]
    ) -> None:
        self.logger.info(
            f"Found {len(prs)} PR(s) requesting review (may include team requests)"
        )

        # Already tracked PRs were confirmed as direct requests on an earlier run
        existing_urls = {pr.url for pr in prs if pr.url in entries}
        new_prs = [pr for pr in prs if pr.url not in entries]
        self.logger.info(
            f"{len(new_prs)} new PR(s) to validate, {len(existing_urls)} already tracked"
        )

        direct_prs = [pr for pr in new_prs if self.is_direct_request(ctx, pr)]
        self.logger.info(f"{len(direct_prs)} new PR(s) where you are directly requested")

        priority = priority_for(self.name, ReviewType.REQUEST)
        for pr in direct_prs:
            content, description = review_request_task(pr)
            task_id = ctx.create_task(content, description, priority)
            if task_id is None:
                self.logger.error(f"Could not create task for PR {pr.url}, will retry next run")
                continue
            entries[pr.url] = TrackedEntry(task_id=task_id)
            self.logger.info(f"Created task {task_id} for PR: {pr.url}")

        current_urls = existing_urls | {pr.url for pr in direct_prs}

        for pr_url in list(entries):
            if pr_url in current_urls:
                continue
            entry = entries[pr_url]
            if entry.task_id is None:
                del entries[pr_url]
                continue
            if ctx.close_task(entry.task_id):
                del entries[pr_url]
                self.logger.info(f"Completed task for PR: {pr_url}")
            else:
                self.logger.error(f"Could not complete task for PR {pr_url}, will retry next run")
