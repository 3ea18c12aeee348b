"""Follow-up tasks for reviews received on my own pull requests."""

from typing import Dict, List, Tuple

from .errors import DetailFetchError
from .models import RemotePR, Review, TrackedEntry
from .priority import REVIEW_RECEIVED, ReviewType, classify_review, priority_for
from .reconciler import ReconciliationPolicy, RunContext


def review_followup_task(pr: RemotePR, review: Review, review_type: ReviewType) -> Tuple[str, str]:
    content = f"Follow up on {review_type.value} of PR #{pr.number}"
    description = (
        f"{pr.url}\n"
        f"PR: {pr.title}\n"
        f"Repository: {pr.repo}\n"
        f"Review Type: {review_type.value}\n"
        f"Reviewer: @{review.author}"
    )
    return content, description


class ReviewReceivedPolicy(ReconciliationPolicy):
    """At most one open task per authored PR, always for its newest review.

    The task is closed when the PR is merged, when review is requested again
    (feedback addressed) or when the PR is no longer open.
    """

    name = REVIEW_RECEIVED
    query = "type:pr state:open author:@me"

    def complete_task_for_pr(
        self,
        ctx: RunContext,
        entries: Dict[str, TrackedEntry],
        pr_url: str,
        reason: str
    ) -> bool:
        """Close the PR's open task if any. Returns False only if a close failed."""
        entry = entries.get(pr_url)
        if entry is None or entry.task_id is None:
            return True

        if not ctx.close_task(entry.task_id):
            self.logger.error(f"Could not complete task for PR {pr_url} ({reason}), will retry next run")
            return False

        self.logger.info(f"Completed task for PR {pr_url}: {reason}")
        entry.task_id = None
        return True

    def process_pr(
        self,
        ctx: RunContext,
        pr: RemotePR,
        entries: Dict[str, TrackedEntry]
    ) -> None:
        if not pr.repo or pr.number is None:
            return

        try:
            detail = ctx.fetcher.fetch_pr_detail(pr.repo, pr.number)
        except DetailFetchError as e:
            self.logger.warning(f"Skipping {pr.url} this run: {e}")
            return

        if detail.merged:
            self.complete_task_for_pr(ctx, entries, pr.url, "merged")
            return

        if detail.has_pending_requests:
            self.complete_task_for_pr(ctx, entries, pr.url, "review requested again")
            return

        reviews = ctx.fetcher.fetch_reviews(pr.repo, pr.number)
        if not reviews:
            return

        # Reviews come back chronologically, so the last one is current
        latest = reviews[-1]
        entry = entries.setdefault(pr.url, TrackedEntry())
        if entry.last_review_id == latest.review_id:
            return

        if not self.complete_task_for_pr(ctx, entries, pr.url, "new review received"):
            # Keep a single open task per PR; retry the swap next run
            return

        review_type = classify_review(latest.state)
        content, description = review_followup_task(pr, latest, review_type)
        task_id = ctx.create_task(content, description, priority_for(self.name, review_type))
        if task_id is None:
            self.logger.error(f"Could not create follow-up task for PR {pr.url}, will retry next run")
            return

        entry.task_id = task_id
        entry.last_review_id = latest.review_id
        self.logger.info(f"Created follow-up task {task_id} ({review_type.value}) for PR: {pr.url}")

    def reconcile(
        self,
        ctx: RunContext,
        prs: List[RemotePR],
        entries: Dict[str, TrackedEntry]
    ) -> None:
        self.logger.info(f"Found {len(prs)} open PR(s) authored by you")

        for pr in prs:
            self.process_pr(ctx, pr, entries)

        current_urls = {pr.url for pr in prs}
        for pr_url in list(entries):
            if pr_url in current_urls:
                continue
            if self.complete_task_for_pr(ctx, entries, pr_url, "PR is no longer open"):
                del entries[pr_url]
                self.logger.info(f"Removed closed/merged PR from tracking: {pr_url}")
