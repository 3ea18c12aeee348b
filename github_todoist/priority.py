"""Review classification and task priority table."""

from enum import Enum
from typing import Dict, Tuple

REVIEW_REQUESTS = "review_requests"
REVIEW_RECEIVED = "review_received"

APPROVED_STATE = "APPROVED"


class ReviewType(str, Enum):
    REQUEST = "review request"
    APPROVAL = "approval"
    REVIEW = "review"


# Todoist priorities: 1 (normal) .. 4 (urgent)
PRIORITY_TABLE: Dict[Tuple[str, ReviewType], int] = {
    (REVIEW_REQUESTS, ReviewType.REQUEST): 4,
    (REVIEW_RECEIVED, ReviewType.REVIEW): 4,
    (REVIEW_RECEIVED, ReviewType.APPROVAL): 3,
}

DEFAULT_PRIORITY = 1


def classify_review(state: str) -> ReviewType:
    """Map a GitHub review state to the type shown on the task."""
    if state == APPROVED_STATE:
        return ReviewType.APPROVAL
    return ReviewType.REVIEW


def priority_for(policy: str, review_type: ReviewType) -> int:
    return PRIORITY_TABLE.get((policy, review_type), DEFAULT_PRIORITY)
