"""Main entry point for the GitHub to Todoist sync."""

import argparse
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .config import load_settings
from .errors import ConfigurationError
from .github_client import GitHubClient
from .priority import REVIEW_RECEIVED, REVIEW_REQUESTS
from .reconciler import ReconciliationEngine, ReconciliationPolicy
from .review_received import ReviewReceivedPolicy
from .review_requests import ReviewRequestPolicy
from .state_manager import StateManager
from .throttle import Throttle
from .todoist_client import TodoistClient

POLICIES = {
    REVIEW_REQUESTS: ReviewRequestPolicy,
    REVIEW_RECEIVED: ReviewReceivedPolicy,
}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def build_policies(only: Optional[str] = None) -> List[ReconciliationPolicy]:
    """Policies in run order: review requests first, then reviews received."""
    names = [only] if only else [REVIEW_REQUESTS, REVIEW_RECEIVED]
    return [POLICIES[name]() for name in names]


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Sync GitHub PR review requests and reviews to Todoist tasks"
    )
    parser.add_argument(
        "--state-file",
        default=None,
        help="State file (default: $XDG_CONFIG_HOME/github-todoist/state.json)"
    )
    parser.add_argument(
        "--only",
        choices=sorted(POLICIES),
        default=None,
        help="Run a single sync instead of both"
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Load environment variables from this file if it exists"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    # Variables already set in the environment take precedence
    load_dotenv(args.env_file)

    try:
        settings = load_settings(args.state_file)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        logger.error("Create a .env file with GITHUB_TOKEN and TODOIST_TOKEN")
        return 1

    throttle = Throttle(settings.throttle_delay)
    github = GitHubClient(
        settings.github_token, throttle=throttle, timeout=settings.request_timeout
    )
    todoist = TodoistClient(
        settings.todoist_token, throttle=throttle, timeout=settings.request_timeout
    )
    engine = ReconciliationEngine(
        github,
        todoist,
        StateManager(str(settings.state_file)),
        build_policies(args.only),
        project_id=settings.todoist_project_id,
        section_id=settings.todoist_section_id
    )

    logger.info("Starting GitHub-Todoist sync")
    engine.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
