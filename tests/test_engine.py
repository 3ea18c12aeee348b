"""End-to-end runs of the engine against fake clients."""

from __future__ import annotations

import json
import logging
from unittest.mock import patch

from conftest import AUTHORED_QUERY, REQUESTS_QUERY, pr_detail, pr_item, pr_url, review
from github_todoist.reconciler import ReconciliationEngine
from github_todoist.review_received import ReviewReceivedPolicy
from github_todoist.review_requests import ReviewRequestPolicy
from github_todoist.state_manager import StateManager
from github_todoist.throttle import Throttle


def _busy_snapshot(github):
    github.searches[REQUESTS_QUERY] = [pr_item(1, repo="octo/web"), pr_item(2, repo="octo/web")]
    github.details[("octo/web", 1)] = pr_detail(reviewers=["me"])
    github.details[("octo/web", 2)] = pr_detail(teams=["frontend"])
    github.searches[AUTHORED_QUERY] = [pr_item(3), pr_item(4), pr_item(5)]
    github.reviews[("octo/app", 3)] = [review(10, "APPROVED")]
    github.reviews[("octo/app", 4)] = [review(11, "COMMENTED"), review(12, "CHANGES_REQUESTED")]
    github.details[("octo/app", 5)] = pr_detail(merged=True)


class TestIdempotence:
    def test_second_run_makes_no_task_calls(self, github, todoist, make_engine):
        _busy_snapshot(github)
        engine = make_engine()

        engine.run()
        assert len(todoist.created) == 3

        todoist.reset()
        results = engine.run()

        assert todoist.created == []
        assert todoist.closed == []
        assert all(s.created == 0 and s.closed == 0 for s in results.values())


class TestFirstRun:
    def test_empty_state_file_starts_fresh(self, github, todoist, state, make_engine):
        state.state_file.write_text("")
        github.searches[REQUESTS_QUERY] = [pr_item(1)]
        github.details[("octo/app", 1)] = pr_detail(reviewers=["me"])

        make_engine().run()

        saved = json.loads(state.state_file.read_text())
        assert saved["review_requests"] == {pr_url(1): "task-1"}
        assert saved["review_received"] == {}

    def test_corrupt_state_file_starts_fresh(self, github, todoist, state, make_engine, caplog):
        state.state_file.write_text("{not json")
        github.searches[REQUESTS_QUERY] = [pr_item(1)]
        github.details[("octo/app", 1)] = pr_detail(reviewers=["me"])

        with caplog.at_level(logging.WARNING):
            make_engine().run()

        assert "Failed to parse state JSON" in caplog.text
        assert len(todoist.created) == 1

    def test_undecodable_state_file_starts_fresh(self, github, todoist, state, make_engine):
        state.state_file.write_bytes(b"\xff\xfe\x00garbage")
        github.searches[REQUESTS_QUERY] = [pr_item(1)]
        github.details[("octo/app", 1)] = pr_detail(reviewers=["me"])

        make_engine(policies=[ReviewRequestPolicy()]).run()

        saved = json.loads(state.state_file.read_text())
        assert saved == {"review_requests": {pr_url(1): "task-1"}}


class TestSharedFetching:
    def test_detail_fetched_once_across_policies(self, github, todoist, make_engine):
        # My own PR where I'm also asked to review
        github.searches[REQUESTS_QUERY] = [pr_item(1)]
        github.searches[AUTHORED_QUERY] = [pr_item(1)]
        github.details[("octo/app", 1)] = pr_detail(reviewers=["me"])

        make_engine().run()

        assert github.count("detail") == 1
        assert github.count("user") == 1

    def test_policies_run_in_order(self, github, make_engine):
        make_engine().run()

        searches = [call[1] for call in github.calls if call[0] == "search"]
        assert searches == [REQUESTS_QUERY, AUTHORED_QUERY]

    def test_first_policy_failure_does_not_stop_second(self, github, todoist, make_engine):
        github.searches[REQUESTS_QUERY] = None
        github.searches[AUTHORED_QUERY] = [pr_item(3)]
        github.reviews[("octo/app", 3)] = [review(10)]

        results = make_engine().run()

        assert results["review_requests"].aborted
        assert results["review_received"].created == 1


class TestStateSaveFailure:
    def test_unwritable_state_is_logged(self, github, todoist, tmp_path, caplog):
        state = StateManager(str(tmp_path))  # a directory cannot be written as a file
        github.searches[REQUESTS_QUERY] = [pr_item(1)]
        github.details[("octo/app", 1)] = pr_detail(reviewers=["me"])
        engine = ReconciliationEngine(github, todoist, state, [ReviewRequestPolicy(), ReviewReceivedPolicy()])

        with caplog.at_level(logging.ERROR):
            results = engine.run()

        assert results["review_requests"].created == 1
        assert "Error saving state file" in caplog.text


class TestThrottle:
    def test_sleeps_before_every_call_after_first(self):
        throttle = Throttle(0.5)
        with patch("github_todoist.throttle.time.sleep") as sleep:
            for _ in range(3):
                throttle.wait()

        assert throttle.calls == 3
        assert sleep.call_count == 2
        sleep.assert_called_with(0.5)

    def test_zero_delay_never_sleeps(self):
        throttle = Throttle(0)
        with patch("github_todoist.throttle.time.sleep") as sleep:
            throttle.wait()
            throttle.wait()

        sleep.assert_not_called()
