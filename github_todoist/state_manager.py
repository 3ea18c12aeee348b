"""Manages persistent state between runs."""

import json
import logging
from pathlib import Path
from typing import Any, Dict

from .models import TrackedEntry
from .priority import REVIEW_RECEIVED, REVIEW_REQUESTS

# Policies whose entries are stored as a bare task id
COMPACT_POLICIES = {REVIEW_REQUESTS}
KNOWN_POLICIES = {REVIEW_REQUESTS, REVIEW_RECEIVED}

_KNOWN_FIELDS = ("task_id", "last_review_id")


def entry_from_json(value: Any) -> TrackedEntry:
    if isinstance(value, dict):
        return TrackedEntry(
            task_id=value.get("task_id"),
            last_review_id=value.get("last_review_id"),
            extra={k: v for k, v in value.items() if k not in _KNOWN_FIELDS},
            stored_fields=tuple(k for k in _KNOWN_FIELDS if k in value)
        )
    return TrackedEntry(task_id=value, stored_fields=())


def entry_to_json(entry: TrackedEntry, compact: bool = False) -> Any:
    """Write an entry back in the shape it was read in.

    Entries created this run use the policy default: a bare task id for
    compact policies, an object with both fields otherwise.
    """
    if entry.stored_fields is not None:
        compact = entry.stored_fields == ()
    if compact and entry.last_review_id is None and not entry.extra:
        return entry.task_id

    data = dict(entry.extra)
    for key in _KNOWN_FIELDS:
        value = getattr(entry, key)
        if entry.stored_fields is None or key in entry.stored_fields or value is not None:
            data[key] = value
    return data


class StateManager:
    """Reads and writes the policy -> PR URL -> TrackedEntry document.

    The file is read once at the start of a run and rewritten in full at the
    end. A missing or unreadable file yields an empty document.
    """

    def __init__(self, state_file: str):
        self.state_file = Path(state_file)
        self.policies: Dict[str, Dict[str, TrackedEntry]] = {}
        # Unrecognised top-level keys, kept verbatim
        self.passthrough: Dict[str, Any] = {}
        self.logger = logging.getLogger(__name__)

    def load(self) -> None:
        """Load state from file."""
        self.policies = {}
        self.passthrough = {}

        if not self.state_file.exists():
            self.logger.info("No existing state found, starting fresh")
            return

        try:
            json_str = self.state_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning(f"Could not read state file {self.state_file}: {e}")
            return
        self._load_from_json(json_str)

    def _load_from_json(self, json_str: str) -> None:
        """Parse JSON state string."""
        if not json_str.strip():
            self.logger.info("State file is empty, starting fresh")
            return

        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            self.logger.warning(f"Failed to parse state JSON, starting fresh: {e}")
            return

        if not isinstance(data, dict):
            self.logger.warning("State file is not a JSON object, starting fresh")
            return

        for policy, entries in data.items():
            if policy not in KNOWN_POLICIES or not isinstance(entries, dict):
                self.passthrough[policy] = entries
                continue
            parsed: Dict[str, TrackedEntry] = {}
            for pr_url, value in entries.items():
                if isinstance(value, (list, bool, float)):
                    self.logger.warning(f"Dropping malformed {policy} entry for {pr_url}")
                    continue
                parsed[pr_url] = entry_from_json(value)
            self.policies[policy] = parsed

        total = sum(len(entries) for entries in self.policies.values())
        self.logger.info(f"Loaded {total} tracked PRs across {len(self.policies)} policies")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.passthrough)
        for policy, entries in self.policies.items():
            compact = policy in COMPACT_POLICIES
            data[policy] = {
                pr_url: entry_to_json(entry, compact)
                for pr_url, entry in entries.items()
            }
        return data

    def save(self) -> None:
        """Save state to file. Raises OSError if it cannot be written."""
        self.state_file.parent.mkdir(parents=True, exist_ok=True)

        with open(self.state_file, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

        total = sum(len(entries) for entries in self.policies.values())
        self.logger.info(f"Saved {total} tracked PRs to {self.state_file}")

    def entries(self, policy: str) -> Dict[str, TrackedEntry]:
        """Live mapping of PR URL -> entry for a policy."""
        return self.policies.setdefault(policy, {})
