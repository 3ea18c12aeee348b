#!/usr/bin/env python3
"""List Todoist projects and sections to find IDs for the .env file.

Usage:
    python list_todoist_info.py [all|projects|sections <project_id>]
"""

import argparse
import logging
import os
import sys
from typing import Any, Dict

from dotenv import load_dotenv

from github_todoist.todoist_client import TodoistClient

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

RULE = "=" * 80


def describe_project(project: Dict[str, Any]) -> str:
    labels = ""
    if project.get("is_inbox_project"):
        labels += " (Inbox)"
    if project.get("is_favorite"):
        labels += " *"
    lines = [f"Project: {project.get('name')}{labels}", f"  ID: {project.get('id')}"]
    if project.get("color"):
        lines.append(f"  Color: {project['color']}")
    return "\n".join(lines)


def list_all(client: TodoistClient) -> int:
    projects = client.list_projects()
    if projects is None:
        return 1

    print(RULE)
    print("TODOIST PROJECTS AND SECTIONS")
    print(RULE)
    if not projects:
        print("No projects found.")

    for project in projects:
        print(describe_project(project))
        sections = client.list_sections(project["id"]) or []
        if not sections:
            print("  └─ (No sections)")
        for i, section in enumerate(sections):
            is_last = i == len(sections) - 1
            prefix = "  └─" if is_last else "  ├─"
            print(f"{prefix} Section: {section.get('name')}")
            print(f"  {' ' if is_last else '│'}  ID: {section.get('id')}")
        print()

    print(RULE)
    print("To use these IDs, add them to your .env file:")
    print("  TODOIST_PROJECT_ID=<project_id>")
    print("  TODOIST_SECTION_ID=<section_id>  # Optional")
    print(RULE)
    return 0


def list_projects(client: TodoistClient) -> int:
    projects = client.list_projects()
    if projects is None:
        return 1

    print(RULE)
    print("TODOIST PROJECTS")
    print(RULE)
    if not projects:
        print("No projects found.")
    for project in projects:
        print(describe_project(project))
        print()

    print(RULE)
    print("To see sections for a project, run:")
    print("  python list_todoist_info.py sections <project_id>")
    print(RULE)
    return 0


def list_sections(client: TodoistClient, project_id: str) -> int:
    sections = client.list_sections(project_id)
    if sections is None:
        return 1

    print(RULE)
    print(f"SECTIONS FOR PROJECT ID: {project_id}")
    print(RULE)
    if not sections:
        print("No sections found for this project.")
    for section in sections:
        print(f"Section: {section.get('name')}")
        print(f"  ID: {section.get('id')}")
        print(f"  Order: {section.get('order')}")
        print()

    print(RULE)
    print("To use this section, add to your .env file:")
    print(f"  TODOIST_PROJECT_ID={project_id}")
    print("  TODOIST_SECTION_ID=<section_id>")
    print(RULE)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="List Todoist projects and sections")
    parser.add_argument("command", nargs="?", default="all", choices=["all", "projects", "sections"])
    parser.add_argument("project_id", nargs="?", help="Project ID (for 'sections')")
    args = parser.parse_args()

    load_dotenv()
    token = os.environ.get("TODOIST_TOKEN", "").strip()
    if not token:
        logger.error("TODOIST_TOKEN environment variable required")
        return 1

    client = TodoistClient(token)
    if args.command == "projects":
        return list_projects(client)
    if args.command == "sections":
        if not args.project_id:
            parser.error("sections requires a project_id")
        return list_sections(client, args.project_id)
    return list_all(client)


if __name__ == "__main__":
    sys.exit(main())
