"""Mirror GitHub pull request review work as Todoist tasks."""
