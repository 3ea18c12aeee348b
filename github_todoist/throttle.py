"""Fixed delay between outbound API calls."""

import time


class Throttle:
    """Sleeps a fixed delay before every call after the first.

    One instance is shared by the GitHub and Todoist clients so the delay
    applies across both services; ``calls`` doubles as the run's API call count.
    """

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.calls = 0

    def wait(self) -> None:
        if self.calls > 0 and self.delay > 0:
            time.sleep(self.delay)
        self.calls += 1
