"""
Politeness delay between consecutive geocoding requests.

Public search services (Nominatim in particular) ask clients to send at most
one request per second. The delay is enforced by the caller around every
lookup, and lookups are never issued concurrently.
"""

import time
from typing import Optional

from ..config.logger_module import log_debug, log_info


class PolitenessDelay:
    """
    Fixed minimum interval between consecutive calls (single-threaded).

    The first call goes out immediately; every later call waits until
    `delay_seconds` have passed since the previous call finished.
    """

    def __init__(self, delay_seconds: float = 1.0):
        """
        Initialize the delay.

        Args:
            delay_seconds: Minimum pause between the end of one lookup and the
                start of the next

        Raises:
            ValueError: If the delay is negative
        """
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {delay_seconds}")

        self.delay_seconds = delay_seconds
        self.last_call: Optional[float] = None
        self.total_waited = 0.0

        log_info(f"PolitenessDelay initialized: {delay_seconds}s between lookups")

    def get_wait_time(self) -> float:
        """
        Time still to wait before the next call may start, without blocking.

        Returns:
            Seconds to wait (0 if a call may go out now)
        """
        if self.last_call is None:
            return 0.0
        elapsed = time.time() - self.last_call
        return max(0.0, self.delay_seconds - elapsed)

    def wait(self) -> None:
        """Block until the next call is allowed."""
        wait_time = self.get_wait_time()
        if wait_time > 0:
            log_debug(f"Waiting {wait_time:.2f}s before next lookup")
            time.sleep(wait_time)
            self.total_waited += wait_time

    def mark(self) -> None:
        """Record that a call just finished."""
        self.last_call = time.time()
