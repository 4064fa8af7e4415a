"""
Cancellation Token Module.

One-way cancellation flag shared by reference between a scan task and
everything that may cancel it (user action, timeout timer).
"""

import threading


class CancelToken:
    """
    Cooperative cancellation flag.

    Once set the token stays set. Stages check it at their boundaries;
    an already-running stage is never interrupted.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Set the token. Idempotent."""
        self._event.set()

    def isCancelled(self) -> bool:
        """Check whether the token has been set."""
        return self._event.is_set()

    def wait(self, timeout: float = None) -> bool:
        """Block until the token is set or timeout elapses."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.isCancelled()})"
