"""
Fire-and-forget notification dispatch.

The order lifecycle hands messages to the dispatcher and moves on. Each
message is sent on a background worker; the outcome is only visible on the
``notifications`` logger and in the channel's history, never to the caller
that triggered it.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_for_futures
from typing import Optional

from shared.channels import EmailChannel, NotificationResult

logger = logging.getLogger("notifications")


class NotificationDispatcher:
    """
    Sends notifications on a small worker pool.

    Example:
        dispatcher = NotificationDispatcher(EmailChannel())
        dispatcher.dispatch("shop@example.com", "Order Created", "Order 42 created")
        dispatcher.shutdown()
    """

    def __init__(self, channel: EmailChannel, max_workers: int = 2):
        self.channel = channel
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="notify",
        )
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    def dispatch(self, to: str, subject: str, body: str) -> Optional[Future]:
        """
        Queue a message for sending.

        Never raises. Returns the future for the send, or ``None`` if the
        dispatcher could not accept the message.
        """
        try:
            future = self._executor.submit(self._send, to, subject, body)
        except RuntimeError as e:
            logger.error(f"Notification to {to} dropped: {e}")
            return None

        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _send(self, to: str, subject: str, body: str) -> Optional[NotificationResult]:
        try:
            result = self.channel.send(to, subject, body)
        except Exception:
            logger.exception(f"Notification to {to} failed")
            return None
        if not result.success:
            logger.error(f"Notification to {to} not delivered: {result.error}")
        return result

    def _forget(self, future: Future):
        with self._lock:
            self._pending.discard(future)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for queued notifications to finish.

        Returns True if nothing is left pending.
        """
        with self._lock:
            pending = list(self._pending)
        _, not_done = wait_for_futures(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True):
        """Stop accepting messages; optionally wait for queued ones."""
        self._executor.shutdown(wait=wait)
        logger.debug("Notification dispatcher stopped")
