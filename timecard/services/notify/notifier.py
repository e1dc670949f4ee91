"""
Fire-and-forget entry notifier.

CRITICAL: Notification must never gate or undo a write.
The push runs on a background worker; its outcome is only logged.
"""

from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Optional

from timecard.audit import ActivityLogger
from timecard.models.entry import Entry
from timecard.services.notify.interface import EntrySink


class EntryNotifier:
    """Submits each new entry to a sink without waiting for the result."""

    def __init__(
        self,
        sink: EntrySink,
        executor: Optional[Executor] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._sink = sink
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="timecard-notify",
        )
        self._activity = activity_logger or ActivityLogger()

    def notify(self, entry: Entry) -> Optional[Future]:
        """
        Queue a push. Returns the future for callers that want to wait
        (tests do), or None if the worker has been shut down.
        """
        try:
            return self._executor.submit(self._push, entry)
        except RuntimeError as e:
            self._activity.log_notification_failed(entry.id, str(e))
            return None

    def _push(self, entry: Entry) -> bool:
        try:
            self._sink.push(entry)
        except Exception as e:
            # Delivery is best-effort
            self._activity.log_notification_failed(entry.id, str(e))
            return False
        self._activity.log_notification_sent(entry.id)
        return True

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
