"""Single-slot runner for background sync passes."""

from __future__ import annotations

import dataclasses
import logging
import threading
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from rom_sync._types import Clock

log = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class JobStatus:
    """Snapshot of a job slot.

    :param is_running: Whether a pass is in progress.
    :param last_sync_time: Completion time of the latest finished pass.
    :param last_error: Error message of the latest finished pass, if it failed.
    """

    is_running: bool
    last_sync_time: datetime | None = None
    last_error: str | None = None


class SyncJob:
    """Single-slot runner for a blocking sync callable.

    :param run: The pass to execute, e.g. ``Syncer.sync``.
    :param clock: Source of "now" for the recorded completion time.
    """

    def __init__(self, run: Callable[[], object], *, clock: Clock | None = None) -> None:
        self._run = run
        self._clock = clock or (lambda: datetime.now(tz=timezone.utc))
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._running = False
        self._last_sync_time: datetime | None = None
        self._last_error: BaseException | None = None

    def start(self) -> bool:
        """Start a pass in a background thread.

        :returns: ``False`` if a pass is already running.
        """
        with self._lock:
            if self._running:
                return False
            self._running = True
            self._thread = threading.Thread(target=self._execute, name="rom-sync", daemon=True)
            self._thread.start()
        return True

    def _execute(self) -> None:
        error: BaseException | None = None
        try:
            self._run()
        except Exception as exc:
            error = exc
            log.error("Sync operation failed: %s", exc)
        else:
            log.info("Sync operation completed successfully")
        finally:
            with self._lock:
                self._running = False
                self._last_sync_time = self._clock()
                self._last_error = error

    def status(self) -> JobStatus:
        with self._lock:
            return JobStatus(
                is_running=self._running,
                last_sync_time=self._last_sync_time,
                last_error=str(self._last_error) if self._last_error is not None else None,
            )

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the current pass finishes.

        :returns: ``True`` if no pass is running afterwards.
        """
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        return not self.status().is_running
