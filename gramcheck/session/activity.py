"""
Activity Tracking

Keeps ``lastActive`` fresh for a tab: user interactions update it at most
once per interval, and a repeating timer updates it while the tab is
visible and logged in.
"""

import logging
import threading

from gramcheck.session.constants import DEFAULT_ACTIVITY_INTERVAL_MS

logger = logging.getLogger(__name__)


class IntervalTimer:
    """Run ``function`` every ``interval_ms`` on a daemon thread until cancelled."""

    def __init__(self, interval_ms, function):
        self.interval_ms = interval_ms
        self.function = function
        self._timer = None
        self._lock = threading.Lock()
        self._cancelled = False

    def _schedule(self):
        self._timer = threading.Timer(self.interval_ms / 1000.0, self._run)
        self._timer.daemon = True
        self._timer.start()

    def _run(self):
        try:
            self.function()
        except Exception:
            logger.exception('Interval task failed')
        with self._lock:
            if not self._cancelled:
                self._schedule()

    def start(self):
        with self._lock:
            if self._timer is not None:
                return
            self._cancelled = False
            self._schedule()

    def cancel(self):
        with self._lock:
            self._cancelled = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    @property
    def running(self):
        return self._timer is not None and not self._cancelled


class ActivityTracker:
    def __init__(self, coordinator, interval_ms=DEFAULT_ACTIVITY_INTERVAL_MS, is_visible=None):
        self.coordinator = coordinator
        self.interval_ms = interval_ms
        self.is_visible = is_visible or (lambda: True)
        self.last_update = coordinator.registry.clock()
        self.timer = IntervalTimer(interval_ms, self.tick)

    def record_interaction(self):
        """Called on pointer, keyboard, scroll or touch input."""
        now = self.coordinator.registry.clock()
        if now - self.last_update <= self.interval_ms:
            return False
        self.last_update = now
        return self.coordinator.update_activity()

    def tick(self):
        if self.is_visible() and self.coordinator.is_logged_in():
            self.last_update = self.coordinator.registry.clock()
            return self.coordinator.update_activity()
        return False

    def start(self):
        self.timer.start()

    def stop(self):
        self.timer.cancel()
