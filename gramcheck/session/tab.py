"""
Tab

Everything one browsing context needs, built in one place: its stores,
the session registry, the auth coordinator, role storage, access guard
and activity tracker.
"""

from gramcheck.session.activity import ActivityTracker
from gramcheck.session.constants import (
    DEFAULT_ACTIVITY_INTERVAL_MS,
    DEFAULT_REDIRECT_DELAY_MS,
    DEFAULT_SESSION_MAX_AGE_MS,
)
from gramcheck.session.coordinator import AuthCoordinator
from gramcheck.session.guard import AccessGuard
from gramcheck.session.navigation import Navigator
from gramcheck.session.registry import SessionRegistry
from gramcheck.session.role_storage import RoleStorage
from gramcheck.session.storage import MemoryStore


class Tab:
    def __init__(self, persistent, ephemeral=None, path='/', clock=None,
                 session_max_age_ms=DEFAULT_SESSION_MAX_AGE_MS,
                 activity_interval_ms=DEFAULT_ACTIVITY_INTERVAL_MS,
                 redirect_delay_ms=DEFAULT_REDIRECT_DELAY_MS):
        self.persistent = persistent
        self.ephemeral = ephemeral if ephemeral is not None else MemoryStore()
        self.session_max_age_ms = session_max_age_ms
        self.navigator = Navigator(path)
        self.registry = SessionRegistry(self.persistent, self.ephemeral, clock=clock)
        self.auth = AuthCoordinator(self.registry, self.navigator)
        self.role_storage = RoleStorage(self.persistent, self.navigator, registry=self.registry)
        self.guard = AccessGuard(self.auth, delay_ms=redirect_delay_ms)
        self.activity = ActivityTracker(self.auth, interval_ms=activity_interval_ms)

    @classmethod
    def from_config(cls, config, persistent, ephemeral=None, path='/', clock=None):
        return cls(
            persistent, ephemeral, path=path, clock=clock,
            session_max_age_ms=config.get('SESSION_MAX_AGE_MS', DEFAULT_SESSION_MAX_AGE_MS),
            activity_interval_ms=config.get('ACTIVITY_UPDATE_INTERVAL_MS', DEFAULT_ACTIVITY_INTERVAL_MS),
            redirect_delay_ms=config.get('ACCESS_DENIED_REDIRECT_DELAY_MS', DEFAULT_REDIRECT_DELAY_MS),
        )

    @property
    def tab_id(self):
        return self.registry.get_tab_id()

    def page_load(self, start_timers=True):
        """Run the on-load sequence. Returns the page access verdict."""
        self.registry.cleanup_old_sessions(self.session_max_age_ms)
        if start_timers:
            self.activity.start()
        self.auth.setup_logout_sync()
        return self.auth.validate_page_access()

    def close(self):
        self.activity.stop()
        self.auth.teardown_logout_sync()
