"""
Auth Coordinator

Login, logout and capability checks for one tab, on top of the shared
session registry. Logouts are broadcast through ``logout_sync`` so other
tabs of the same user can drop their own sessions.
"""

import json
import logging

from gramcheck.session import signals
from gramcheck.session.constants import (
    LOGOUT_SYNC_ALL_KEY,
    LOGOUT_SYNC_KEY,
    REASON_ADMIN_REQUIRED,
    REASON_LOGIN_REQUIRED,
    REASON_LOGOUT_SYNC,
    WAS_LOGGED_IN_KEY,
)
from gramcheck.session.errors import InvalidInput, NoActiveSession
from gramcheck.session.navigation import Navigator, login_url
from gramcheck.session.normalize import REQUIRED_ATTRIBUTES
from gramcheck.session.registry import SessionRecord, stored_timestamp

logger = logging.getLogger(__name__)


class AuthCoordinator:
    def __init__(self, registry, navigator=None):
        self.registry = registry
        self.navigator = navigator or Navigator()
        self._unsubscribe_sync = None

    @property
    def persistent(self):
        return self.registry.persistent

    @property
    def ephemeral(self):
        return self.registry.ephemeral

    @property
    def tab_id(self):
        return self.registry.get_tab_id()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_current_user(self):
        return self.registry.get_current_user()

    def is_logged_in(self):
        return self.get_current_user() is not None

    def is_admin(self):
        user = self.get_current_user()
        return user is not None and user.is_admin

    def can_access_grammar_checker(self):
        return self.is_logged_in()

    def can_access_admin_panel(self):
        return self.is_admin()

    # ------------------------------------------------------------------
    # Login / logout
    # ------------------------------------------------------------------

    def login(self, user_data):
        """Store ``user_data`` as this tab's session and return the record.

        Raises ``InvalidInput`` when the role (or the user id / username the
        stored record needs) is missing.
        """
        if not isinstance(user_data, dict) or not user_data.get('userRole'):
            raise InvalidInput('Invalid user data: userRole is required')
        missing = [name for name in REQUIRED_ATTRIBUTES if user_data.get(name) in (None, '')]
        if missing:
            raise InvalidInput('Invalid user data: missing ' + ', '.join(missing))

        tab_id = self.tab_id
        now = self.registry.clock()
        stored = dict(user_data, loginTime=now, lastActive=now)
        stored.pop('tabId', None)
        self.registry.save_session(stored)
        self.ephemeral.set(WAS_LOGGED_IN_KEY, 'true')

        record = SessionRecord.from_dict(stored, tab_id=tab_id)
        logger.info('%s logged in on tab %s: %s', record.user_role, tab_id, record.username)
        signals.auth_login.send(self, user=record, tab_id=tab_id)
        return record

    def logout(self):
        """Log this tab out and tell the other tabs. Returns ``False`` if idle."""
        user = self.get_current_user()
        if user is None:
            logger.warning('No user to logout on tab %s', self.tab_id)
            return False

        tab_id = user.tab_id
        self.registry.remove_session(tab_id)
        self.ephemeral.remove(WAS_LOGGED_IN_KEY)
        logger.info('%s logged out from tab %s: %s', user.user_role, tab_id, user.username)

        payload = {'userId': user.user_id, 'sessionId': tab_id, 'time': self.registry.clock()}
        self.persistent.set(LOGOUT_SYNC_KEY, json.dumps(payload), origin=tab_id)

        signals.auth_logout.send(self, user=user, tab_id=tab_id)
        return True

    def require_logout(self):
        """Like ``logout`` but raises ``NoActiveSession`` when idle."""
        if not self.logout():
            raise NoActiveSession('No active session on this tab')

    def logout_all(self):
        tab_id = self.tab_id
        self.registry.clear()
        self.ephemeral.remove(WAS_LOGGED_IN_KEY)
        self.broadcast_logout_all()
        logger.info('All sessions logged out from tab %s', tab_id)
        signals.auth_logout_all.send(self, tab_id=tab_id)
        return True

    def broadcast_logout_all(self):
        self.persistent.set(LOGOUT_SYNC_ALL_KEY, str(self.registry.clock()), origin=self.tab_id)

    def local_logout(self):
        """Drop this tab's session without broadcasting, then go to login."""
        user = self.get_current_user()
        if user is None:
            return False

        self.registry.remove_session(user.tab_id)
        logger.info('Tab %s auto-logged out for userId %s', user.tab_id, user.user_id)
        signals.auth_logout_sync.send(self, user_id=user.user_id, tab_id=user.tab_id)
        self.navigator.redirect(login_url(REASON_LOGOUT_SYNC))
        return True

    def update_activity(self):
        return self.registry.update_activity()

    # ------------------------------------------------------------------
    # Cross-tab synchronization
    # ------------------------------------------------------------------

    def setup_logout_sync(self):
        """Listen for logouts written by other tabs of this profile."""
        if self._unsubscribe_sync is None:
            self._unsubscribe_sync = self.persistent.subscribe(
                [LOGOUT_SYNC_KEY], self._on_logout_sync, owner=self.tab_id)
        return self._unsubscribe_sync

    def teardown_logout_sync(self):
        if self._unsubscribe_sync is not None:
            self._unsubscribe_sync()
            self._unsubscribe_sync = None

    def _read_sync_payload(self, raw):
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning('Error handling logout_sync event: unreadable payload')
            return None
        if not isinstance(data, dict) or not data.get('userId'):
            return None
        return data

    def _on_logout_sync(self, change):
        data = self._read_sync_payload(change.new_value)
        if data is None:
            return
        user = self.get_current_user()
        if user is not None and user.user_id == data['userId']:
            logger.info('Logout sync received on tab %s: %s', user.tab_id, data)
            self.local_logout()

    def reconcile_logout_sync(self):
        """Apply a logout broadcast that arrived while this tab was not listening.

        Only the latest broadcast is visible. It applies when it names this
        tab's user, came from another tab, and is not older than this
        tab's login.
        """
        data = self._read_sync_payload(self.persistent.get(LOGOUT_SYNC_KEY))
        if data is None:
            return False
        user = self.get_current_user()
        if user is None or user.user_id != data['userId']:
            return False
        if data.get('sessionId') == user.tab_id:
            return False
        if stored_timestamp(data.get('time')) < stored_timestamp(user.login_time):
            return False
        return self.local_logout()

    # ------------------------------------------------------------------
    # Page access
    # ------------------------------------------------------------------

    def validate_page_access(self, path=None):
        """Redirect away from pages the current session may not see."""
        if path is not None:
            self.navigator.path = path
        navigator = self.navigator

        if navigator.is_admin_page and not self.can_access_admin_panel():
            logger.warning('Access denied to admin panel on tab %s', self.tab_id)
            navigator.redirect(login_url(REASON_ADMIN_REQUIRED))
            return False
        if navigator.is_grammar_checker_page and not self.can_access_grammar_checker():
            logger.warning('Access denied to grammar checker on tab %s', self.tab_id)
            navigator.redirect(login_url(REASON_LOGIN_REQUIRED))
            return False
        return True
