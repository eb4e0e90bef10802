"""
Session Registry

Mapping from tab id to session record, kept as a single JSON object under
``userSessions`` in the persistent store. Every tab reads the whole table
but only writes its own entry, except during cleanup sweeps.

The read-modify-write cycle is not atomic across tabs: two tabs saving at
the same moment lose one write. Updates are rare (login, logout, one
activity ping a minute) so this is accepted.
"""

import json
import logging
import secrets
import string
import time
from dataclasses import dataclass, field

from gramcheck.session.constants import (
    DEFAULT_SESSION_MAX_AGE_MS,
    SESSIONS_KEY,
    TAB_ID_KEY,
)
from gramcheck.session.errors import MalformedStorage

logger = logging.getLogger(__name__)

_TAB_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def epoch_ms():
    return int(time.time() * 1000)


def generate_tab_id(now):
    suffix = ''.join(secrets.choice(_TAB_SUFFIX_ALPHABET) for _ in range(9))
    return f'tab_{now}_{suffix}'


# dataclass field name -> stored (camelCase) key
_FIELD_KEYS = {
    'user_id': 'userId',
    'username': 'username',
    'user_role': 'userRole',
    'email': 'email',
    'phone': 'phone',
    'full_name': 'fullName',
    'login_time': 'loginTime',
    'last_active': 'lastActive',
}


@dataclass
class SessionRecord:
    """One authenticated tab."""

    user_id: object
    username: str
    user_role: str
    email: str = None
    phone: str = ''
    full_name: str = None
    login_time: int = None
    last_active: int = None
    tab_id: str = None
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data, tab_id=None):
        """Build a record from its stored form.

        Returns ``None`` when ``userId``, ``username`` or ``userRole`` is
        missing so a damaged entry reads as logged out.
        """
        if not isinstance(data, dict):
            return None
        if not all(data.get(key) not in (None, '') for key in ('userId', 'username', 'userRole')):
            return None
        known = set(_FIELD_KEYS.values()) | {'tabId', '_tabId'}
        kwargs = {name: data.get(key) for name, key in _FIELD_KEYS.items()}
        if kwargs['phone'] is None:
            kwargs['phone'] = ''
        extra = {key: value for key, value in data.items() if key not in known}
        return cls(tab_id=tab_id, extra=extra, **kwargs)

    def to_dict(self, include_tab_id=False):
        data = dict(self.extra)
        for name, key in _FIELD_KEYS.items():
            data[key] = getattr(self, name)
        if include_tab_id:
            data['tabId'] = self.tab_id
        return data

    @property
    def is_admin(self):
        return self.user_role == 'admin'


def stored_timestamp(value):
    """Epoch ms from a stored record field; anything non-numeric counts as 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


class SessionRegistry:
    """Per-tab session table shared by all tabs of a profile."""

    def __init__(self, persistent, ephemeral, clock=None):
        self.persistent = persistent
        self.ephemeral = ephemeral
        self.clock = clock or epoch_ms

    def get_tab_id(self):
        tab_id = self.ephemeral.get(TAB_ID_KEY)
        if not tab_id:
            tab_id = generate_tab_id(self.clock())
            self.ephemeral.set(TAB_ID_KEY, tab_id)
            logger.info('New tab id created: %s', tab_id)
        return tab_id

    def _load(self):
        raw = self.persistent.get(SESSIONS_KEY)
        if raw is None:
            return {}
        try:
            sessions = json.loads(raw)
        except ValueError as exc:
            raise MalformedStorage(SESSIONS_KEY, str(exc)) from exc
        if not isinstance(sessions, dict):
            raise MalformedStorage(SESSIONS_KEY, f'expected an object, got {type(sessions).__name__}')
        return sessions

    def get_all_sessions(self):
        """Return the raw ``{tabId: record}`` table, or ``{}`` if unreadable."""
        try:
            return self._load()
        except MalformedStorage as exc:
            logger.warning('Ignoring session registry: %s', exc)
            return {}

    def _save(self, sessions):
        self.persistent.set(SESSIONS_KEY, json.dumps(sessions), origin=self.get_tab_id())

    def get_current_user(self):
        tab_id = self.get_tab_id()
        data = self.get_all_sessions().get(tab_id)
        if data is None:
            return None
        return SessionRecord.from_dict(data, tab_id=tab_id)

    def save_session(self, data):
        """Store ``data`` as the current tab's record."""
        sessions = self.get_all_sessions()
        sessions[self.get_tab_id()] = data
        self._save(sessions)

    def remove_session(self, tab_id=None):
        tab_id = tab_id or self.get_tab_id()
        sessions = self.get_all_sessions()
        if tab_id not in sessions:
            return False
        del sessions[tab_id]
        self._save(sessions)
        return True

    def clear(self):
        self.persistent.remove(SESSIONS_KEY, origin=self.get_tab_id())

    def update_activity(self):
        tab_id = self.get_tab_id()
        sessions = self.get_all_sessions()
        if SessionRecord.from_dict(sessions.get(tab_id), tab_id=tab_id) is None:
            return False
        sessions[tab_id]['lastActive'] = self.clock()
        self._save(sessions)
        return True

    def cleanup_old_sessions(self, max_age=DEFAULT_SESSION_MAX_AGE_MS):
        """Drop other tabs idle for longer than ``max_age`` ms. Returns the count."""
        sessions = self.get_all_sessions()
        now = self.clock()
        current = self.get_tab_id()
        stale = []
        for tab_id, data in sessions.items():
            if tab_id == current:
                continue
            data = data if isinstance(data, dict) else {}
            last_active = stored_timestamp(data.get('lastActive')) or stored_timestamp(data.get('loginTime'))
            if now - last_active > max_age:
                stale.append(tab_id)
        for tab_id in stale:
            del sessions[tab_id]
        if stale:
            self._save(sessions)
            logger.info('Cleaned up %d old sessions', len(stale))
        return len(stale)

    def get_sessions_info(self):
        current = self.get_tab_id()
        for tab_id, data in self.get_all_sessions().items():
            data = data if isinstance(data, dict) else {}
            yield {
                'tabId': tab_id,
                'isCurrent': tab_id == current,
                'username': data.get('username'),
                'userRole': data.get('userRole'),
                'loginTime': data.get('loginTime'),
                'lastActive': data.get('lastActive'),
            }

