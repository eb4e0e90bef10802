"""
Role-Partitioned Storage

Admin and non-admin logins kept under separate keys, one of each per
profile, with a lazy upgrade from the old combined ``loggedInAs`` key.

When a ``SessionRegistry`` is attached it is the source of truth: the role
keys only mirror it, and a role key claiming a login the registry does not
know about reads as logged out.
"""

import json
import logging
from datetime import datetime, timezone

from gramcheck.session.constants import (
    ADMIN_STORAGE_KEY,
    ADMIN_TOKEN_KEY,
    LEGACY_STORAGE_KEY,
    ROLE_ADMIN,
    USER_STORAGE_KEY,
)
from gramcheck.session.navigation import Navigator
from gramcheck.session.normalize import normalize_login_response

logger = logging.getLogger(__name__)


def get_storage_key(user_role):
    return ADMIN_STORAGE_KEY if user_role == ROLE_ADMIN else USER_STORAGE_KEY


class RoleStorage:
    def __init__(self, store, navigator=None, registry=None):
        self.store = store
        self.navigator = navigator or Navigator()
        self.registry = registry

    get_storage_key = staticmethod(get_storage_key)

    def _read_json(self, key):
        raw = self.store.get(key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning('Error parsing user data under %s', key)
            return None
        return data if isinstance(data, dict) else None

    def set_user_data(self, login_response):
        """Normalize and store a login under its role key.

        The legacy key and the other role's key are removed. Raises
        ``InvalidInput`` for incomplete data.
        """
        user_data = normalize_login_response(login_response)
        user_data['loginTime'] = datetime.now(timezone.utc).isoformat()
        storage_key = get_storage_key(user_data['userRole'])
        self.store.set(storage_key, json.dumps(user_data))

        self.store.remove(LEGACY_STORAGE_KEY)
        if user_data['userRole'] == ROLE_ADMIN:
            self.store.remove(USER_STORAGE_KEY)
        else:
            self.store.remove(ADMIN_STORAGE_KEY)

        logger.info('User data stored with key: %s', storage_key)
        return user_data

    def migrate_legacy_data(self):
        """Move a legacy combined record to its role key. Idempotent."""
        raw = self.store.get(LEGACY_STORAGE_KEY)
        if raw is None:
            return None
        user_data = self._read_json(LEGACY_STORAGE_KEY)
        if not user_data or not user_data.get('userRole'):
            return None

        new_key = get_storage_key(user_data['userRole'])
        self.store.set(new_key, raw)
        self.store.remove(LEGACY_STORAGE_KEY)
        logger.info('Legacy data migrated to: %s', new_key)
        return user_data

    def _stored_user_data(self):
        key = ADMIN_STORAGE_KEY if self.navigator.is_admin_page else USER_STORAGE_KEY
        user_data = self._read_json(key)
        if user_data is None:
            user_data = self.migrate_legacy_data()
        return user_data

    def _registry_user_data(self):
        # Run the legacy upgrade even though the registry answers the read.
        self.migrate_legacy_data()
        record = self.registry.get_current_user()
        if record is None:
            return None
        return record.to_dict()

    def get_user_data(self):
        """Login data for the current page, or ``None``.

        On an admin page a non-admin record reads as ``None``.
        """
        if self.registry is not None:
            user_data = self._registry_user_data()
        else:
            user_data = self._stored_user_data()
        if user_data is None:
            return None

        if not user_data.get('username') or not user_data.get('userRole'):
            logger.warning('Invalid user data structure')
            return None
        if self.navigator.is_admin_page and user_data['userRole'] != ROLE_ADMIN:
            logger.warning('Non-admin user %s on admin page', user_data.get('username'))
            return None
        return user_data

    def clear_user_data(self, user_role):
        self.store.remove(get_storage_key(user_role))
        self.store.remove(ADMIN_TOKEN_KEY)
        logger.info('Cleared data for role: %s', user_role)

    def is_current_user_admin(self):
        user_data = self.get_user_data()
        return bool(user_data) and user_data.get('userRole') == ROLE_ADMIN

    def subscribe_changes(self, callback, owner=None):
        """Call ``callback(change, user_data)`` when any role key changes."""
        def on_change(change):
            logger.info('Storage change detected for %s', change.key)
            callback(change, self.get_user_data())

        return self.store.subscribe(
            [ADMIN_STORAGE_KEY, USER_STORAGE_KEY, LEGACY_STORAGE_KEY], on_change, owner=owner)
