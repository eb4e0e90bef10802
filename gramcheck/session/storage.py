"""
Key-Value Persistence

String key/value stores behind get/set/remove semantics, plus change
subscriptions so other tabs can react to writes on a shared store.

Two scopes are used by the rest of the package:

- persistent: shared by every tab of a browser profile
  (``MemoryStore`` in-process, ``DatabaseStore`` across requests)
- ephemeral: owned by a single tab (always a ``MemoryStore``)
"""

import logging
from collections import namedtuple
from datetime import datetime

from gramcheck.extensions import db
from gramcheck.models import StorageEntry

logger = logging.getLogger(__name__)


StorageChange = namedtuple('StorageChange', ['key', 'old_value', 'new_value', 'origin'])


class _Subscription:
    def __init__(self, keys, callback, owner):
        self.keys = frozenset(keys) if keys is not None else None
        self.callback = callback
        self.owner = owner

    def wants(self, change):
        if self.owner is not None and self.owner == change.origin:
            return False
        return self.keys is None or change.key in self.keys


class KeyValueStore:
    """Base store. Subclasses implement ``_read``, ``_write`` and ``_delete``.

    Missing keys read as ``None``; removing a missing key is a no-op.
    """

    def __init__(self):
        self._subscriptions = []

    def get(self, key):
        return self._read(key)

    def set(self, key, value, origin=None):
        value = str(value)
        old_value = self._read(key)
        self._write(key, value)
        self._publish(StorageChange(key, old_value, value, origin))

    def remove(self, key, origin=None):
        old_value = self._read(key)
        if old_value is None:
            return
        self._delete(key)
        self._publish(StorageChange(key, old_value, None, origin))

    def subscribe(self, keys, callback, owner=None):
        """Call ``callback(change)`` whenever one of ``keys`` changes.

        ``keys=None`` subscribes to every key. Writes whose ``origin`` equals
        ``owner`` are not delivered back to the subscriber. Returns a
        function that cancels the subscription.
        """
        subscription = _Subscription(keys, callback, owner)
        self._subscriptions.append(subscription)

        def unsubscribe():
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return unsubscribe

    def _publish(self, change):
        for subscription in list(self._subscriptions):
            if not subscription.wants(change):
                continue
            try:
                subscription.callback(change)
            except Exception:
                logger.warning('Storage subscriber failed for key %s', change.key, exc_info=True)

    def _read(self, key):
        raise NotImplementedError

    def _write(self, key, value):
        raise NotImplementedError

    def _delete(self, key):
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Dict-backed store."""

    def __init__(self, initial=None):
        super().__init__()
        self._data = dict(initial or {})

    def _read(self, key):
        return self._data.get(key)

    def _write(self, key, value):
        self._data[key] = value

    def _delete(self, key):
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)


class DatabaseStore(KeyValueStore):
    """Store persisted in the ``storage_entries`` table.

    Each browser profile gets its own ``namespace`` so one profile's tabs
    never see another profile's registry.
    """

    def __init__(self, namespace):
        super().__init__()
        self.namespace = namespace

    def _entry(self, key):
        return StorageEntry.query.filter_by(namespace=self.namespace, key=key).first()

    def _read(self, key):
        entry = self._entry(key)
        return entry.value if entry else None

    def _write(self, key, value):
        entry = self._entry(key)
        if entry is None:
            entry = StorageEntry(namespace=self.namespace, key=key)
        entry.value = value
        entry.updated_at = datetime.utcnow()
        try:
            db.session.add(entry)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    def _delete(self, key):
        try:
            StorageEntry.query.filter_by(namespace=self.namespace, key=key).delete()
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    def keys(self):
        rows = StorageEntry.query.filter_by(namespace=self.namespace).all()
        return [row.key for row in rows]
