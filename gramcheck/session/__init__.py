"""
Session Package

Multi-tab session tracking, cross-tab logout synchronization,
role-partitioned storage and page access guards.
"""

from gramcheck.session.coordinator import AuthCoordinator
from gramcheck.session.errors import AuthError, InvalidInput, MalformedStorage, NoActiveSession, Unauthorized
from gramcheck.session.guard import AccessGuard
from gramcheck.session.normalize import normalize_login_response
from gramcheck.session.registry import SessionRecord, SessionRegistry
from gramcheck.session.role_storage import RoleStorage, get_storage_key
from gramcheck.session.storage import DatabaseStore, MemoryStore
from gramcheck.session.tab import Tab

__all__ = [
    'AccessGuard',
    'AuthCoordinator',
    'AuthError',
    'DatabaseStore',
    'InvalidInput',
    'MalformedStorage',
    'MemoryStore',
    'NoActiveSession',
    'RoleStorage',
    'SessionRecord',
    'SessionRegistry',
    'Tab',
    'Unauthorized',
    'get_storage_key',
    'normalize_login_response',
]
