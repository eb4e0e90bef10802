"""
Auth lifecycle signals.

Receivers usually connect with ``sender=`` set to the coordinator of the
tab they belong to, the way a page only hears its own window's events.
"""

from blinker import Namespace

_signals = Namespace()

auth_login = _signals.signal('auth-login')
auth_logout = _signals.signal('auth-logout')
auth_logout_all = _signals.signal('auth-logout-all')
auth_logout_sync = _signals.signal('auth-logout-sync')
access_denied = _signals.signal('access-denied')
