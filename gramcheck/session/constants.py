"""
Storage keys, roles and redirect reasons shared by the session layer.
"""

# Persistent (profile-wide) keys
SESSIONS_KEY = 'userSessions'
LOGOUT_SYNC_KEY = 'logout_sync'
LOGOUT_SYNC_ALL_KEY = 'logout_sync_all'
ADMIN_STORAGE_KEY = 'loggedInAs_admin'
USER_STORAGE_KEY = 'loggedInAs_user'
LEGACY_STORAGE_KEY = 'loggedInAs'
ADMIN_TOKEN_KEY = 'admin_token'

# Ephemeral (per-tab) keys
TAB_ID_KEY = 'tabId'
WAS_LOGGED_IN_KEY = 'wasLoggedIn'

ROLE_ADMIN = 'admin'
ROLE_USER = 'user'

LOGIN_PAGE = '/login'
REASON_ADMIN_REQUIRED = 'admin_required'
REASON_LOGIN_REQUIRED = 'login_required'
REASON_LOGOUT_SYNC = 'logout_sync'

DEFAULT_SESSION_MAX_AGE_MS = 24 * 60 * 60 * 1000
DEFAULT_ACTIVITY_INTERVAL_MS = 60 * 1000
DEFAULT_REDIRECT_DELAY_MS = 3000
