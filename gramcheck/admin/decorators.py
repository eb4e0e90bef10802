"""
Admin Decorator
"""

from functools import wraps

from gramcheck.auth.context import current_tab
from gramcheck.session import NoActiveSession, Unauthorized


def admin_required(f):
    """Decorator to ensure the request comes from a tab with an admin session.
    
    - No session on the tab: ``NoActiveSession`` (401)
    - Session without admin capability: ``Unauthorized`` (403)
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        auth = current_tab().auth
        if not auth.is_logged_in():
            raise NoActiveSession('Authentication required. Please login again.')
        if not auth.can_access_admin_panel():
            raise Unauthorized('Admin privileges required for this operation.')
        return f(*args, **kwargs)
    return wrapper
