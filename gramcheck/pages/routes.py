"""
Page Routes
"""

from flask import jsonify, redirect, request

from gramcheck.auth.context import current_tab
from gramcheck.models import User
from gramcheck.pages import pages_bp
from gramcheck.session.constants import (
    REASON_ADMIN_REQUIRED,
    REASON_LOGIN_REQUIRED,
    REASON_LOGOUT_SYNC,
)

LOGIN_MESSAGES = {
    REASON_ADMIN_REQUIRED: 'Admin privileges are required. Please login with an admin account.',
    REASON_LOGIN_REQUIRED: 'Please login to use the grammar checker.',
    REASON_LOGOUT_SYNC: 'You were logged out in another tab.',
}


def _pending_redirect(tab):
    """Redirect response for an immediate redirect the tab already asked for."""
    target = tab.navigator.target
    if target is not None and target.delay_ms == 0:
        return redirect(target.url)
    return None


@pages_bp.route('/')
def index():
    """Send logged-in tabs to their home page, everyone else to login"""
    auth = current_tab().auth
    if auth.is_admin():
        return redirect('/admin')
    if auth.is_logged_in():
        return redirect('/grammar-checker')
    return redirect('/login')


@pages_bp.route('/login')
def login_page():
    reason = request.args.get('message')
    return jsonify(success=True, page='login', reason=reason, message=LOGIN_MESSAGES.get(reason))


@pages_bp.route('/grammar-checker')
def grammar_checker_page():
    tab = current_tab()
    tab.registry.cleanup_old_sessions(tab.session_max_age_ms)
    tab.auth.validate_page_access()
    response = _pending_redirect(tab)
    if response is not None:
        return response
    user = tab.auth.get_current_user()
    return jsonify(success=True, page='grammar-checker', user=user.to_dict(include_tab_id=True))


@pages_bp.route('/admin')
def admin_page():
    """Admin panel. Denied loads get a notice and a delayed redirect."""
    tab = current_tab()
    response = _pending_redirect(tab)
    if response is not None:
        return response

    tab.registry.cleanup_old_sessions(tab.session_max_age_ms)
    if not tab.guard.check():
        target = tab.navigator.target
        resp = jsonify(success=False, page='admin', error='Admin privileges required for this panel',
                       redirect=target.url, redirectDelayMs=target.delay_ms)
        resp.status_code = 403
        resp.headers['Refresh'] = f'{target.delay_ms // 1000}; url={target.url}'
        return resp

    user = tab.auth.get_current_user()
    return jsonify(success=True, page='admin', user=user.to_dict(include_tab_id=True),
                   totalUsers=User.query.count())
