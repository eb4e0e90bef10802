"""
Auth Routes

Registration against the accounts table, and login/logout against the
requesting tab's entry in the session registry.
"""

import logging

from flask import jsonify, request
from flask_login import current_user, login_required

from gramcheck.auth import auth_bp
from gramcheck.auth.context import current_tab
from gramcheck.extensions import db
from gramcheck.models import User
from gramcheck.session import normalize_login_response

logger = logging.getLogger(__name__)


def request_data():
    """JSON body, falling back to form fields."""
    return request.get_json(silent=True) or request.form.to_dict()


@auth_bp.route('/register', methods=['POST'])
def register():
    """User registration route"""
    data = request_data()
    username = (data.get('username') or '').strip()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    full_name = (data.get('fullName') or '').strip() or username
    phone = (data.get('phone') or '').strip()

    # Validation
    if not username or not 3 <= len(username) <= 20:
        return jsonify(success=False, error='Username must be between 3 and 20 characters'), 400

    if not email or '@' not in email:
        return jsonify(success=False, error='Invalid email address'), 400

    if len(password) < 6:
        return jsonify(success=False, error='Password must be at least 6 characters long'), 400

    if User.query.filter_by(username=username).first():
        return jsonify(success=False, error='Username already exists'), 409

    if User.query.filter_by(email=email).first():
        return jsonify(success=False, error='Email already registered'), 409

    new_user = User(username=username, email=email, full_name=full_name, phone=phone, role='user')
    new_user.set_password(password)

    try:
        db.session.add(new_user)
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception('Registration error for %s', username)
        return jsonify(success=False, error='Registration failed'), 500

    logger.info('Registered user %s', username)
    return jsonify(success=True, message='Registration successful', data=new_user.to_dict()), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """Log the requesting tab in"""
    data = request_data()
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''

    if not username or not password:
        return jsonify(success=False, error='Username and password are required.'), 400

    user = User.query.filter_by(username=username).first()
    if user is None or not user.check_password(password):
        logger.info('Failed login attempt for %s', username)
        return jsonify(success=False, error='Invalid username or password.'), 401

    if not user.is_active:
        return jsonify(success=False, error='Account is not active.'), 403

    tab = current_tab()
    tab.registry.cleanup_old_sessions(tab.session_max_age_ms)
    user_data = normalize_login_response(user.login_response())
    record = tab.auth.login(user_data)
    tab.role_storage.set_user_data(user_data)

    redirect_to = '/admin' if record.is_admin else '/grammar-checker'
    return jsonify(success=True, message='Login successful.', data={
        'user': record.to_dict(include_tab_id=True),
        'tabId': record.tab_id,
        'redirect': redirect_to,
    })


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Log the requesting tab out and broadcast to the profile's other tabs"""
    tab = current_tab()
    user = tab.auth.get_current_user()
    tab.auth.require_logout()
    tab.role_storage.clear_user_data(user.user_role)
    return jsonify(success=True, message='You have been logged out successfully.')


@auth_bp.route('/logout-all', methods=['POST'])
def logout_all():
    """Log every tab of this browser profile out"""
    current_tab().auth.logout_all()
    return jsonify(success=True, message='All sessions have been logged out.')


@auth_bp.route('/me')
@login_required
def me():
    record = current_tab().auth.get_current_user()
    return jsonify(success=True, data={
        'user': record.to_dict(include_tab_id=True),
        'account': current_user.to_dict(),
        'canAccessAdminPanel': current_tab().auth.can_access_admin_panel(),
        'canAccessGrammarChecker': current_tab().auth.can_access_grammar_checker(),
    })


@auth_bp.route('/sessions')
@login_required
def sessions():
    """Diagnostic listing of every tab session in this profile"""
    return jsonify(success=True, data=list(current_tab().registry.get_sessions_info()))


@auth_bp.route('/activity', methods=['POST'])
@login_required
def activity():
    updated = current_tab().auth.update_activity()
    return jsonify(success=updated)

