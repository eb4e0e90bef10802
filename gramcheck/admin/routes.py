"""
Admin Routes

User management for the admin panel.
"""

import logging

from flask import jsonify, request
from sqlalchemy import or_

from gramcheck.admin import admin_bp
from gramcheck.admin.decorators import admin_required
from gramcheck.auth.context import current_tab
from gramcheck.auth.routes import request_data
from gramcheck.extensions import db
from gramcheck.models import StorageEntry, User

logger = logging.getLogger(__name__)

VALID_ROLES = ('admin', 'user')
VALID_ACCOUNT_TYPES = ('free', 'premium')
VALID_STATUSES = ('active', 'inactive', 'suspended')


def _validate_choices(data):
    """Return an error message for an invalid role/account type/status, else None."""
    if data.get('role') and data['role'] not in VALID_ROLES:
        return f'Role must be one of: {", ".join(VALID_ROLES)}'
    if data.get('accountType') and data['accountType'] not in VALID_ACCOUNT_TYPES:
        return f'Account type must be one of: {", ".join(VALID_ACCOUNT_TYPES)}'
    if data.get('status') and data['status'] not in VALID_STATUSES:
        return f'Status must be one of: {", ".join(VALID_STATUSES)}'
    return None


@admin_bp.route('/users')
@admin_required
def list_users():
    """List users, optionally filtered by ``search``."""
    query = User.query
    search = (request.args.get('search') or '').strip().lower()
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(
            User.username.ilike(pattern),
            User.full_name.ilike(pattern),
            User.email.ilike(pattern),
            User.phone.ilike(pattern),
        ))
    users = query.order_by(User.id).all()
    return jsonify(success=True, data=[u.to_dict() for u in users], count=len(users))


@admin_bp.route('/users', methods=['POST'])
@admin_required
def create_user():
    """Create a user from the admin panel."""
    data = request_data()
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''
    email = (data.get('email') or '').strip().lower()
    full_name = (data.get('fullName') or '').strip()

    if not username or not password or not email or not full_name:
        return jsonify(success=False, error='Username, password, email, and full name are required.'), 400

    error = _validate_choices(data)
    if error:
        return jsonify(success=False, error=error), 400

    if User.query.filter(or_(User.username == username, User.email == email)).first():
        return jsonify(success=False, error='Username or email already exists.'), 409

    user = User(
        username=username,
        email=email,
        full_name=full_name,
        phone=(data.get('phone') or '').strip(),
        role=data.get('role') or 'user',
        account_type=data.get('accountType') or 'free',
        status=data.get('status') or 'active',
    )
    user.set_password(password)

    try:
        db.session.add(user)
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception('Admin create user failed for %s', username)
        return jsonify(success=False, error='Internal server error creating user.'), 500

    logger.info('Admin %s created user %s', current_tab().auth.get_current_user().username, username)
    return jsonify(success=True, message='User created successfully.', data=user.to_dict()), 201


@admin_bp.route('/users/<int:user_id>', methods=['PUT'])
@admin_required
def update_user(user_id):
    """Update a user's profile, role, account type or status."""
    user = db.session.get(User, user_id)
    if user is None:
        return jsonify(success=False, error='User not found.'), 404

    data = request_data()
    username = (data.get('username') or '').strip()
    email = (data.get('email') or '').strip().lower()
    full_name = (data.get('fullName') or '').strip()

    if not username or not email or not full_name:
        return jsonify(success=False, error='Username, email, and full name are required.'), 400

    error = _validate_choices(data)
    if error:
        return jsonify(success=False, error=error), 400

    clash = User.query.filter(
        or_(User.username == username, User.email == email), User.id != user_id).first()
    if clash:
        return jsonify(success=False, error='Username or email already exists.'), 409

    user.username = username
    user.email = email
    user.full_name = full_name
    user.phone = (data.get('phone') or user.phone or '').strip()
    user.role = data.get('role') or user.role
    user.account_type = data.get('accountType') or user.account_type
    user.status = data.get('status') or user.status
    if data.get('password'):
        user.set_password(data['password'])

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception('Admin update failed for user %s', user_id)
        return jsonify(success=False, error='Internal server error updating user.'), 500

    return jsonify(success=True, message='User updated successfully.', data=user.to_dict())


@admin_bp.route('/users/<int:user_id>', methods=['DELETE'])
@admin_required
def delete_user(user_id):
    """Delete a user. Admins cannot delete their own account."""
    user = db.session.get(User, user_id)
    if user is None:
        return jsonify(success=False, error='User not found.'), 404

    if user.id == current_tab().auth.get_current_user().user_id:
        return jsonify(success=False, error='You cannot delete your own account.'), 400

    username = user.username
    try:
        db.session.delete(user)
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception('Admin delete failed for user %s', user_id)
        return jsonify(success=False, error='Internal server error deleting user.'), 500

    return jsonify(success=True, message=f'User "{username}" deleted successfully.')


@admin_bp.route('/stats')
@admin_required
def stats():
    """System overview for the admin dashboard."""
    tab = current_tab()
    return jsonify(success=True, data={
        'totalUsers': User.query.count(),
        'admins': User.query.filter_by(role='admin').count(),
        'activeUsers': User.query.filter_by(status='active').count(),
        'premiumUsers': User.query.filter_by(account_type='premium').count(),
        'profiles': db.session.query(StorageEntry.namespace).distinct().count(),
        'openTabs': len(tab.registry.get_all_sessions()),
    })
