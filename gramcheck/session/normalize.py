"""
Login response normalization.

Login payloads arrive in several shapes (flat, nested under ``user``, or
with short attribute names). ``normalize_login_response`` flattens them
into the stored session shape. Precedence for each attribute, first
non-empty wins:

    userId    userId, user.id, id
    username  username, user.username
    userRole  userRole, user.role, role
    email     email, user.email
    phone     phone, user.phone, ''
    fullName  fullName, user.fullName, name
"""

from gramcheck.session.errors import InvalidInput

REQUIRED_ATTRIBUTES = ('userId', 'username', 'userRole')


def _first(*values):
    for value in values:
        if value not in (None, ''):
            return value
    return None


def normalize_login_response(payload):
    if not isinstance(payload, dict):
        raise InvalidInput('Login response must be an object')
    nested = payload.get('user')
    if not isinstance(nested, dict):
        nested = {}

    user_data = {
        'userId': _first(payload.get('userId'), nested.get('id'), payload.get('id')),
        'username': _first(payload.get('username'), nested.get('username')),
        'userRole': _first(payload.get('userRole'), nested.get('role'), payload.get('role')),
        'email': _first(payload.get('email'), nested.get('email')),
        'phone': _first(payload.get('phone'), nested.get('phone')) or '',
        'fullName': _first(payload.get('fullName'), nested.get('fullName'), payload.get('name')),
    }

    missing = [name for name in REQUIRED_ATTRIBUTES if user_data[name] is None]
    if missing:
        raise InvalidInput('Incomplete login data: missing ' + ', '.join(missing))
    return user_data
