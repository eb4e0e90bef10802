"""
Admin Blueprint

User management API for the admin panel. Access requires an admin session
on the requesting tab.
"""

from flask import Blueprint

admin_bp = Blueprint('admin', __name__)

from gramcheck.admin import routes  # noqa: E402, F401
