"""
Auth Blueprint

Account registration plus per-tab login and logout. The tab is named by
the ``X-Tab-Id`` header; the browser profile by the signed session cookie.
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__)

from gramcheck.auth import routes  # noqa: E402, F401
