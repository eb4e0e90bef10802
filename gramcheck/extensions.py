"""
Flask Extensions

Flask-Login has no session of its own here: users are loaded from the
requesting tab's entry in the session registry.
"""

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager

# Database instance
db = SQLAlchemy()

# Login manager backed by the per-tab session registry
login_manager = LoginManager()
