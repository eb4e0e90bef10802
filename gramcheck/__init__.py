"""
Grammar Checker - Application Factory

This module provides the Flask application factory pattern for creating
and configuring the application instance.
"""

import logging
import os

from flask import Flask, jsonify, request, redirect
from gramcheck.extensions import db, login_manager
from gramcheck.config import Config

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use (default: Config)

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(config_class)
    logging.getLogger('gramcheck').setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)

    from gramcheck.auth import context
    context.init_app(app)

    from gramcheck.grammar.services import LanguageToolService
    app.extensions['languagetool'] = LanguageToolService.from_config(app.config)

    # Register blueprints
    from gramcheck.auth import auth_bp
    from gramcheck.admin import admin_bp
    from gramcheck.grammar import grammar_bp
    from gramcheck.pages import pages_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(grammar_bp, url_prefix='/api/grammar')
    app.register_blueprint(pages_bp)

    _register_error_handlers(app)

    # Users come from the requesting tab's registry entry
    @login_manager.request_loader
    def load_user_from_tab(req):
        from gramcheck.models import User
        record = context.current_tab().auth.get_current_user()
        if record is None:
            return None
        user = db.session.get(User, record.user_id)
        if user is None or not user.is_active:
            return None
        return user

    @login_manager.unauthorized_handler
    def unauthorized():
        from gramcheck.session.constants import REASON_LOGIN_REQUIRED
        from gramcheck.session.navigation import login_url
        if request.path.startswith('/api/'):
            return jsonify(success=False, error='Authentication required. Please login again.'), 401
        return redirect(login_url(REASON_LOGIN_REQUIRED))

    # Create database tables
    with app.app_context():
        if not app.config.get('TESTING'):
            os.makedirs(os.path.join(Config.basedir, 'instance'), exist_ok=True)
        db.create_all()
        _ensure_default_data(app)

    return app


def _register_error_handlers(app):
    from gramcheck.grammar.services import LanguageToolError
    from gramcheck.session import AuthError

    @app.errorhandler(AuthError)
    def handle_auth_error(e):
        return jsonify(success=False, error=e.message), e.status_code

    @app.errorhandler(LanguageToolError)
    def handle_languagetool_error(e):
        logger.warning('LanguageTool failure: %s', e.message)
        return jsonify(success=False, error=e.message, details=e.details), e.status_code


def _ensure_default_data(app):
    """Ensure the configured administrator account exists."""
    from gramcheck.models import User

    username = app.config['ADMIN_USERNAME']
    if User.query.filter_by(username=username).first():
        return

    admin = User(username=username, email=app.config['ADMIN_EMAIL'],
                 full_name='Administrator', role='admin')
    admin.set_password(app.config['ADMIN_PASSWORD'])
    try:
        db.session.add(admin)
        db.session.commit()
        logger.info('Created default admin account %s', username)
    except Exception:
        db.session.rollback()
        logger.exception('Could not create default admin account')
