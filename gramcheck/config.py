"""
Configuration settings for the Grammar Checker service
"""
import os


class Config:
    """Flask application configuration"""
    
    # Flask secret key for the profile cookie
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production-12345'
    
    # Database configuration
    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'gramcheck.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    
    # LanguageTool API configuration
    LANGUAGETOOL_API_URL = os.environ.get('LANGUAGETOOL_API_URL') or 'https://api.languagetool.org/v2'
    API_TIMEOUT = int(os.environ.get('API_TIMEOUT') or 10000)
    GRAMMAR_CACHE_TIMEOUT = 5 * 60 * 1000
    LANGUAGES_CACHE_TIMEOUT = 60 * 60 * 1000
    
    # Session settings (milliseconds)
    SESSION_MAX_AGE_MS = 24 * 60 * 60 * 1000
    ACTIVITY_UPDATE_INTERVAL_MS = 60 * 1000
    ACCESS_DENIED_REDIRECT_DELAY_MS = 3000
    
    # Seeded administrator account
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME') or 'admin'
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD') or 'admin123'
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL') or 'admin@example.com'
    
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'


class TestConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    LANGUAGETOOL_API_URL = 'http://languagetool.test/v2'
    LOG_LEVEL = 'DEBUG'
