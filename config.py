"""
Application Configuration

Centralizes all Flask and application configuration settings.
"""

import os

# Base directory of the application
BASE_DIR = os.path.dirname(os.path.abspath(__file__))


class Config:
    """Base configuration class."""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-only-change-in-production')

    # SQLAlchemy settings
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///recipebox.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upload settings
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', os.path.join(BASE_DIR, 'static', 'uploads'))
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 16 * 1024 * 1024))  # max request body

    # Shared secret for the admin endpoints
    ADMIN_MIGRATION_SECRET = os.environ.get('ADMIN_MIGRATION_SECRET', 'default-secret-key-not-secure')

    # Google Cloud Vision credentials (either explicit pair or a credentials file)
    GOOGLE_VISION_CLIENT_EMAIL = os.environ.get('GOOGLE_VISION_CLIENT_EMAIL')
    GOOGLE_VISION_PRIVATE_KEY = os.environ.get('GOOGLE_VISION_PRIVATE_KEY')
    GOOGLE_APPLICATION_CREDENTIALS = os.environ.get('GOOGLE_APPLICATION_CREDENTIALS')

    # Scraping
    SCRAPE_TIMEOUT = int(os.environ.get('SCRAPE_TIMEOUT', '10'))

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    ADMIN_MIGRATION_SECRET = 'test-secret'
    GOOGLE_VISION_CLIENT_EMAIL = None
    GOOGLE_VISION_PRIVATE_KEY = None
    GOOGLE_APPLICATION_CREDENTIALS = None
    LOG_LEVEL = 'WARNING'


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(env=None):
    """Get configuration based on environment."""
    if env is None:
        env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
