"""Testing configuration."""
from datetime import timedelta

from .base import Config


class TestingConfig(Config):
    """Testing configuration class."""

    # Basic Flask config
    DEBUG = False
    TESTING = True
    SECRET_KEY = 'test-secret-key'

    # Database (in-memory SQLite for testing)
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    # JWT Configuration
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-length'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(hours=1)

    # Rate Limiting (disabled for testing)
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = 'memory://'

    # Notifications stay local
    REDIS_URL = None

    # Attendance
    QR_SECRET_KEY = 'test-qr-secret'
    QR_REPLAY_WINDOW_SECONDS = 35
    LATE_THRESHOLD_MINUTES = 30
    SESSION_RESET_PASSPHRASE = 'test-reset-passphrase'

    # Logging
    LOG_LEVEL = 'WARNING'
