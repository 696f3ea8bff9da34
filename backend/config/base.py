"""Base configuration shared by every environment."""
import os
from datetime import timedelta


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # JWT Configuration
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    JWT_ALGORITHM = 'HS256'

    # CORS
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]

    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL') or 'memory://'
    RATELIMIT_DEFAULT = "200 per day, 50 per hour"

    # Live notifications (disabled when unset)
    REDIS_URL = os.environ.get('REDIS_URL')
    NOTIFICATION_CHANNEL = 'edusync:attendance'

    # QR identity tokens
    QR_SECRET_KEY = os.environ.get('QR_SECRET_KEY') or 'EduSync_2026_Secure_Key'
    QR_REPLAY_WINDOW_SECONDS = int(os.environ.get('QR_REPLAY_WINDOW_SECONDS', 35))

    # Attendance
    LATE_THRESHOLD_MINUTES = int(os.environ.get('LATE_THRESHOLD_MINUTES', 30))
    SESSION_RESET_PASSPHRASE = os.environ.get('SESSION_RESET_PASSPHRASE') or 'reset-attendance'

    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = 'logs/app.log'
