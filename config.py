import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///skillswap.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'change-me-in-production')
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRES_DAYS = int(os.getenv('JWT_EXPIRES_DAYS', 30))

    REDIS_URL = os.getenv('REDIS_URL')

    # Auth routes: 5 attempts per 15 minutes per client
    RATE_LIMIT_ENABLED = _env_bool('RATE_LIMIT_ENABLED', True)
    AUTH_RATE_LIMIT = int(os.getenv('AUTH_RATE_LIMIT', 5))
    AUTH_RATE_WINDOW_SECONDS = int(os.getenv('AUTH_RATE_WINDOW_SECONDS', 15 * 60))

    # 'symmetric': one pending request per unordered pair of users
    # 'directional': one pending request per (requester, recipient)
    PENDING_REQUEST_SCOPE = os.getenv('PENDING_REQUEST_SCOPE', 'symmetric')

    RATING_EDIT_WINDOW_HOURS = int(os.getenv('RATING_EDIT_WINDOW_HOURS', 24))
    RATING_ROUND_DIGITS = int(os.getenv('RATING_ROUND_DIGITS', 1))

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')
