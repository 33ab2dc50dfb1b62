import logging
from dataclasses import dataclass, field
from functools import wraps
from typing import Optional

import jwt
from flask import g, request

from models import db, User
from utils.errors import AccountNotActive, Unauthorized
from utils.response import exception_response
from utils.security import decode_token

logger = logging.getLogger(__name__)


@dataclass
class AuthSession:
    """The identity a request acts as, stored on ``flask.g.auth``"""

    user: User
    claims: dict = field(default_factory=dict)

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def is_admin(self) -> bool:
        return self.user.is_admin


def current_session() -> Optional[AuthSession]:
    return g.get('auth')


def current_user() -> Optional[User]:
    session = current_session()
    return session.user if session else None


class AuthMiddleware:
    def _bearer_token(self) -> Optional[str]:
        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return None
        return auth_header.split("Bearer ", 1)[1].strip() or None

    def _resolve(self, token):
        """Returns (AuthSession, None) or (None, error response)"""
        try:
            payload = decode_token(token)
        except jwt.ExpiredSignatureError:
            logger.warning("JWT token expired")
            return None, exception_response(Unauthorized("Token expired"))
        except jwt.InvalidTokenError as e:
            logger.warning("Invalid JWT token: %s", str(e))
            return None, exception_response(Unauthorized("Invalid token"))

        # Reload on every request so bans take effect immediately
        user = db.session.get(User, payload.get('sub'))
        if not user:
            logger.warning("Token subject %s no longer exists", payload.get('sub'))
            return None, exception_response(Unauthorized("Invalid token"))

        if not user.is_active:
            logger.warning("Rejected token for %s account %s", user.status, user.id)
            return None, exception_response(AccountNotActive())

        logger.debug("JWT validated for user: %s", user.id)
        return AuthSession(user=user, claims=payload), None

    def token_required(self, f):
        @wraps(f)
        def decorated(*args, **kwargs):
            g.auth = None
            token = self._bearer_token()

            if not token:
                logger.warning("Missing or malformed Authorization header")
                return exception_response(Unauthorized("Unauthorized - No Bearer token"))

            session, error = self._resolve(token)
            if error:
                return error

            g.auth = session
            return f(*args, **kwargs)

        return decorated

    def optional_auth(self, f):
        """Attach the caller's identity when a valid token is present"""
        @wraps(f)
        def decorated(*args, **kwargs):
            g.auth = None
            token = self._bearer_token()

            if token:
                session, _ = self._resolve(token)
                g.auth = session

            return f(*args, **kwargs)

        return decorated


# Global instance
auth_middleware = AuthMiddleware()
token_required = auth_middleware.token_required
optional_auth = auth_middleware.optional_auth
