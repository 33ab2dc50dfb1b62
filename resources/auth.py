import logging
from flask import request
from flask_restful import Resource

from middleware.auth import token_required, current_user
from middleware.rate_limit import auth_rate_limited
from schemas import load
from schemas.auth import RegisterSchema, LoginSchema, ChangePasswordSchema
from services import identity
from utils.response import success_response, handle_errors
from utils.security import issue_token

logger = logging.getLogger(__name__)


def _token_payload(user):
    return {
        'token': issue_token(user),
        'user': user.to_private_dict(),
    }


class RegisterResource(Resource):
    """Create an account and sign the caller in"""

    @auth_rate_limited
    @handle_errors("Failed to register user")
    def post(self):
        payload = load(RegisterSchema, request.get_json(silent=True))
        user = identity.register(payload)
        return success_response(_token_payload(user), "User registered successfully", 201)


class LoginResource(Resource):

    @auth_rate_limited
    @handle_errors("Failed to log in")
    def post(self):
        payload = load(LoginSchema, request.get_json(silent=True))
        user = identity.authenticate(payload.email, payload.password)
        logger.info("User %s logged in", user.id)
        return success_response(_token_payload(user), "Login successful")


class CurrentSessionResource(Resource):
    """The identity behind the bearer token"""

    @token_required
    @handle_errors("Failed to fetch current user")
    def get(self):
        return success_response(current_user().to_private_dict(), "Current user retrieved")


class RefreshTokenResource(Resource):

    @token_required
    @handle_errors("Failed to refresh token")
    def post(self):
        return success_response(_token_payload(current_user()), "Token refreshed")


class LogoutResource(Resource):
    """Tokens are stateless; logging out only records last activity"""

    @token_required
    @handle_errors("Failed to log out")
    def post(self):
        identity.touch(current_user())
        return success_response(None, "Logout successful")


class ChangePasswordResource(Resource):

    @token_required
    @auth_rate_limited
    @handle_errors("Failed to change password")
    def post(self):
        payload = load(ChangePasswordSchema, request.get_json(silent=True))
        identity.change_password(current_user(), payload.current_password, payload.new_password)
        return success_response(None, "Password changed successfully")
