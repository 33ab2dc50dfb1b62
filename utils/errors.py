from typing import Dict, Optional


class SkillSwapError(Exception):
    """Base for errors that map onto an HTTP error response"""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(SkillSwapError):
    status_code = 400
    default_message = "Validation failed"


class DuplicateEmail(SkillSwapError):
    status_code = 400
    default_message = "User with this email already exists"


class DuplicatePendingRequest(SkillSwapError):
    status_code = 400
    default_message = "There is already a pending swap request between you and this user"


class DuplicateRating(SkillSwapError):
    status_code = 400
    default_message = "You have already rated this user for this swap"


class InvalidStateTransition(SkillSwapError):
    status_code = 400
    default_message = "Action not allowed in the current state"


class Unauthorized(SkillSwapError):
    status_code = 401
    default_message = "Authentication required"


class InvalidCredentials(SkillSwapError):
    status_code = 401
    default_message = "Invalid credentials"


class AccountNotActive(SkillSwapError):
    status_code = 401
    default_message = "Account is not active. Please contact support."


class Forbidden(SkillSwapError):
    status_code = 403
    default_message = "Not authorized to perform this action"


class NotFound(SkillSwapError):
    status_code = 404
    default_message = "Resource not found"


class RateLimited(SkillSwapError):
    status_code = 429
    default_message = "Too many authentication attempts, please try again later."
