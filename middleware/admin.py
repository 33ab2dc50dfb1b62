import logging
from functools import wraps

from middleware.auth import current_session
from utils.errors import Forbidden, Unauthorized
from utils.response import exception_response

logger = logging.getLogger(__name__)


def admin_required(f):
    """
    Decorator to require the admin role for accessing routes
    Must be used after @token_required
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        session = current_session()

        if not session:
            return exception_response(Unauthorized())

        if not session.is_admin:
            logger.warning("User %s denied access to admin route", session.user_id)
            return exception_response(Forbidden("Admin access required"))

        return f(*args, **kwargs)

    return decorated_function
