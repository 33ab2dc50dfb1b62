import logging
from functools import wraps
from typing import Any, Callable, Dict, Optional

from flask import request

from models import db
from schemas import limits
from utils.errors import SkillSwapError

logger = logging.getLogger(__name__)


def success_response(data: Any = None, message: str = "Success", status_code: int = 200):
    """Standard success response format for Flask-RESTful"""
    response = {
        "success": True,
        "message": message,
        "data": data
    }
    return response, status_code


def error_response(message: str = "Error", status_code: int = 400, details: Optional[Dict] = None):
    """Standard error response format for Flask-RESTful"""
    response = {
        "success": False,
        "error": {
            "message": message,
            "code": status_code,
            "details": details or {}
        }
    }
    return response, status_code


def exception_response(error: SkillSwapError):
    return error_response(error.message, error.status_code, error.details)


def paginated_response(data: list, total: int, page: int, per_page: int, **kwargs):
    """Standard paginated response format for Flask-RESTful"""
    response = {
        "success": True,
        "data": data,
        "pagination": {
            "total": total,
            "page": page,
            "per_page": per_page,
            "pages": (total + per_page - 1) // per_page
        },
        **kwargs
    }
    return response, 200


def pagination_args(default_per_page: int = limits.DEFAULT_PAGE_SIZE):
    """Read ?page and ?limit, clamped to sane bounds"""
    page = request.args.get('page', 1, type=int) or 1
    per_page = request.args.get('limit', default_per_page, type=int) or default_per_page
    return max(page, 1), min(max(per_page, 1), limits.MAX_PAGE_SIZE)


def paginate(query, serialize: Callable, default_per_page: int = limits.DEFAULT_PAGE_SIZE, **kwargs):
    page, per_page = pagination_args(default_per_page)
    result = query.paginate(page=page, per_page=per_page, error_out=False)
    return paginated_response(
        [serialize(item) for item in result.items], result.total, page, per_page, **kwargs
    )


def handle_errors(failure_message: str):
    """
    Map domain errors raised inside a resource method onto error responses.

    Any pending database work is rolled back first, so a failed request
    never leaves a partial mutation behind. Unexpected exceptions are logged
    and reported as an opaque 500 carrying ``failure_message``.
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except SkillSwapError as e:
                db.session.rollback()
                logger.info("%s: %s (%s)", f.__qualname__, e.message, e.status_code)
                return exception_response(e)
            except Exception:
                db.session.rollback()
                logger.exception(failure_message)
                return error_response(failure_message, 500)
        return wrapper
    return decorator
