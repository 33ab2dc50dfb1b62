"""
Identity store: registration, credentials, profiles, account status and
the rating aggregate kept on each user.
"""
import logging
import math
from typing import Iterable, Optional, Tuple

from flask import current_app
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError

from models import db, User, Rating, utcnow
from models.users import normalize_skill
from utils.cache import CacheManager, BROWSE_CACHE_PATTERN
from utils.errors import (
    AccountNotActive,
    DuplicateEmail,
    Forbidden,
    InvalidCredentials,
    NotFound,
)
from utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"

PROFILE_FIELDS = (
    'name', 'bio', 'location', 'skills_offered', 'skills_wanted',
    'availability', 'profile_visibility', 'profile_photo',
)


def find_by_email(email: str) -> Optional[User]:
    return User.query.filter(func.lower(User.email) == email.strip().lower()).first()


def get_user(user_id: str) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def register(payload) -> User:
    """Create an account from a validated RegisterSchema"""
    if find_by_email(payload.email):
        raise DuplicateEmail()

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        skills_offered=list(payload.skills_offered),
        skills_wanted=list(payload.skills_wanted),
        bio=payload.bio,
        location=payload.location,
    )
    if payload.availability is not None:
        user.availability = payload.availability.model_dump()

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same address
        db.session.rollback()
        raise DuplicateEmail()

    CacheManager.delete_pattern(BROWSE_CACHE_PATTERN)
    logger.info("Registered user %s", user.id)
    return user


def authenticate(email: str, password: str) -> User:
    user = find_by_email(email)

    if not user or not verify_password(user.password_hash, password):
        logger.warning("Failed login attempt for %s", email)
        raise InvalidCredentials()

    if not user.is_active:
        logger.warning("Login refused for %s account %s", user.status, user.id)
        raise AccountNotActive()

    user.last_active = utcnow()
    db.session.commit()
    return user


def touch(user: User):
    user.last_active = utcnow()
    db.session.commit()


def change_password(user: User, current_password: str, new_password: str):
    if not verify_password(user.password_hash, current_password):
        raise InvalidCredentials("Current password is incorrect")

    user.password_hash = hash_password(new_password)
    db.session.commit()
    logger.info("Password changed for user %s", user.id)


def view_profile(viewer: Optional[User], user_id: str) -> dict:
    """Profile projection as seen by ``viewer`` (None for anonymous)"""
    user = get_user(user_id)
    is_self = viewer is not None and viewer.id == user.id
    is_admin = viewer is not None and viewer.is_admin

    if is_admin:
        return user.to_admin_dict()
    if is_self:
        return user.to_private_dict()
    if not user.is_active:
        raise NotFound("User not found")
    if user.profile_visibility == 'private':
        raise Forbidden("Profile is private")
    return user.to_public_dict()


def update_profile(caller: User, user_id: str, changes: dict) -> User:
    user = get_user(user_id)

    if caller.id != user.id and not caller.is_admin:
        raise Forbidden("Not authorized to update this profile")

    for key, value in changes.items():
        if key not in PROFILE_FIELDS:
            continue
        if key in ('bio', 'location') and value is None:
            value = ''
        setattr(user, key, value)

    db.session.commit()
    CacheManager.invalidate_user_cache(user.id)
    logger.info("Updated profile for user %s (by %s)", user.id, caller.id)
    return user


def set_status(admin: User, user_id: str, status: str) -> User:
    user = get_user(user_id)

    if user.id == admin.id:
        raise Forbidden("Cannot change your own account status")

    user.status = status
    user.banned_at = utcnow() if status == 'banned' else None
    db.session.commit()

    CacheManager.invalidate_user_cache(user.id)
    logger.info("Admin %s set status of %s to %s", admin.id, user.id, status)
    return user


def set_role(admin: User, user_id: str, role: str) -> User:
    user = get_user(user_id)

    if user.id == admin.id:
        raise Forbidden("Cannot change your own role")

    user.role = role
    db.session.commit()
    CacheManager.delete_pattern(BROWSE_CACHE_PATTERN)
    logger.info("Admin %s set role of %s to %s", admin.id, user.id, role)
    return user


def round_half_up(value: float, digits: int) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def rating_aggregate(scores: Iterable[int], digits: int = 1) -> Tuple[float, int]:
    """Mean of ``scores`` rounded half-up, and their count; (0.0, 0) when empty"""
    scores = list(scores)
    if not scores:
        return 0.0, 0
    return round_half_up(sum(scores) / len(scores), digits), len(scores)


def recompute_rating_aggregate(user_id: str) -> User:
    """
    Rebuild a user's rating and rating_count from every rating addressed
    to them. Flushes but does not commit; callers commit it together with
    the rating write that triggered it.
    """
    user = get_user(user_id)
    db.session.flush()

    scores = [score for (score,) in db.session.query(Rating.rating).filter(Rating.to_user_id == user_id)]
    user.rating, user.rating_count = rating_aggregate(
        scores, current_app.config['RATING_ROUND_DIGITS']
    )
    db.session.flush()
    return user


def contains_pattern(term: str) -> str:
    """``%term%`` for LIKE, with the wildcards in ``term`` matched literally"""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace('%', LIKE_ESCAPE + '%')
        .replace('_', LIKE_ESCAPE + '_')
    )
    return f"%{escaped}%"


def browse_query(skill: Optional[str] = None, location: Optional[str] = None,
                 search: Optional[str] = None):
    """
    Active, public users, best rated first.

    ``skill`` is a case-insensitive substring of any one offered or wanted
    skill; it never matches across two skills.
    """
    query = User.query.filter(
        User.status == 'active',
        User.profile_visibility == 'public',
    )

    if skill and normalize_skill(skill):
        query = query.filter(
            User.skills_index.like(contains_pattern(normalize_skill(skill)), escape=LIKE_ESCAPE)
        )

    if location:
        query = query.filter(User.location.ilike(contains_pattern(location.strip()), escape=LIKE_ESCAPE))

    if search and search.strip():
        pattern = contains_pattern(search.strip())
        query = query.filter(or_(
            User.name.ilike(pattern, escape=LIKE_ESCAPE),
            User.bio.ilike(pattern, escape=LIKE_ESCAPE),
            User.skills_index.like(contains_pattern(normalize_skill(search)), escape=LIKE_ESCAPE),
        ))

    return query.order_by(User.rating.desc(), User.swap_count.desc(), User.created_at.desc())


def stats() -> dict:
    total_users, active_users, banned_users, total_swaps, avg_rating = db.session.query(
        func.count(User.id),
        func.sum(db.case((User.status == 'active', 1), else_=0)),
        func.sum(db.case((User.status == 'banned', 1), else_=0)),
        func.sum(User.swap_count),
        func.avg(User.rating),
    ).one()

    return {
        'total_users': total_users or 0,
        'active_users': int(active_users or 0),
        'banned_users': int(banned_users or 0),
        # each completed swap counts once per party
        'total_swaps': int(total_swaps or 0),
        'average_rating': round_half_up(float(avg_rating or 0), 1),
    }
