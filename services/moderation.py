import logging
from datetime import datetime, time, timedelta
from typing import Optional

from sqlalchemy import func, or_

from models import db, utcnow, User, SwapRequest, Rating, Announcement
from services import identity
from utils.cache import CacheManager
from utils.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

ACTIVITY_DAYS = 7


def _counts_by(column):
    return {key: count for key, count in db.session.query(column, func.count()).group_by(column).all()}


def dashboard() -> dict:
    recent_users = User.query.order_by(User.created_at.desc()).limit(5).all()
    recent_swaps = SwapRequest.query.order_by(SwapRequest.created_at.desc()).limit(5).all()

    return {
        'total_users': User.query.count(),
        'total_swaps': SwapRequest.query.count(),
        'total_ratings': Rating.query.count(),
        'reported_swaps': SwapRequest.query.filter_by(is_reported=True).count(),
        'swap_stats': _counts_by(SwapRequest.status),
        'user_stats': {
            'by_role': _counts_by(User.role),
            'by_status': _counts_by(User.status),
        },
        'recent_users': [u.to_dict(only=('id', 'name', 'email', 'role', 'status', 'created_at'))
                         for u in recent_users],
        'recent_swaps': [s.to_api_dict() for s in recent_swaps],
    }


def _daily_counts(column, since) -> dict:
    day = func.date(column)
    rows = db.session.query(day, func.count()).filter(column >= since).group_by(day).all()
    # SQLite hands back text, PostgreSQL a date
    return {str(d): count for d, count in rows}


def analytics(period_days: int = 30) -> dict:
    """
    Growth over the last ``period_days`` plus a day-by-day count of new
    swaps and members for the last week, oldest day first.
    """
    if period_days < 1:
        raise ValidationError("period must be a positive number of days", details={'period': period_days})

    now = utcnow()
    since = now - timedelta(days=period_days)
    average = db.session.query(func.avg(Rating.rating)).scalar()

    today = now.date()
    first_day = today - timedelta(days=ACTIVITY_DAYS - 1)
    window_start = datetime.combine(first_day, time.min)
    swaps_per_day = _daily_counts(SwapRequest.created_at, window_start)
    users_per_day = _daily_counts(User.created_at, window_start)

    daily_activity = []
    for offset in range(ACTIVITY_DAYS):
        date = (first_day + timedelta(days=offset)).isoformat()
        daily_activity.append({
            'date': date,
            'swaps': swaps_per_day.get(date, 0),
            'users': users_per_day.get(date, 0),
        })

    return {
        'period_days': period_days,
        'overview': {
            'total_users': User.query.count(),
            'new_users': User.query.filter(User.created_at >= since).count(),
            'total_swaps': SwapRequest.query.count(),
            'new_swaps': SwapRequest.query.filter(SwapRequest.created_at >= since).count(),
            'completed_swaps': SwapRequest.query.filter_by(status='completed').count(),
            'pending_swaps': SwapRequest.query.filter_by(status='pending').count(),
            'total_ratings': Rating.query.count(),
            'average_rating': identity.round_half_up(float(average), 1) if average is not None else 0.0,
        },
        'daily_activity': daily_activity,
    }


def users_query(search: Optional[str] = None, role: Optional[str] = None, status: Optional[str] = None):
    query = User.query

    if search:
        pattern = identity.contains_pattern(search.strip())
        query = query.filter(or_(
            User.name.ilike(pattern, escape=identity.LIKE_ESCAPE),
            User.email.ilike(pattern, escape=identity.LIKE_ESCAPE),
        ))
    if role:
        query = query.filter(User.role == role)
    if status:
        query = query.filter(User.status == status)

    return query.order_by(User.created_at.desc())


def user_detail(user_id: str) -> dict:
    user = identity.get_user(user_id)

    swaps = SwapRequest.query.filter(or_(
        SwapRequest.requester_id == user_id,
        SwapRequest.recipient_id == user_id,
    )).order_by(SwapRequest.created_at.desc()).all()

    ratings = Rating.query.filter(or_(
        Rating.from_user_id == user_id,
        Rating.to_user_id == user_id,
    )).order_by(Rating.created_at.desc()).all()

    return {
        'user': user.to_admin_dict(),
        'swaps': [s.to_api_dict(include_report=True) for s in swaps],
        'ratings': [r.to_api_dict() for r in ratings],
    }


def swaps_query(status: Optional[str] = None, reported: Optional[bool] = None, search: Optional[str] = None):
    query = SwapRequest.query

    if status:
        query = query.filter(SwapRequest.status == status)
    if reported is not None:
        query = query.filter(SwapRequest.is_reported == reported)
    if search:
        pattern = identity.contains_pattern(search.strip())
        query = query.filter(or_(
            SwapRequest.requested_skill.ilike(pattern, escape=identity.LIKE_ESCAPE),
            SwapRequest.offered_skill.ilike(pattern, escape=identity.LIKE_ESCAPE),
            SwapRequest.message.ilike(pattern, escape=identity.LIKE_ESCAPE),
        ))

    return query.order_by(SwapRequest.created_at.desc())


def reports_query():
    return SwapRequest.query.filter_by(is_reported=True).order_by(SwapRequest.reported_at.desc())


def delete_swap(admin: User, swap_id: str):
    """Admin override: remove a swap request in any state, with its ratings"""
    swap = db.session.get(SwapRequest, swap_id)
    if not swap:
        raise NotFound("Swap request not found")

    rated_users = {
        to_user_id for (to_user_id,) in
        db.session.query(Rating.to_user_id).filter(Rating.swap_id == swap_id).distinct()
    }
    Rating.query.filter_by(swap_id=swap_id).delete(synchronize_session=False)
    db.session.delete(swap)

    for user_id in rated_users:
        identity.recompute_rating_aggregate(user_id)
    db.session.commit()

    for user_id in rated_users:
        CacheManager.invalidate_user_cache(user_id)
    logger.warning("Admin %s deleted swap request %s (%d ratings)", admin.id, swap_id, len(rated_users))


def ratings_query(score: Optional[int] = None, search: Optional[str] = None):
    query = Rating.query

    if score:
        query = query.filter(Rating.rating == score)
    if search:
        pattern = identity.contains_pattern(search.strip())
        query = query.filter(Rating.comment.ilike(pattern, escape=identity.LIKE_ESCAPE))

    return query.order_by(Rating.created_at.desc())


def create_announcement(admin: User, payload) -> Announcement:
    announcement = Announcement(
        title=payload.title,
        message=payload.message,
        type=payload.type,
        created_by=admin.id,
        is_active=True,
    )
    db.session.add(announcement)
    db.session.commit()

    logger.info("Admin %s published announcement %s", admin.id, announcement.id)
    return announcement


def deactivate_announcement(admin: User, announcement_id: str) -> Announcement:
    announcement = db.session.get(Announcement, announcement_id)
    if not announcement:
        raise NotFound("Announcement not found")

    announcement.is_active = False
    db.session.commit()

    logger.info("Admin %s deactivated announcement %s", admin.id, announcement_id)
    return announcement


def active_announcements():
    return Announcement.query.filter_by(is_active=True).order_by(Announcement.created_at.desc()).all()
