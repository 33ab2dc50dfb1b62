"""
Post-completion ratings. Every write recomputes the rated user's aggregate
inside the same transaction as the rating itself.
"""
import logging
from datetime import timedelta

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from models import db, User, Rating, SwapRequest, utcnow
from services import identity
from utils.cache import CacheManager, CACHE_TTL_MEDIUM, build_rating_average_cache_key
from utils.errors import (
    DuplicateRating,
    Forbidden,
    InvalidStateTransition,
    NotFound,
    ValidationError,
)

logger = logging.getLogger(__name__)


def get_rating(rating_id: str) -> Rating:
    rating = db.session.get(Rating, rating_id)
    if not rating:
        raise NotFound("Rating not found")
    return rating


def submit(rater: User, payload) -> Rating:
    """Rate the other party of a completed swap (RatingCreateSchema payload)"""
    swap = db.session.get(SwapRequest, payload.swap_id)
    if not swap:
        raise NotFound("Swap not found")

    if swap.status != 'completed':
        raise InvalidStateTransition("Can only rate completed swaps", {'status': swap.status})

    if not swap.is_party(rater.id):
        raise Forbidden("You can only rate swaps you are involved in")

    if payload.to_user == rater.id:
        raise ValidationError("Cannot rate yourself")

    if payload.to_user != swap.other_party(rater.id):
        raise ValidationError("Can only rate users involved in the swap")

    existing = Rating.query.filter_by(swap_id=swap.id, from_user_id=rater.id).first()
    if existing:
        raise DuplicateRating()

    rating = Rating(
        from_user_id=rater.id,
        to_user_id=payload.to_user,
        swap_id=swap.id,
        rating=payload.rating,
        comment=payload.comment or '',
    )
    db.session.add(rating)

    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateRating()

    identity.recompute_rating_aggregate(payload.to_user)
    db.session.commit()

    CacheManager.invalidate_user_cache(payload.to_user)
    logger.info("Rating %s submitted: %s rated %s %s/5", rating.id, rater.id, payload.to_user, payload.rating)
    return rating


def edit(caller: User, rating_id: str, changes: dict) -> Rating:
    rating = get_rating(rating_id)

    if rating.from_user_id != caller.id:
        raise Forbidden("Not authorized to update this rating")

    window = timedelta(hours=current_app.config['RATING_EDIT_WINDOW_HOURS'])
    if utcnow() - rating.created_at > window:
        raise ValidationError(
            f"Rating can only be edited within {current_app.config['RATING_EDIT_WINDOW_HOURS']} hours of creation"
        )

    score_changed = False
    if changes.get('rating') is not None and changes['rating'] != rating.rating:
        rating.rating = changes['rating']
        score_changed = True
    if 'comment' in changes:
        rating.comment = changes['comment'] or ''

    if score_changed:
        identity.recompute_rating_aggregate(rating.to_user_id)
    db.session.commit()

    if score_changed:
        CacheManager.invalidate_user_cache(rating.to_user_id)
    logger.info("Rating %s updated by %s", rating.id, caller.id)
    return rating


def delete(caller: User, rating_id: str):
    rating = get_rating(rating_id)

    if rating.from_user_id != caller.id and not caller.is_admin:
        raise Forbidden("Not authorized to delete this rating")

    to_user_id = rating.to_user_id
    db.session.delete(rating)
    identity.recompute_rating_aggregate(to_user_id)
    db.session.commit()

    CacheManager.invalidate_user_cache(to_user_id)
    logger.info("Rating %s deleted by %s", rating_id, caller.id)


def average_for(user_id: str) -> dict:
    """Mean, count and per-score histogram of the ratings a user received"""
    cache_key = build_rating_average_cache_key(user_id)
    cached = CacheManager.get(cache_key)
    if cached is not None:
        return cached

    identity.get_user(user_id)

    scores = [score for (score,) in db.session.query(Rating.rating).filter(Rating.to_user_id == user_id)]
    average, total = identity.rating_aggregate(scores, current_app.config['RATING_ROUND_DIGITS'])

    distribution = {str(score): 0 for score in range(1, 6)}
    for score in scores:
        distribution[str(score)] += 1

    summary = {
        'average_rating': average,
        'total_ratings': total,
        'rating_distribution': distribution,
    }
    CacheManager.set(cache_key, summary, ttl=CACHE_TTL_MEDIUM)
    return summary


def ratings_for_user(user_id: str):
    """Ratings a user gave or received, newest first"""
    return Rating.query.filter(or_(
        Rating.from_user_id == user_id,
        Rating.to_user_id == user_id,
    )).order_by(Rating.created_at.desc())


def ratings_for_swap(swap_id: str):
    return Rating.query.filter_by(swap_id=swap_id).order_by(Rating.created_at.desc())
