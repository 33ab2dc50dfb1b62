"""
Swap request lifecycle.

    pending ──accept──> accepted ──complete──> completed
       │                   │
       ├──reject──> rejected
       └──cancel──> cancelled <──cancel──┘

Every transition is a conditional UPDATE guarded by the expected source
states, so a request that moved on concurrently fails the guard instead of
being overwritten. A transition and its side effects (swap counters) are
committed together or not at all.
"""
import logging
from typing import Optional

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from models import db, User, SwapRequest, utcnow
from utils.cache import CacheManager
from utils.errors import (
    DuplicatePendingRequest,
    Forbidden,
    InvalidStateTransition,
    NotFound,
    ValidationError,
)

logger = logging.getLogger(__name__)

# action -> (allowed source states, target state)
TRANSITIONS = {
    'accept': (('pending',), 'accepted'),
    'reject': (('pending',), 'rejected'),
    'cancel': (('pending', 'accepted'), 'cancelled'),
    'complete': (('accepted',), 'completed'),
}

LIST_TYPES = ('all', 'sent', 'received')


def pair_key(requester_id: str, recipient_id: str, scope: Optional[str] = None) -> str:
    """
    Key shared by every pending request that counts as "the same pair".

    With the symmetric scope a request from A to B and one from B to A share
    a key; with the directional scope they do not.
    """
    scope = scope or current_app.config.get('PENDING_REQUEST_SCOPE', 'symmetric')
    if scope == 'directional':
        return f"{requester_id}:{recipient_id}"
    low, high = sorted([requester_id, recipient_id])
    return f"{low}:{high}"


def get_request(swap_id: str) -> SwapRequest:
    swap = db.session.get(SwapRequest, swap_id)
    if not swap:
        raise NotFound("Swap request not found")
    return swap


def view_request(caller: User, swap_id: str) -> SwapRequest:
    swap = get_request(swap_id)
    if not swap.is_party(caller.id) and not caller.is_admin:
        raise Forbidden("Not authorized to view this swap request")
    return swap


def list_requests(caller: User, kind: str = 'all', status: Optional[str] = None):
    if kind not in LIST_TYPES:
        raise ValidationError("Invalid type parameter", {'type': f"must be one of {', '.join(LIST_TYPES)}"})

    query = SwapRequest.query
    if kind == 'sent':
        query = query.filter(SwapRequest.requester_id == caller.id)
    elif kind == 'received':
        query = query.filter(SwapRequest.recipient_id == caller.id)
    else:
        query = query.filter(or_(
            SwapRequest.requester_id == caller.id,
            SwapRequest.recipient_id == caller.id,
        ))

    if status:
        query = query.filter(SwapRequest.status == status)

    return query.order_by(SwapRequest.created_at.desc())


def create_request(requester: User, payload) -> SwapRequest:
    """Open a pending request from ``requester`` using a SwapRequestCreateSchema"""
    recipient_id = payload.recipient_id

    if recipient_id == requester.id:
        raise ValidationError("Cannot send swap request to yourself")

    recipient = db.session.get(User, recipient_id)
    if not recipient:
        raise NotFound("Recipient not found")

    if not recipient.is_active:
        raise ValidationError("Cannot send request to an inactive user")

    if recipient.profile_visibility == 'private':
        raise Forbidden("Cannot send request to private profile")

    key = pair_key(requester.id, recipient.id)
    existing = SwapRequest.query.filter_by(pair_key=key, status='pending').first()
    if existing:
        raise DuplicatePendingRequest()

    swap = SwapRequest(
        requester_id=requester.id,
        recipient_id=recipient.id,
        requested_skill=payload.requested_skill,
        offered_skill=payload.offered_skill,
        message=payload.message,
        status='pending',
        pair_key=key,
    )
    db.session.add(swap)

    try:
        db.session.commit()
    except IntegrityError:
        # The partial unique index caught a concurrent request for the same pair
        db.session.rollback()
        raise DuplicatePendingRequest()

    logger.info("Swap request %s created: %s -> %s", swap.id, requester.id, recipient.id)
    return swap


def _authorize(action: str, caller: User, swap: SwapRequest):
    if action in ('accept', 'reject'):
        if caller.id != swap.recipient_id:
            raise Forbidden(f"Only the recipient can {action} swap requests")
    elif not swap.is_party(caller.id):
        raise Forbidden(f"Not authorized to {action} this swap")


def _transition(action: str, caller: User, swap_id: str, **values) -> SwapRequest:
    sources, target = TRANSITIONS[action]
    swap = get_request(swap_id)

    _authorize(action, caller, swap)

    if swap.status not in sources:
        raise InvalidStateTransition(
            f"Cannot {action} a swap request that is {swap.status}",
            {'status': swap.status, 'allowed_from': list(sources)}
        )

    previous = swap.status
    now = utcnow()
    values.update(status=target, updated_at=now)
    if target in ('accepted', 'completed', 'cancelled'):
        values[f"{target}_at"] = now

    updated = SwapRequest.query.filter(
        SwapRequest.id == swap.id,
        SwapRequest.status.in_(sources),
    ).update(values, synchronize_session=False)

    if updated != 1:
        db.session.rollback()
        current = get_request(swap_id)
        raise InvalidStateTransition(
            f"Cannot {action} a swap request that is {current.status}",
            {'status': current.status, 'allowed_from': list(sources)}
        )

    if target == 'completed':
        User.query.filter(
            User.id.in_([swap.requester_id, swap.recipient_id])
        ).update({User.swap_count: User.swap_count + 1}, synchronize_session=False)

    db.session.commit()
    db.session.expire_all()

    logger.info("Swap request %s: %s -> %s by %s", swap_id, previous, target, caller.id)

    if target == 'completed':
        CacheManager.invalidate_user_cache(swap.requester_id)
        CacheManager.invalidate_user_cache(swap.recipient_id)

    return get_request(swap_id)


def accept(caller: User, swap_id: str) -> SwapRequest:
    return _transition('accept', caller, swap_id)


def reject(caller: User, swap_id: str) -> SwapRequest:
    return _transition('reject', caller, swap_id)


def cancel(caller: User, swap_id: str, reason: Optional[str] = None) -> SwapRequest:
    return _transition('cancel', caller, swap_id, cancelled_by=caller.id, cancellation_reason=reason)


def complete(caller: User, swap_id: str) -> SwapRequest:
    return _transition('complete', caller, swap_id)


def delete_request(caller: User, swap_id: str):
    """Requester withdraws a request that is still pending"""
    swap = get_request(swap_id)

    if caller.id != swap.requester_id:
        raise Forbidden("Only the requester can delete swap requests")

    deleted = SwapRequest.query.filter(
        SwapRequest.id == swap.id,
        SwapRequest.status == 'pending',
    ).delete(synchronize_session=False)

    if deleted != 1:
        db.session.rollback()
        raise InvalidStateTransition("Can only delete pending requests", {'status': swap.status})

    db.session.commit()
    db.session.expire_all()
    logger.info("Swap request %s deleted by requester %s", swap_id, caller.id)


def report(caller: User, swap_id: str, reason: str, details: Optional[str] = None) -> SwapRequest:
    """Flag a request for moderation; its status is left untouched"""
    swap = get_request(swap_id)

    swap.is_reported = True
    swap.report_reason = reason
    swap.report_details = details
    swap.reported_by = caller.id
    swap.reported_at = utcnow()
    db.session.commit()

    logger.warning("Swap request %s reported by %s: %s", swap.id, caller.id, reason)
    return swap
