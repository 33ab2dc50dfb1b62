import math
import uuid
from sqlalchemy import text
from sqlalchemy_serializer import SerializerMixin
from schemas import limits
from .base import db, utcnow

SWAP_STATUSES = ('pending', 'accepted', 'rejected', 'cancelled', 'completed')
REPORT_REASONS = ('inappropriate', 'spam', 'fake_profile', 'no_show', 'other')


class SwapRequest(db.Model, SerializerMixin):
    __tablename__ = "swap_requests"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    requester_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    recipient_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    requested_skill = db.Column(db.String(limits.SKILL_MAX), nullable=False)
    offered_skill = db.Column(db.String(limits.SKILL_MAX), nullable=False)
    message = db.Column(db.Text, nullable=False)
    status = db.Column(db.Enum(*SWAP_STATUSES, name='swap_status'), nullable=False, default='pending')

    # Identifies "the same pair" for the one-pending-request rule
    pair_key = db.Column(db.String(80), nullable=False)

    accepted_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)
    cancelled_at = db.Column(db.DateTime, nullable=True)
    cancelled_by = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    cancellation_reason = db.Column(db.String(limits.CANCEL_REASON_MAX), nullable=True)

    is_reported = db.Column(db.Boolean, nullable=False, default=False)
    report_reason = db.Column(db.Enum(*REPORT_REASONS, name='report_reason'), nullable=True)
    report_details = db.Column(db.String(limits.REPORT_DETAILS_MAX), nullable=True)
    reported_by = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    reported_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    requester = db.relationship('User', foreign_keys=[requester_id], lazy='joined')
    recipient = db.relationship('User', foreign_keys=[recipient_id], lazy='joined')

    __table_args__ = (
        db.CheckConstraint('requester_id != recipient_id', name='check_no_self_request'),
        # At most one pending request per pair; settled requests leave the index
        db.Index(
            'uq_swap_requests_pending_pair', 'pair_key', unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
        db.Index('idx_swap_requester_status', 'requester_id', 'status'),
        db.Index('idx_swap_recipient_status', 'recipient_id', 'status'),
        db.Index('idx_swap_status_created', 'status', 'created_at'),
        db.Index('idx_swap_reported', 'is_reported'),
    )

    serialize_only = (
        'id', 'requester_id', 'recipient_id', 'requested_skill', 'offered_skill', 'message',
        'status', 'accepted_at', 'completed_at', 'cancelled_at', 'cancelled_by',
        'cancellation_reason', 'is_reported', 'created_at', 'updated_at',
    )
    datetime_format = '%Y-%m-%dT%H:%M:%SZ'

    REPORT_FIELDS = ('report_reason', 'report_details', 'reported_by', 'reported_at')

    def is_party(self, user_id):
        return user_id in (self.requester_id, self.recipient_id)

    def other_party(self, user_id):
        return self.recipient_id if user_id == self.requester_id else self.requester_id

    @property
    def duration_in_days(self):
        if not self.created_at or not self.completed_at:
            return None
        seconds = (self.completed_at - self.created_at).total_seconds()
        return math.ceil(seconds / 86400)

    def to_api_dict(self, include_report=False):
        data = self.to_dict()
        data['requester'] = self.requester.to_summary_dict() if self.requester else None
        data['recipient'] = self.recipient.to_summary_dict() if self.recipient else None
        data['duration_in_days'] = self.duration_in_days
        if include_report:
            data.update(self.to_dict(only=self.REPORT_FIELDS))
        return data

    def __repr__(self):
        return f'<SwapRequest {self.id} {self.status}>'
