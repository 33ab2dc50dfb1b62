import uuid
from sqlalchemy_serializer import SerializerMixin
from schemas import limits
from .base import db, utcnow

ANNOUNCEMENT_TYPES = ('info', 'warning', 'success', 'error')


class Announcement(db.Model, SerializerMixin):
    __tablename__ = "announcements"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = db.Column(db.String(limits.ANNOUNCEMENT_TITLE_MAX), nullable=False)
    message = db.Column(db.String(limits.ANNOUNCEMENT_MESSAGE_MAX), nullable=False)
    type = db.Column(db.Enum(*ANNOUNCEMENT_TYPES, name='announcement_type'), nullable=False, default='info')
    created_by = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.Index('idx_announcements_active_created', 'is_active', 'created_at'),
    )

    serialize_only = ('id', 'title', 'message', 'type', 'created_by', 'is_active', 'created_at')
    datetime_format = '%Y-%m-%dT%H:%M:%SZ'
