import uuid
from sqlalchemy_serializer import SerializerMixin
from schemas import limits
from .base import db, utcnow

RATING_LABELS = {
    1: 'Poor',
    2: 'Fair',
    3: 'Good',
    4: 'Very Good',
    5: 'Excellent',
}


class Rating(db.Model, SerializerMixin):
    __tablename__ = "ratings"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    from_user_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    to_user_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    swap_id = db.Column(db.String(36), db.ForeignKey('swap_requests.id', ondelete='CASCADE'), nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.String(limits.RATING_COMMENT_MAX), nullable=True, default='')
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    from_user = db.relationship('User', foreign_keys=[from_user_id], lazy='joined')
    to_user = db.relationship('User', foreign_keys=[to_user_id], lazy='joined')

    # One rating per rater per swap
    __table_args__ = (
        db.UniqueConstraint('swap_id', 'from_user_id', name='uq_rating_swap_rater'),
        db.CheckConstraint('rating >= 1 AND rating <= 5', name='check_rating_range'),
        db.CheckConstraint('from_user_id != to_user_id', name='check_no_self_rating'),
        db.Index('idx_rating_to_created', 'to_user_id', 'created_at'),
        db.Index('idx_rating_from_created', 'from_user_id', 'created_at'),
    )

    serialize_only = (
        'id', 'from_user_id', 'to_user_id', 'swap_id', 'rating', 'comment',
        'created_at', 'updated_at',
    )
    datetime_format = '%Y-%m-%dT%H:%M:%SZ'

    @property
    def rating_text(self):
        return RATING_LABELS.get(self.rating, 'Unknown')

    def to_api_dict(self):
        data = self.to_dict()
        data['rating_text'] = self.rating_text
        data['from_user'] = self.from_user.to_summary_dict() if self.from_user else None
        data['to_user'] = self.to_user.to_summary_dict() if self.to_user else None
        return data

    def __repr__(self):
        return f'<Rating {self.rating} {self.from_user_id}->{self.to_user_id}>'
