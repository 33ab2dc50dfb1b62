# models/users.py
import uuid
from sqlalchemy import (
    Column, String, Text, DateTime, Integer, Float, JSON, Index, CheckConstraint, event, func
)
from sqlalchemy_serializer import SerializerMixin
from schemas import limits
from .base import db, utcnow

ROLES = ('user', 'admin')
STATUSES = ('active', 'banned', 'suspended')
VISIBILITIES = ('public', 'private')

# Separates skills in User.skills_index; never appears inside a normalised skill
SKILL_SEPARATOR = "\n"


def default_availability():
    return {'weekends': False, 'evenings': False, 'weekdays': False, 'custom': ''}


class User(db.Model, SerializerMixin):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Account
    name = Column(String(limits.NAME_MAX), nullable=False, index=True)
    email = Column(String(limits.EMAIL_MAX), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(db.Enum(*ROLES, name='user_role'), nullable=False, default='user')
    status = Column(db.Enum(*STATUSES, name='user_status'), nullable=False, default='active')

    # Profile
    bio = Column(Text, nullable=True, default='')
    location = Column(String(limits.LOCATION_MAX), nullable=True, default='')
    profile_photo = Column(String(limits.PHOTO_URL_MAX), nullable=True)
    profile_visibility = Column(
        db.Enum(*VISIBILITIES, name='profile_visibility'), nullable=False, default='public'
    )
    skills_offered = Column(JSON, nullable=False, default=list)
    skills_wanted = Column(JSON, nullable=False, default=list)
    availability = Column(JSON, nullable=False, default=default_availability)
    # Lower-cased offered and wanted skills, one per line, for directory search
    skills_index = Column(Text, nullable=False, default='')

    # Aggregates
    rating = Column(Float, nullable=False, default=0.0)
    rating_count = Column(Integer, nullable=False, default=0)
    swap_count = Column(Integer, nullable=False, default=0)

    # Timestamps
    banned_at = Column(DateTime, nullable=True)
    last_active = Column(DateTime, nullable=True, default=utcnow)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_users_email_lower", func.lower(email), unique=True),
        Index("ix_users_status_visibility", "status", "profile_visibility"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="rating_range"),
    )

    PUBLIC_FIELDS = (
        'id', 'name', 'role', 'bio', 'location', 'profile_photo', 'profile_visibility',
        'skills_offered', 'skills_wanted', 'availability',
        'rating', 'rating_count', 'swap_count', 'created_at',
    )
    PRIVATE_FIELDS = PUBLIC_FIELDS + ('email', 'status', 'last_active', 'updated_at')
    ADMIN_FIELDS = PRIVATE_FIELDS + ('banned_at',)

    serialize_only = PUBLIC_FIELDS
    datetime_format = '%Y-%m-%dT%H:%M:%SZ'

    @property
    def is_admin(self):
        return self.role == 'admin'

    @property
    def is_active(self):
        return self.status == 'active'

    def to_public_dict(self):
        return self.to_dict(only=self.PUBLIC_FIELDS)

    def to_private_dict(self):
        return self.to_dict(only=self.PRIVATE_FIELDS)

    def to_admin_dict(self):
        return self.to_dict(only=self.ADMIN_FIELDS)

    def to_summary_dict(self):
        return self.to_dict(only=('id', 'name', 'profile_photo', 'rating'))

    def __repr__(self):
        return f'<User {self.email}>'


def normalize_skill(skill):
    """Lower-case and collapse whitespace so skills compare per element"""
    return ' '.join(str(skill).split()).lower()


def build_skills_index(*skill_lists):
    skills = [normalize_skill(s) for skills in skill_lists for s in (skills or [])]
    skills = [s for s in skills if s]
    if not skills:
        return ''
    return SKILL_SEPARATOR + SKILL_SEPARATOR.join(skills) + SKILL_SEPARATOR


@event.listens_for(User, 'before_insert')
@event.listens_for(User, 'before_update')
def refresh_skills_index(mapper, connection, target):
    target.skills_index = build_skills_index(target.skills_offered, target.skills_wanted)
