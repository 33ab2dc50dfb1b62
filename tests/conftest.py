"""Shared fixtures: an app over in-memory SQLite, a test client and user factories."""

from itertools import count
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

import utils.cache
from app import create_app
from models import db, User
from services import swaps
from utils.security import hash_password, issue_token

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    'JWT_SECRET_KEY': 'test-secret',
    'REDIS_URL': None,
    'RATE_LIMIT_ENABLED': False,
    'LOG_LEVEL': 'WARNING',
}

_sequence = count(1)


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def mock_redis(monkeypatch):
    """Swap the module-level Redis client for a MagicMock"""
    client = MagicMock()
    client.get.return_value = None
    client.scan_iter.return_value = iter([])
    monkeypatch.setattr(utils.cache, 'redis_client', client)
    return client


@pytest.fixture
def make_user(app):
    """Insert a user directly; keyword arguments override column defaults"""
    def factory(name=None, password='secret123', **columns):
        n = next(_sequence)
        user = User(
            name=name or f'User {n}',
            email=columns.pop('email', f'user{n}@example.com'),
            password_hash=hash_password(password),
            **columns
        )
        db.session.add(user)
        db.session.commit()
        return user
    return factory


@pytest.fixture
def auth_headers(app):
    def build(user):
        return {'Authorization': f'Bearer {issue_token(user)}'}
    return build


@pytest.fixture
def make_swap(app):
    """Open a pending request through the service layer"""
    def factory(requester, recipient, requested_skill='Guitar', offered_skill='Cooking',
                message='I would love to learn from you!'):
        payload = SimpleNamespace(
            recipient_id=recipient.id,
            requested_skill=requested_skill,
            offered_skill=offered_skill,
            message=message,
        )
        return swaps.create_request(requester, payload)
    return factory


@pytest.fixture
def completed_swap(make_user, make_swap):
    """A swap between two fresh users that went pending -> accepted -> completed"""
    requester = make_user(name='Alice')
    recipient = make_user(name='Bob')
    swap = make_swap(requester, recipient)
    swaps.accept(recipient, swap.id)
    swap = swaps.complete(requester, swap.id)
    return SimpleNamespace(swap=swap, requester=requester, recipient=recipient)
