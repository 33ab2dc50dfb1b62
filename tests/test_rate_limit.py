"""Fixed-window limiter on auth routes and the Redis-backed read cache."""

import logging

import redis
from flask import Flask

import utils.cache
from utils.cache import CacheManager, build_rating_average_cache_key, init_cache


def _login(client):
    return client.post('/auth/login', json={'email': 'nobody@example.com', 'password': 'whatever'})


class TestAuthRateLimit:

    def test_disabled_without_redis(self, app, client):
        app.config['RATE_LIMIT_ENABLED'] = True
        for _ in range(10):
            assert _login(client).status_code == 401

    def test_blocks_after_limit(self, app, client, mock_redis):
        app.config['RATE_LIMIT_ENABLED'] = True
        app.config['AUTH_RATE_LIMIT'] = 2
        mock_redis.incr.side_effect = [1, 2, 3]
        mock_redis.ttl.return_value = 840

        assert _login(client).status_code == 401
        assert _login(client).status_code == 401

        blocked = _login(client)
        assert blocked.status_code == 429
        assert blocked.get_json()['error']['details'] == {'retry_after': 840}

        mock_redis.expire.assert_called_once()
        key = mock_redis.incr.call_args[0][0]
        assert key.startswith('ratelimit:') and key.endswith(':127.0.0.1')

    def test_auth_routes_share_one_bucket(self, app, client, mock_redis, make_user, auth_headers):
        app.config['RATE_LIMIT_ENABLED'] = True
        mock_redis.incr.return_value = 1
        headers = auth_headers(make_user())

        client.post('/auth/register', json={})
        _login(client)
        client.post('/auth/change-password', headers=headers, json={})

        keys = {c[0][0] for c in mock_redis.incr.call_args_list}
        assert keys == {'ratelimit:auth:127.0.0.1'}
        assert mock_redis.incr.call_count == 3

    def test_limit_spans_auth_routes(self, app, client, mock_redis):
        app.config['RATE_LIMIT_ENABLED'] = True
        app.config['AUTH_RATE_LIMIT'] = 1
        mock_redis.incr.side_effect = [1, 2]
        mock_redis.ttl.return_value = 600

        assert _login(client).status_code == 401
        assert client.post('/auth/register', json={}).status_code == 429

    def test_forwarded_address_is_the_client(self, app, client, mock_redis):
        app.config['RATE_LIMIT_ENABLED'] = True
        mock_redis.incr.return_value = 1

        client.post('/auth/login', json={}, headers={'X-Forwarded-For': '203.0.113.7, 10.0.0.1'})
        assert mock_redis.incr.call_args[0][0].endswith(':203.0.113.7')

    def test_redis_failure_lets_request_through(self, app, client, mock_redis):
        app.config['RATE_LIMIT_ENABLED'] = True
        mock_redis.incr.side_effect = redis.ConnectionError('down')

        assert _login(client).status_code == 401

    def test_config_switch_disables_limiter(self, client, mock_redis):
        _login(client)
        mock_redis.incr.assert_not_called()


class TestCache:

    def test_average_is_served_from_cache(self, client, mock_redis, make_user):
        user = make_user()
        cached = '{"average_rating": 4.5, "total_ratings": 2, "rating_distribution": {}}'
        mock_redis.get.return_value = cached

        data = client.get(f'/ratings/average/{user.id}').get_json()['data']
        assert data['average_rating'] == 4.5
        mock_redis.get.assert_called_with(build_rating_average_cache_key(user.id))

    def test_average_is_written_to_cache(self, client, mock_redis, make_user):
        user = make_user()
        client.get(f'/ratings/average/{user.id}')

        key, ttl, _ = mock_redis.setex.call_args[0]
        assert key == build_rating_average_cache_key(user.id)
        assert ttl > 0

    def test_invalidate_user_cache_drops_average_and_browse_pages(self, mock_redis):
        mock_redis.scan_iter.side_effect = lambda match: iter([match])
        CacheManager.invalidate_user_cache('u1')

        patterns = [call.kwargs['match'] for call in mock_redis.scan_iter.call_args_list]
        assert patterns == [build_rating_average_cache_key('u1'), 'users:browse:*']
        assert mock_redis.delete.call_count == 2

    def test_errors_degrade_to_cache_miss(self, mock_redis):
        mock_redis.get.side_effect = redis.ConnectionError('down')
        assert CacheManager.get('anything') is None


class TestStartupWarning:

    def _init(self, monkeypatch, **config):
        monkeypatch.setattr(utils.cache, 'redis_client', None)
        app = Flask(__name__)
        app.config.update(config)
        return init_cache(app)

    def test_warns_when_limiter_has_no_redis(self, monkeypatch, caplog):
        with caplog.at_level(logging.WARNING, logger='utils.cache'):
            assert self._init(monkeypatch, REDIS_URL=None, RATE_LIMIT_ENABLED=True) is None
        assert 'auth rate limiting is off' in caplog.text

    def test_warns_when_redis_is_unreachable(self, monkeypatch, caplog):
        def refuse(*args, **kwargs):
            raise redis.ConnectionError('refused')
        monkeypatch.setattr(redis.Redis, 'from_url', refuse)

        with caplog.at_level(logging.WARNING, logger='utils.cache'):
            self._init(monkeypatch, REDIS_URL='redis://localhost:1', RATE_LIMIT_ENABLED=True)
        assert 'auth rate limiting is off' in caplog.text

    def test_quiet_when_limiter_is_off(self, monkeypatch, caplog):
        with caplog.at_level(logging.WARNING, logger='utils.cache'):
            self._init(monkeypatch, REDIS_URL=None, RATE_LIMIT_ENABLED=False)
        assert 'rate limiting' not in caplog.text
