"""Shared fixtures for larasession tests."""

import sys
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from larasession.session.context import RequestContext
from larasession.session.stores import ArraySessionStore
from larasession.support import Config, EnvHelper


class FrozenClock:
    """Clock returning a fixed instant that tests move by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeContext(RequestContext):
    """In-memory request context recording every cookie write."""

    def __init__(self, cookies=None, headers=None, path='/', user_agent='pytest'):
        self._state = SimpleNamespace()
        self.cookies = dict(cookies or {})
        self.headers = dict(headers or {})
        self._path = path
        self._user_agent = user_agent
        self.cookie_reads = []
        self.cookie_writes = []
        self.cookie_deletes = []
        self.response_cookies = {}

    @property
    def state(self):
        return self._state

    @property
    def path(self):
        return self._path

    @property
    def user_agent(self):
        return self._user_agent

    def get_cookie(self, name, **options):
        self.cookie_reads.append((name, options))
        return self.cookies.get(name)

    def get_header(self, name):
        return self.headers.get(name)

    def set_cookie(self, name, value, **options):
        self.cookie_writes.append((name, value, options))
        self.response_cookies[name] = value

    def delete_cookie(self, name, **options):
        self.cookie_deletes.append((name, options))
        self.response_cookies[name] = None

    def next_request(self, **kwargs):
        """Context for the follow-up request, carrying this response's cookies."""
        cookies = dict(self.cookies)
        for name, value in self.response_cookies.items():
            if value is None:
                cookies.pop(name, None)
            else:
                cookies[name] = value
        return FakeContext(cookies=cookies, **kwargs)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    return ArraySessionStore()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Each test starts without runtime overrides, loaded config modules or SESSION_* env vars."""
    import os

    for key in list(os.environ):
        if key.startswith('SESSION_'):
            monkeypatch.delenv(key)

    Config.clear_runtime_overrides()
    Config.reload()
    EnvHelper.reset()
    yield
    Config.clear_runtime_overrides()
    Config.reload()
    EnvHelper.reset()
    for name in ('config', 'config.session', 'config.app'):
        sys.modules.pop(name, None)
