"""Tests for the session() and rotate_session() helpers."""

from types import SimpleNamespace

import pytest

from larasession import helpers
from larasession.exceptions import SessionNotStartedError
from larasession.helpers import rotate_session, session
from larasession.session.record import SessionRecord
from larasession.session.session import Session


@pytest.fixture
def current_request(monkeypatch, clock):
    request = SimpleNamespace(ctx=SimpleNamespace())
    request.ctx.session = Session('abcdefghijklmnopqrstu', SessionRecord.new(clock()), clock=clock)
    monkeypatch.setattr(helpers, '_current_request', lambda: request)
    return request


def test_session_returns_values_and_defaults(current_request):
    current_request.ctx.session.set('user_id', 42)

    assert session('user_id') == 42
    assert session('cart', []) == []
    assert session() is current_request.ctx.session


def test_session_consumes_flash(current_request):
    current_request.ctx.session.flash('notice', 'Saved')

    assert session('notice') == 'Saved'
    assert session('notice') is None


def test_rotate_session_sets_flag(current_request):
    rotate_session()
    assert current_request.ctx.rotate_session_key is True


def test_session_without_middleware(monkeypatch):
    request = SimpleNamespace(ctx=SimpleNamespace())
    monkeypatch.setattr(helpers, '_current_request', lambda: request)

    with pytest.raises(SessionNotStartedError):
        session('user_id')


def test_session_outside_request():
    with pytest.raises(SessionNotStartedError):
        session()
