"""Tests for the signed-cookie session store."""

import secrets

import pytest

from larasession.exceptions import StoreError
from larasession.session.record import SessionRecord
from larasession.session.stores import CookieSessionStore
from larasession.session.stores.cookie_store import MAX_COOKIE_VALUE_SIZE
from tests.conftest import FakeContext


@pytest.fixture
def cookie_store():
    return CookieSessionStore('test-secret', cookie_options={'httponly': True})


def test_requires_secret_key():
    with pytest.raises(ValueError):
        CookieSessionStore('')


@pytest.mark.asyncio
async def test_create_writes_signed_cookie(cookie_store, clock):
    ctx = FakeContext()
    record = SessionRecord.new(clock(), 60)
    record.attributes['user_id'] = 9

    await cookie_store.create_session(ctx, record)

    name, value, options = ctx.cookie_writes[0]
    assert name == 'session_data'
    assert options == {'httponly': True}
    assert cookie_store.unserialize(value) == record


@pytest.mark.asyncio
async def test_get_reads_cookie_back(cookie_store, clock):
    record = SessionRecord.new(clock())
    ctx = FakeContext(cookies={'session_data': cookie_store.serialize(record)})

    assert await cookie_store.get_session_by_context(ctx) == record


@pytest.mark.asyncio
async def test_missing_cookie_returns_none(cookie_store):
    assert await cookie_store.get_session_by_context(FakeContext()) is None


@pytest.mark.asyncio
async def test_tampered_cookie_reads_as_absent(cookie_store, clock):
    value = cookie_store.serialize(SessionRecord.new(clock()))
    ctx = FakeContext(cookies={'session_data': value[:-2] + 'xx'})

    assert await cookie_store.get_session_by_context(ctx) is None


@pytest.mark.asyncio
async def test_cookie_signed_with_other_key_reads_as_absent(cookie_store, clock):
    other = CookieSessionStore('another-secret')
    ctx = FakeContext(cookies={'session_data': other.serialize(SessionRecord.new(clock()))})

    assert await cookie_store.get_session_by_context(ctx) is None


def test_signed_non_record_payload_is_rejected(cookie_store):
    value = cookie_store.serializer.dumps(['not', 'a', 'record'])

    assert cookie_store.unserialize(value) is None


@pytest.mark.asyncio
async def test_persist_and_delete(cookie_store, clock):
    ctx = FakeContext()
    record = SessionRecord.new(clock())

    await cookie_store.persist_session_data(ctx, record)
    await cookie_store.delete_session(ctx)

    assert ctx.cookie_deletes == [('session_data', {'httponly': True})]
    assert ctx.response_cookies['session_data'] is None


def test_oversized_record_raises_store_error(cookie_store, clock):
    record = SessionRecord.new(clock())
    # Random data so compression cannot bring it under the limit
    record.attributes['blob'] = secrets.token_urlsafe(MAX_COOKIE_VALUE_SIZE)

    with pytest.raises(StoreError):
        cookie_store.serialize(record)


def test_unserializable_record_raises_store_error(cookie_store, clock):
    record = SessionRecord.new(clock())
    record.attributes['bad'] = object()

    with pytest.raises(StoreError):
        cookie_store.serialize(record)
