"""Tests for the in-memory session store."""

import pytest

from larasession.exceptions import StoreError
from larasession.session.record import SessionRecord
from larasession.session.stores import ArraySessionStore


@pytest.mark.asyncio
async def test_create_get_persist_delete(clock):
    store = ArraySessionStore()
    record = SessionRecord.new(clock(), 60)
    record.attributes['user_id'] = 1

    await store.create_session('abc', record)
    assert await store.get_session_by_id('abc') == record

    record.attributes['user_id'] = 2
    await store.persist_session_data('abc', record)
    assert (await store.get_session_by_id('abc')).attributes == {'user_id': 2}

    await store.delete_session('abc')
    assert await store.get_session_by_id('abc') is None
    assert len(store) == 0


@pytest.mark.asyncio
async def test_stored_copy_does_not_alias_caller(clock):
    store = ArraySessionStore()
    record = SessionRecord.new(clock())
    await store.create_session('abc', record)

    record.attributes['changed'] = True
    loaded = await store.get_session_by_id('abc')
    loaded.attributes['other'] = True

    assert (await store.get_session_by_id('abc')).attributes == {}


@pytest.mark.asyncio
async def test_delete_unknown_id_is_noop():
    store = ArraySessionStore()
    await store.delete_session('missing')
    assert await store.exists('missing') is False


@pytest.mark.asyncio
async def test_unserializable_data_raises_store_error(clock):
    store = ArraySessionStore()
    record = SessionRecord.new(clock())
    record.attributes['bad'] = object()

    with pytest.raises(StoreError):
        await store.create_session('abc', record)


@pytest.mark.asyncio
async def test_clear_all(clock):
    store = ArraySessionStore()
    await store.create_session('a', SessionRecord.new(clock()))
    await store.create_session('b', SessionRecord.new(clock()))

    store.clear_all()

    assert len(store) == 0
