"""Tests for the file session store."""

import json
from datetime import timedelta

import pytest

from larasession.exceptions import StoreError
from larasession.session.record import SessionRecord
from larasession.session.stores import FileSessionStore


@pytest.fixture
def file_store(tmp_path):
    return FileSessionStore(tmp_path / 'sessions')


@pytest.mark.asyncio
async def test_creates_directory_and_round_trips(file_store, clock):
    record = SessionRecord.new(clock(), 3600)
    record.attributes['cart'] = [1, 2]

    await file_store.create_session('abc_DEF-123', record)

    session_file = file_store.path / 'session_abc_DEF-123.json'
    assert session_file.exists()
    assert json.loads(session_file.read_text())['attributes'] == {'cart': [1, 2]}
    assert await file_store.get_session_by_id('abc_DEF-123') == record


@pytest.mark.asyncio
async def test_persist_overwrites_and_leaves_no_temp_files(file_store, clock):
    record = SessionRecord.new(clock())
    await file_store.create_session('abc', record)

    record.attributes['step'] = 2
    await file_store.persist_session_data('abc', record)

    assert (await file_store.get_session_by_id('abc')).attributes == {'step': 2}
    assert [p.name for p in file_store.path.iterdir()] == ['session_abc.json']


@pytest.mark.asyncio
async def test_missing_session_returns_none(file_store):
    assert await file_store.get_session_by_id('nope') is None
    await file_store.delete_session('nope')


@pytest.mark.asyncio
async def test_ids_outside_the_alphabet_are_rejected(file_store, clock):
    assert await file_store.get_session_by_id('../../etc/passwd') is None
    await file_store.delete_session('../secret')

    with pytest.raises(StoreError):
        await file_store.create_session('../escape', SessionRecord.new(clock()))


@pytest.mark.asyncio
async def test_corrupt_file_raises_store_error(file_store):
    (file_store.path / 'session_broken.json').write_text('{not json')

    with pytest.raises(StoreError):
        await file_store.get_session_by_id('broken')


@pytest.mark.asyncio
async def test_unserializable_data_raises_store_error(file_store, clock):
    record = SessionRecord.new(clock())
    record.attributes['bad'] = {1, 2}

    with pytest.raises(StoreError):
        await file_store.create_session('abc', record)


@pytest.mark.asyncio
async def test_gc_removes_expired_and_corrupt_files(file_store, clock):
    await file_store.create_session('fresh', SessionRecord.new(clock(), 3600))
    await file_store.create_session('forever', SessionRecord.new(clock()))
    await file_store.create_session('stale', SessionRecord.new(clock() - timedelta(hours=2), 3600))
    (file_store.path / 'session_junk.json').write_text('garbage')

    deleted = await file_store.gc(now=clock())

    assert deleted == 2
    remaining = sorted(p.name for p in file_store.path.iterdir())
    assert remaining == ['session_forever.json', 'session_fresh.json']
