"""
Session Stores
"""
from larasession.session.stores.array_store import ArraySessionStore
from larasession.session.stores.cookie_store import CookieSessionStore
from larasession.session.stores.file_store import FileSessionStore
from larasession.session.stores.redis_store import RedisSessionStore

__all__ = [
    'ArraySessionStore',
    'CookieSessionStore',
    'FileSessionStore',
    'RedisSessionStore',
]
