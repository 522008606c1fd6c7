"""
Session Management Package
Laravel-style session management for Sanic
"""
from larasession.session.record import MISSING, SessionMetadata, SessionRecord
from larasession.session.session import Session
from larasession.session.store import SessionStore, ContextSessionStore
from larasession.session.context import RequestContext, SanicRequestContext
from larasession.session.session_manager import SessionManager
from larasession.session.stores import (
    ArraySessionStore,
    CookieSessionStore,
    FileSessionStore,
    RedisSessionStore,
)

__all__ = [
    'MISSING',
    'SessionMetadata',
    'SessionRecord',
    'Session',
    'SessionStore',
    'ContextSessionStore',
    'RequestContext',
    'SanicRequestContext',
    'SessionManager',
    'ArraySessionStore',
    'CookieSessionStore',
    'FileSessionStore',
    'RedisSessionStore',
]
