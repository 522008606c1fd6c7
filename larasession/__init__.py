"""
Larasession
Laravel-style server-side sessions for Sanic
"""

from larasession.exceptions import (
    SessionException,
    StoreError,
    InvalidSessionError,
    SessionNotStartedError,
    ConfigurationError,
)
from larasession.session import (
    MISSING,
    SessionMetadata,
    SessionRecord,
    Session,
    SessionStore,
    ContextSessionStore,
    RequestContext,
    SanicRequestContext,
    SessionManager,
    ArraySessionStore,
    CookieSessionStore,
    FileSessionStore,
    RedisSessionStore,
)
from larasession.middleware import Middleware, SessionMiddleware, ServiceMiddleware
from larasession.helpers import session, rotate_session

__version__ = '1.0.0'

__all__ = [
    # Exceptions
    'SessionException',
    'StoreError',
    'InvalidSessionError',
    'SessionNotStartedError',
    'ConfigurationError',

    # Sessions
    'MISSING',
    'SessionMetadata',
    'SessionRecord',
    'Session',
    'SessionManager',

    # Stores
    'SessionStore',
    'ContextSessionStore',
    'ArraySessionStore',
    'CookieSessionStore',
    'FileSessionStore',
    'RedisSessionStore',

    # Transport
    'RequestContext',
    'SanicRequestContext',
    'Middleware',
    'SessionMiddleware',
    'ServiceMiddleware',

    # Helpers
    'session',
    'rotate_session',
]
