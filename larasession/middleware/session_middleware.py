"""
Session Middleware
Starts sessions before the handler and saves them after the response
"""
import asyncio
import functools
import inspect
import random
from typing import Any, Dict, List, Optional, Union
from sanic import Request
from larasession.exceptions import ConfigurationError
from larasession.logging import getLogger
from larasession.middleware.base_middleware import Middleware
from larasession.session.context import SanicRequestContext
from larasession.session.session_manager import SessionManager
from larasession.session.store import ContextSessionStore, SessionStore
from larasession.session.stores import (
    ArraySessionStore,
    CookieSessionStore,
    FileSessionStore,
    RedisSessionStore,
)
from larasession.support import Config

logger = getLogger(__name__)


class SessionMiddleware(Middleware):
    """Session management middleware"""

    @staticmethod
    def _get_config_defaults():
        from larasession.defaults import (
            DEFAULT_SESSION_EXPIRE_AFTER_SECONDS,
            DEFAULT_SESSION_COOKIE_NAME,
            DEFAULT_SESSION_HEADER_NAME,
            DEFAULT_ACCESS_UPDATE_INTERVAL,
            DEFAULT_EXCLUDED_PATHS,
            DEFAULT_EXCLUDED_USER_AGENTS,
            DEFAULT_SESSION_LOTTERY,
        )
        return {
            'expire_after_seconds': ('session.EXPIRE_AFTER_SECONDS', DEFAULT_SESSION_EXPIRE_AFTER_SECONDS),
            'cookie_name': ('session.COOKIE_NAME', DEFAULT_SESSION_COOKIE_NAME),
            'header_name': ('session.HEADER_NAME', DEFAULT_SESSION_HEADER_NAME),
            'cookie_get_options': ('session.COOKIE_GET_OPTIONS', {}),
            'cookie_set_options': ('session.COOKIE_SET_OPTIONS', {}),
            'access_update_interval': ('session.ACCESS_UPDATE_INTERVAL', DEFAULT_ACCESS_UPDATE_INTERVAL),
            'excluded_paths': ('session.EXCLUDED_PATHS', list(DEFAULT_EXCLUDED_PATHS)),
            'excluded_user_agents': ('session.EXCLUDED_USER_AGENTS', list(DEFAULT_EXCLUDED_USER_AGENTS)),
            'lottery': ('session.LOTTERY', list(DEFAULT_SESSION_LOTTERY)),
        }

    CONFIG_MAPPING = _get_config_defaults.__func__()
    ENABLED_CONFIG_KEY = 'session.ENABLED'
    DEFAULT_ENABLED = True

    # Written on the id cookie unless cookie_set_options says otherwise
    DEFAULT_COOKIE_SET_OPTIONS = {
        'path': '/',
        'secure': False,
        'httponly': True,
        'samesite': 'Lax',
    }

    def __init__(
        self,
        store: Union[SessionStore, ContextSessionStore],
        expire_after_seconds: Optional[int] = None,
        cookie_name: str = None,
        header_name: str = None,
        cookie_get_options: Optional[Dict[str, Any]] = None,
        cookie_set_options: Optional[Dict[str, Any]] = None,
        access_update_interval: int = None,
        excluded_paths: Optional[List[str]] = None,
        excluded_user_agents: Optional[List[str]] = None,
        lottery: Optional[List[int]] = None,
        **manager_options
    ):
        """
        Initialize session middleware

        Args:
            store: Session store, owned by the caller
            expire_after_seconds: Sliding session TTL (None = never expires)
            cookie_name: Cookie carrying the session id
            header_name: Fallback request header carrying the session id
            cookie_get_options: Options for request.cookies.get_cookie()
            cookie_set_options: Options for response.cookies.add_cookie()
            access_update_interval: Seconds between access-time writes
            excluded_paths: Path prefixes that get no session
            excluded_user_agents: User-agent substrings that get no session
            lottery: [chances, out_of] odds of running store garbage collection
                     after a response (stores without gc() are never collected)
            **manager_options: Passed to SessionManager (id_length, clock)
        """
        from larasession.defaults import DEFAULT_SESSION_LOTTERY
        chances, out_of = lottery if lottery is not None else DEFAULT_SESSION_LOTTERY
        self.lottery = [int(chances), int(out_of)]
        self._gc_tasks = set()

        if excluded_paths is None:
            from larasession.defaults import DEFAULT_EXCLUDED_PATHS
            excluded_paths = list(DEFAULT_EXCLUDED_PATHS)

        self.manager = SessionManager(
            store,
            expire_after_seconds=self._parse_ttl(expire_after_seconds),
            cookie_name=cookie_name,
            header_name=header_name,
            cookie_get_options=cookie_get_options,
            cookie_set_options={**self.DEFAULT_COOKIE_SET_OPTIONS, **(cookie_set_options or {})},
            access_update_interval=access_update_interval,
            excluded_paths=excluded_paths,
            excluded_user_agents=excluded_user_agents,
            **manager_options
        )

    @property
    def store(self):
        return self.manager.store

    @staticmethod
    def _parse_ttl(value) -> Optional[int]:
        """Accept ints and numeric strings from config; None, '' and 0 mean never"""
        if value is None or value == '':
            return None
        if isinstance(value, str):
            if value.strip().lower() in ('none', 'null'):
                return None
            value = int(value)
        return int(value) or None

    @classmethod
    def from_config(cls, **overrides) -> Optional['SessionMiddleware']:
        """
        Create session middleware from session.* configuration

        The store is created from session.DRIVER unless one is passed.
        """
        if not cls._is_enabled():
            return None

        if 'store' not in overrides:
            overrides['store'] = cls.create_store()
        return super().from_config(**overrides)

    @staticmethod
    def create_store(driver: str = None) -> Union[SessionStore, ContextSessionStore]:
        """
        Create session store based on driver

        Raises:
            ConfigurationError: For unknown drivers or a cookie driver without secret
        """
        from larasession.defaults import (
            DEFAULT_SESSION_DRIVER,
            DEFAULT_REDIS_URL,
            DEFAULT_SESSION_KEY_PREFIX,
            DEFAULT_SESSION_FILES,
        )
        driver = driver or Config.get('session.DRIVER', DEFAULT_SESSION_DRIVER)

        if driver == 'array':
            return ArraySessionStore()

        elif driver == 'redis':
            return RedisSessionStore(
                redis_url=Config.get('session.REDIS_URL', DEFAULT_REDIS_URL),
                key_prefix=Config.get('session.KEY_PREFIX', DEFAULT_SESSION_KEY_PREFIX),
            )

        elif driver == 'file':
            return FileSessionStore(Config.get('session.FILES', DEFAULT_SESSION_FILES))

        elif driver == 'cookie':
            secret = Config.get('session.SECRET_KEY')
            if not secret:
                raise ConfigurationError(
                    "SECRET_KEY is required for cookie session driver!\n"
                    "Set session.SECRET_KEY in config/session.py or SESSION_SECRET_KEY in .env"
                )
            return CookieSessionStore(
                secret,
                cookie_options={
                    **SessionMiddleware.DEFAULT_COOKIE_SET_OPTIONS,
                    **Config.get('session.COOKIE_SET_OPTIONS', {}),
                },
            )

        raise ConfigurationError(f"Unknown session driver: {driver!r}")

    async def before_request(self, request: Request):
        """Start session before request"""
        ctx = SanicRequestContext(request)

        session = await self.manager.start(ctx)
        if session is not None:
            request.ctx._session_context = ctx
            request.ctx._session_finished = False

        return None

    def wrap_handler(self, handler):
        """
        Run a route handler inside the session lifecycle

        The session started by before_request() is finished when the
        handler returns, raises or is cancelled. Sanic skips response
        middleware for cancelled requests, so after_response() only
        finishes sessions whose handler never ran.
        """
        @functools.wraps(handler)
        async def session_handler(request: Request, *args, **kwargs):
            async def call():
                result = handler(request, *args, **kwargs)
                if inspect.isawaitable(result):
                    result = await result
                return result

            ctx = getattr(request.ctx, '_session_context', None)
            if ctx is None or request.ctx._session_finished:
                return await call()

            request.ctx._session_finished = True
            return await self.manager.run(ctx, request.ctx.session, call)

        return session_handler

    async def after_response(self, request: Request, response):
        """Save session after response and write the session cookies"""
        ctx = getattr(request.ctx, '_session_context', None)
        if ctx is None:
            return response

        request.ctx._session_context = None
        try:
            if not request.ctx._session_finished:
                request.ctx._session_finished = True
                await self.manager.finish(ctx, request.ctx.session)
        finally:
            if response is not None:
                ctx.apply_cookies(response)

        self._maybe_run_gc()
        return response

    def _maybe_run_gc(self):
        """Maybe run garbage collection based on lottery"""
        gc = getattr(self.store, 'gc', None)
        if not callable(gc):
            return

        chances, out_of = self.lottery
        if random.randint(1, out_of) <= chances:
            # Run GC in background (non-blocking); the set keeps the task alive
            task = asyncio.create_task(gc())
            self._gc_tasks.add(task)
            task.add_done_callback(self._gc_done)

    def _gc_done(self, task: asyncio.Task):
        self._gc_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Session garbage collection failed", exc_info=error)
        else:
            logger.debug("Session garbage collection finished", extra={'removed': task.result()})
