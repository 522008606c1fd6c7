"""
Base Middleware
Request/response hooks run by ServiceMiddleware
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple
from sanic import Request


class Middleware(ABC):
    """
    Base class for middlewares registered through ServiceMiddleware

    before_request() may return a response to stop the request early;
    after_response() always receives the response that will be sent.

    Subclasses that can be built from configuration declare:
        ENABLED_CONFIG_KEY: key holding a bool (missing means DEFAULT_ENABLED)
        CONFIG_MAPPING: constructor argument -> (config key, default)
    """

    ENABLED_CONFIG_KEY: Optional[str] = None
    DEFAULT_ENABLED: bool = True
    CONFIG_MAPPING: Dict[str, Tuple[str, Any]] = {}

    @classmethod
    def _is_enabled(cls) -> bool:
        if cls.ENABLED_CONFIG_KEY is None:
            return cls.DEFAULT_ENABLED

        from larasession.support import Config
        return Config.get(cls.ENABLED_CONFIG_KEY, cls.DEFAULT_ENABLED)

    @classmethod
    def _load_config_params(cls) -> Dict[str, Any]:
        from larasession.support import Config
        return {
            param: Config.get(config_key, default)
            for param, (config_key, default) in cls.CONFIG_MAPPING.items()
        }

    @classmethod
    def from_config(cls, **overrides) -> Optional['Middleware']:
        """
        Build the middleware from configuration

        Keyword arguments win over configured values.

        Returns:
            Middleware instance, or None when disabled in configuration
        """
        if not cls._is_enabled():
            return None

        return cls(**{**cls._load_config_params(), **overrides})

    @abstractmethod
    async def before_request(self, request: Request):
        """
        Runs before the route handler

        Returns:
            None to continue, or a response to send instead of calling the handler
        """

    async def after_response(self, request: Request, response):
        """Runs after the route handler; returns the response to send"""
        return response

    def wrap_handler(self, handler):
        """
        Wrap a route handler when the app starts (default: unchanged)

        Wrappers run inside the request middleware and receive the
        handler's arguments (request, **route params).
        """
        return handler
