"""
Request Context
Cookie, header and request-state access used by the SessionManager
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from sanic import Request


class RequestContext(ABC):
    """
    Transport capability for one request

    `state` is the request-scoped namespace where the session is
    published (`state.session`) and where handlers request key rotation
    (`state.rotate_session_key = True`).
    """

    @property
    @abstractmethod
    def state(self) -> Any:
        pass

    @property
    @abstractmethod
    def path(self) -> str:
        pass

    @property
    @abstractmethod
    def user_agent(self) -> str:
        pass

    @abstractmethod
    def get_cookie(self, name: str, **options) -> Optional[str]:
        """Read an incoming cookie"""
        pass

    @abstractmethod
    def get_header(self, name: str) -> Optional[str]:
        """Read an incoming header"""
        pass

    @abstractmethod
    def set_cookie(self, name: str, value: str, **options) -> None:
        """Set an outgoing cookie (a later call for the same name wins)"""
        pass

    @abstractmethod
    def delete_cookie(self, name: str, **options) -> None:
        """Expire a cookie on the client"""
        pass


class SanicRequestContext(RequestContext):
    """
    RequestContext over a Sanic request

    Sanic has no response before the handler runs, so outgoing cookies
    are queued on request.ctx and written by apply_cookies() once the
    response exists.

    Cookie read options are the keyword arguments of
    request.cookies.get_cookie() (host_prefix, secure_prefix). Cookie
    write options are the keyword arguments of
    response.cookies.add_cookie() (path, domain, secure, httponly,
    samesite, max_age, expires, partitioned, comment, host_prefix,
    secure_prefix).
    """

    # Options understood by response.cookies.delete_cookie()
    DELETE_OPTIONS = ('path', 'domain', 'host_prefix', 'secure_prefix')

    def __init__(self, request: 'Request'):
        self.request = request
        if not hasattr(request.ctx, '_session_cookies'):
            request.ctx._session_cookies = {}

    @property
    def state(self) -> Any:
        return self.request.ctx

    @property
    def path(self) -> str:
        return self.request.path

    @property
    def user_agent(self) -> str:
        return self.request.headers.get('user-agent', '')

    def get_cookie(self, name: str, **options) -> Optional[str]:
        if options:
            return self.request.cookies.get_cookie(name, **options)
        return self.request.cookies.get(name)

    def get_header(self, name: str) -> Optional[str]:
        return self.request.headers.get(name)

    def set_cookie(self, name: str, value: str, **options) -> None:
        self.request.ctx._session_cookies[name] = {
            'action': 'set',
            'value': value,
            'options': dict(options),
        }

    def delete_cookie(self, name: str, **options) -> None:
        self.request.ctx._session_cookies[name] = {
            'action': 'delete',
            'options': {k: v for k, v in options.items() if k in self.DELETE_OPTIONS},
        }

    def get_queued_cookies(self) -> Dict[str, Dict]:
        """Get all queued cookie operations"""
        return self.request.ctx._session_cookies

    def apply_cookies(self, response) -> None:
        """Write queued cookies to the response"""
        for name, cookie in self.get_queued_cookies().items():
            if cookie['action'] == 'delete':
                response.cookies.delete_cookie(name, **cookie['options'])
            else:
                response.cookies.add_cookie(name, cookie['value'], **cookie['options'])
        self.request.ctx._session_cookies = {}
