"""
Session Helpers
Shortcuts for route handlers
"""
from typing import Any
from sanic import Request
from sanic.exceptions import ServerError
from larasession.exceptions import SessionNotStartedError
from larasession.session.record import MISSING


def _current_request() -> Request:
    try:
        return Request.get_current()
    except ServerError as exc:
        raise SessionNotStartedError("No active request. Session helpers only work inside request handlers.") from exc


def session(key: str = None, default: Any = None) -> Any:
    """
    Get session value or the session itself

    Args:
        key: Session key (optional)
        default: Default value if key not found

    Returns:
        Session value or session

    Example:
        session('user_id')
        session('cart', [])
        session()
    """
    sess = getattr(_current_request().ctx, 'session', None)
    if sess is None:
        raise SessionNotStartedError("Session not available. Make sure SessionMiddleware is registered.")

    if key is None:
        return sess

    value = sess.get(key)
    return default if value is MISSING else value


def rotate_session() -> None:
    """
    Ask for a new session id at the end of this request

    Call after login or any privilege change. The session data moves to
    the new id and the old id stops working.
    """
    _current_request().ctx.rotate_session_key = True
