"""
Middleware Package
"""
from larasession.middleware.base_middleware import Middleware
from larasession.middleware.session_middleware import SessionMiddleware
from larasession.middleware.service_middleware import ServiceMiddleware

__all__ = [
    'Middleware',
    'SessionMiddleware',
    'ServiceMiddleware',
]
