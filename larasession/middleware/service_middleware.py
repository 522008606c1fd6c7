"""
Service Middleware
Registers middlewares and session error handling with a Sanic app
"""
from sanic import Request, Sanic, response
from larasession.exceptions import SessionException
from larasession.logging import getLogger
from larasession.middleware.base_middleware import Middleware

logger = getLogger('session')


class ServiceMiddleware:
    """
    Manages middleware registration and execution

    Example:
        app = Sanic('shop')
        store = RedisSessionStore('redis://localhost:6379/0')

        middleware = ServiceMiddleware(app)
        middleware.add(SessionMiddleware(store, expire_after_seconds=3600))
        middleware.register_with_sanic()
    """

    def __init__(self, app: Sanic):
        self.app = app
        self.middlewares = []

    def add(self, middleware_instance: Middleware) -> 'ServiceMiddleware':
        """
        Add a middleware to the stack (None is ignored, for disabled middlewares)
        """
        if middleware_instance is not None:
            self.middlewares.append(middleware_instance)
        return self

    async def process_request(self, request: Request):
        """Run before_request hooks in registration order"""
        # Track which middlewares actually ran for this request
        request.ctx._executed_middlewares = []

        for middleware_instance in self.middlewares:
            request.ctx._executed_middlewares.append(middleware_instance)

            result = await middleware_instance.before_request(request)
            if result is not None:
                return result  # Short-circuit
        return None

    async def process_response(self, request: Request, resp):
        """Run after_response hooks in reverse order, only for middlewares that ran"""
        executed_middlewares = getattr(request.ctx, '_executed_middlewares', [])

        for middleware in reversed(executed_middlewares):
            resp = await middleware.after_response(request, resp)

        request.ctx._executed_middlewares = []
        return resp

    async def wrap_route_handlers(self, app: Sanic):
        """
        Apply every middleware's wrap_handler() to the app's HTTP routes

        The first middleware added ends up outermost. Handlers already
        wrapped by this instance are left alone, since the test client
        starts the app once per request.
        """
        for route in app.router.routes:
            handler = route.handler
            if getattr(handler, 'is_websocket', False):
                continue
            if getattr(handler, '__service_middleware__', None) is self:
                continue

            wrapped = handler
            for middleware_instance in reversed(self.middlewares):
                wrapped = middleware_instance.wrap_handler(wrapped)

            if wrapped is not handler:
                wrapped.__service_middleware__ = self
                route.handler = wrapped

    @staticmethod
    async def handle_session_exception(request: Request, exception: SessionException):
        """Turn session errors into JSON error responses"""
        logger.error(
            f"{exception.__class__.__name__}: {exception.message}",
            extra={'path': request.path, 'method': request.method, 'status_code': exception.status_code}
        )
        return response.json(
            {
                'error': {
                    'type': exception.__class__.__name__,
                    'message': exception.message,
                }
            },
            status=exception.status_code
        )

    def register_with_sanic(self) -> None:
        """
        Register middlewares, handler wrappers and the session exception
        handler with the Sanic app
        """
        self.app.exception(SessionException)(self.handle_session_exception)
        self.app.register_middleware(self.process_request, 'request')
        self.app.register_middleware(self.process_response, 'response')
        self.app.register_listener(self.wrap_route_handlers, 'before_server_start')
