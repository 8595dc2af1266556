import asyncio

from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from catalog.config import settings
from catalog.logging import get_logger

logger = get_logger(__name__)


class RequestTimeoutMiddleware:
    """Fail a request with a 500 JSON error once it runs past the configured timeout.

    The limit is read from settings on every request. A response that has
    already started streaming cannot be replaced, so the timeout is re-raised.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        timeout = settings.request_timeout_seconds
        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error("{} {} exceeded {}s", scope["method"], scope["path"], timeout)
            if response_started:
                raise
            response = JSONResponse(
                status_code=500,
                content={"code": "timeout", "message": "Request timed out"},
            )
            await response(scope, receive, send)
