"""HTTP middleware: CORS, request logging and request timeouts."""

import asyncio
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from src.api.errors import error_response
from src.config import Settings
from src.exceptions import RequestTimeout

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type", "Authorization", "x-auth-token"]


class RequestTimeoutMiddleware:
    """Answer 504 once a request runs past its deadline.

    Sync handlers run in a threadpool thread that cannot be cancelled, so the
    inner app is left to finish in the background and anything it sends after
    the deadline is dropped. Database statements are bounded separately by the
    engine's own timeouts.
    """

    def __init__(self, app: ASGIApp, timeout: float):
        self.app = app
        self.timeout = timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False
        timed_out = False

        async def guarded_send(message: Message) -> None:
            nonlocal response_started
            if timed_out:
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        task = asyncio.ensure_future(self.app(scope, receive, guarded_send))
        try:
            done, _ = await asyncio.wait({task}, timeout=self.timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task in done:
            # Re-raise anything the app raised
            task.result()
            return

        timed_out = True
        task.add_done_callback(_log_late_failure)
        logger.warning(f"Request timeout: {scope['method']} {scope['path']}")
        if response_started:
            # Headers already went out; nothing valid can follow
            return
        response = error_response(
            RequestTimeout.status_code,
            RequestTimeout.error,
            "Request took too long to process",
        )
        await response(scope, receive, send)


def _log_late_failure(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error(f"Request failed after timing out: {task.exception()!r}")


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register middleware.

    The last middleware added runs first: CORS wraps the timeout, so 504s
    still carry CORS headers, and the timeout wraps request logging.
    """

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        origin = request.headers.get("origin", "-")
        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.error(
                f"{request.method} {request.url.path} -> failed with {type(e).__name__} "
                f"({elapsed_ms:.1f}ms) origin={origin}"
            )
            raise
        elapsed_ms = (time.perf_counter() - start) * 1000
        # Bodies are never logged; they carry passwords
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({elapsed_ms:.1f}ms) origin={origin}"
        )
        return response

    app.add_middleware(RequestTimeoutMiddleware, timeout=settings.request_timeout_seconds)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
    )
