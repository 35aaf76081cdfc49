# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""FastAPI application for the notification daemon.

Two endpoints: ``GET /health`` for the supervisor's liveness probe and
``POST /notify`` for in-container hooks. Handlers are sync so FastAPI runs
each request in its threadpool.
"""
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse
from loguru import logger

from aipod import __version__
from aipod.logging import log_server_startup
from aipod.server.notify import Notifier, send_notification


NOTIFY_TITLE = "Claude Code"
NOTIFY_MESSAGE = "Task completed."

router = APIRouter()


def get_notifier(request: Request) -> Notifier:
    """FastAPI dependency that provides the app's notification callable."""
    notifier: Notifier = request.app.state.notifier
    return notifier


@router.get("/health", response_class=PlainTextResponse)
def health() -> str:
    """Liveness probe."""
    return "ok"


@router.post("/notify", response_class=PlainTextResponse)
def notify(notifier: Notifier = Depends(get_notifier)) -> str:
    """Trigger a desktop notification; always answers ``ok``."""
    try:
        notifier(NOTIFY_TITLE, NOTIFY_MESSAGE)
    except Exception as e:
        # The sandboxed caller cannot act on delivery failures
        logger.warning("Notification delivery failed", error=str(e))
    return "ok"


def create_app(notifier: Notifier = send_notification) -> FastAPI:
    """Create the daemon's FastAPI application.

    Args:
        notifier: Callable invoked with (title, message) on each notify.

    Returns:
        Configured FastAPI app.
    """
    app = FastAPI(
        title="ai-pod notifications",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.notifier = notifier
    app.include_router(router)
    return app


def run_server(port: int, host: str = "0.0.0.0") -> None:
    """Serve the daemon until interrupted.

    Binds all interfaces by default so the container can reach the daemon
    through the host-gateway alias.

    Args:
        port: Port to listen on.
        host: Bind address.
    """
    log_server_startup(host, port, __version__)
    logger.info("Notification server listening", host=host, port=port)
    uvicorn.run(create_app(), host=host, port=port, log_level="info")
