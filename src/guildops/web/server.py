from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from guildops.client import open_discord_session
from guildops.config import Settings, get_settings
from guildops.errors import GuildOpsError

_log = logging.getLogger(__name__)


async def _guildops_error_handler(request: Request, exc: GuildOpsError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    detail = errors[0].get("msg", "Malformed request") if errors else "Malformed request"
    return JSONResponse(status_code=400, content={"error": "Invalid request", "detail": detail})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    _log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error", "detail": str(exc)})


def get_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[Callable] = None,
) -> FastAPI:  # noqa: D401
    """Return a FastAPI app instance.

    *session_factory* is called as ``factory(token, kind, ready_timeout)`` and
    must return an async context manager yielding a guild session; it defaults
    to a real Discord session.
    """

    app = FastAPI(title="Guild Bulk Operations API", version="0.1.0")

    # ------------------------------------------------------------------
    # Routes are defined in dedicated modules under ``guildops.web.routes``.
    # Settings and the session factory live on the application state so the
    # routers can reach them without import cycles.
    # ------------------------------------------------------------------

    app.state.settings = settings or get_settings()
    app.state.session_factory = session_factory or open_discord_session

    app.add_exception_handler(GuildOpsError, _guildops_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    from .routes import register_routes

    register_routes(app)

    return app
