"""Helpers shared by the bulk mutation routes."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from fastapi import Header, Request

from guildops.errors import BatchTimeout, GuildOpsError, InternalError
from guildops.permissions import OperationKind
from guildops.validation import MutationTarget, validate_target

_log = logging.getLogger(__name__)

T = TypeVar("T")

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"description": "Missing or invalid header/body field"},
    403: {"description": "Missing permission or role precedence violation"},
    404: {"description": "Guild or role not found"},
    500: {"description": "Internal server error"},
}


def mutation_target(
    x_bot_token: Optional[str] = Header(default=None),
    x_guild_id: Optional[str] = Header(default=None),
) -> MutationTarget:
    """Dependency validating the credential headers before any session opens."""

    return validate_target(x_bot_token, x_guild_id)


async def _bounded(awaitable: Awaitable[T], timeout: Optional[float]) -> T:
    if timeout is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as exc:
        raise BatchTimeout(f"The operation did not finish within {timeout:g}s") from exc


async def run_in_session(
    request: Request,
    kind: OperationKind,
    target: MutationTarget,
    workflow: Callable[[Any], Awaitable[T]],
) -> T:
    """Open one session for *target*, run *workflow* in it and always release it."""

    settings = request.app.state.settings
    open_session = request.app.state.session_factory
    try:
        async with open_session(target.credential, kind, settings.session_ready_timeout) as session:
            return await _bounded(workflow(session), settings.batch_timeout)
    except GuildOpsError:
        raise
    except Exception as exc:
        _log.exception("%s failed for guild %s", kind.value, target.guild_id)
        raise InternalError(str(exc)) from exc
