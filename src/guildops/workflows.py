"""The three bulk guild workflows: role add, role removal and unban.

Each workflow runs against an already-open session, checks its
preconditions, hands the collection to :func:`guildops.engine.run_batch`
and shapes the outcome into a response model. Opening and releasing the
session is the caller's job.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from .engine import BatchResult, Pacer, run_batch
from .errors import GuildNotFound, InsufficientPermission, RoleNotFound, RolePrecedenceViolation
from .permissions import Capability, OperationKind
from .schemas import RoleBatchResponse, UnbanBatchResponse, UnbannedUser

_log = logging.getLogger(__name__)

__all__ = [
    "GuildSession",
    "add_role_to_all",
    "remove_role_from_all",
    "unban_all",
    "shape_role_response",
    "shape_unban_response",
]

ERROR_LIST_LIMIT = 10
UNBANNED_LIST_LIMIT = 20


class GuildSession(Protocol):
    """What a live platform session must offer (see `guildops.client.DiscordSession`)."""

    async def fetch_guild(self, guild_id: int) -> Any: ...
    async def fetch_own_member(self, guild: Any) -> Any: ...
    async def fetch_members(self, guild: Any) -> list[Any]: ...
    async def fetch_role(self, guild: Any, role_id: int) -> Any: ...
    async def add_role(self, member: Any, role: Any) -> None: ...
    async def remove_role(self, member: Any, role: Any) -> None: ...
    async def fetch_bans(self, guild: Any) -> list[Any]: ...
    async def unban(self, guild: Any, user: Any, reason: str) -> None: ...
    def capabilities(self, member: Any) -> frozenset[Capability]: ...


# Preconditions -----------------------------------------------------------


async def _resolve_guild(session: GuildSession, guild_id: int):
    guild = await session.fetch_guild(guild_id)
    if guild is None:
        _log.warning("Guild %s not found", guild_id)
        raise GuildNotFound()
    return guild


def _require_capability(session: GuildSession, actor, kind: OperationKind) -> None:
    needed = kind.required_capability
    if needed not in session.capabilities(actor):
        _log.warning("Bot lacks %s for %s", needed.display_name, kind.value)
        raise InsufficientPermission(f"Bot lacks {needed.display_name} permission")


async def _resolve_manageable_role(session: GuildSession, guild, actor, role_id: int):
    role = await session.fetch_role(guild, role_id)
    if role is None:
        raise RoleNotFound(f"Role with ID {role_id} not found in the guild")
    # The bot must strictly outrank the role; equal position is rejected too.
    if role.position >= actor.top_role.position:
        _log.warning(
            "Role %s (position %d) is not below bot's top role (position %d)",
            role_id,
            role.position,
            actor.top_role.position,
        )
        raise RolePrecedenceViolation()
    return role


# Helpers -----------------------------------------------------------------


def _has_role(member, role) -> bool:
    return any(r.id == role.id for r in member.roles)


def _describe_member(member) -> tuple[int, str]:
    return member.id, member.name


def _describe_ban(entry) -> tuple[int, str]:
    return entry.user.id, entry.user.name


def _user_tag(user) -> str:
    discriminator = getattr(user, "discriminator", None)
    if discriminator and discriminator != "0":
        return f"{user.name}#{discriminator}"
    return user.name


# Result shaping ----------------------------------------------------------


def shape_role_response(
    kind: OperationKind,
    role,
    result: BatchResult,
    *,
    error_limit: int = ERROR_LIST_LIMIT,
) -> RoleBatchResponse:
    if kind is OperationKind.ADD_ROLE:
        verb = "add role to"
        detail = (
            f'Added role "{role.name}" to {result.success_count} users (including bots). '
            f"Skipped {result.skip_count} users (already had role). "
            f"{result.error_count} errors occurred."
        )
    else:
        verb = "remove role from"
        detail = (
            f'Removed role "{role.name}" from {result.success_count} users (including bots). '
            f"Skipped {result.skip_count} users (didn't have role). "
            f"{result.error_count} errors occurred."
        )
    return RoleBatchResponse(
        role_id=str(role.id),
        role_name=role.name,
        total_members=result.total,
        success_count=result.success_count,
        skip_count=result.skip_count,
        error_count=result.error_count,
        errors=result.error_messages(verb, error_limit),
        detail=detail,
    )


def shape_unban_response(
    result: BatchResult,
    *,
    error_limit: int = ERROR_LIST_LIMIT,
    unbanned_limit: int = UNBANNED_LIST_LIMIT,
) -> UnbanBatchResponse:
    if result.total == 0:
        return UnbanBatchResponse(
            total_bans=0,
            success_count=0,
            error_count=0,
            detail="No banned users found in this server",
        )
    return UnbanBatchResponse(
        total_bans=result.total,
        success_count=result.success_count,
        error_count=result.error_count,
        errors=result.error_messages("unban", error_limit),
        unbanned_users=result.succeeded[:unbanned_limit],
        detail=(
            f"Successfully unbanned {result.success_count} out of {result.total} banned users. "
            f"{result.error_count} errors occurred."
        ),
    )


# Workflows ---------------------------------------------------------------


async def _role_workflow(
    kind: OperationKind,
    session: GuildSession,
    guild_id: int,
    role_id: int,
    pacer: Pacer,
    error_limit: int,
) -> RoleBatchResponse:
    guild = await _resolve_guild(session, guild_id)
    actor = await session.fetch_own_member(guild)
    _require_capability(session, actor, kind)
    role = await _resolve_manageable_role(session, guild, actor, role_id)

    members = await session.fetch_members(guild)
    _log.info("%s role %s for %d member(s) in guild %s", kind.value, role_id, len(members), guild_id)

    if kind is OperationKind.ADD_ROLE:
        result = await run_batch(
            members,
            lambda member: session.add_role(member, role),
            pacer=pacer,
            describe=_describe_member,
            should_skip=lambda member: _has_role(member, role),
        )
    else:
        result = await run_batch(
            members,
            lambda member: session.remove_role(member, role),
            pacer=pacer,
            describe=_describe_member,
            should_skip=lambda member: not _has_role(member, role),
        )
    return shape_role_response(kind, role, result, error_limit=error_limit)


async def add_role_to_all(
    session: GuildSession,
    guild_id: int,
    role_id: int,
    *,
    pacer: Pacer,
    error_limit: int = ERROR_LIST_LIMIT,
) -> RoleBatchResponse:
    """Give *role_id* to every member of the guild who does not have it yet."""

    return await _role_workflow(OperationKind.ADD_ROLE, session, guild_id, role_id, pacer, error_limit)


async def remove_role_from_all(
    session: GuildSession,
    guild_id: int,
    role_id: int,
    *,
    pacer: Pacer,
    error_limit: int = ERROR_LIST_LIMIT,
) -> RoleBatchResponse:
    """Take *role_id* away from every member of the guild who has it."""

    return await _role_workflow(OperationKind.REMOVE_ROLE, session, guild_id, role_id, pacer, error_limit)


async def unban_all(
    session: GuildSession,
    guild_id: int,
    *,
    pacer: Pacer,
    reason: str = "Bulk unban via API",
    error_limit: int = ERROR_LIST_LIMIT,
    unbanned_limit: int = UNBANNED_LIST_LIMIT,
) -> UnbanBatchResponse:
    """Lift every ban in the guild, one call at a time."""

    guild = await _resolve_guild(session, guild_id)
    actor = await session.fetch_own_member(guild)
    _require_capability(session, actor, OperationKind.UNBAN)

    bans = await session.fetch_bans(guild)
    if not bans:
        _log.info("No bans in guild %s", guild_id)
        return shape_unban_response(BatchResult())

    async def _lift(entry) -> UnbannedUser:
        await session.unban(guild, entry.user, reason)
        return UnbannedUser(id=str(entry.user.id), username=entry.user.name, tag=_user_tag(entry.user))

    _log.info("Unbanning %d user(s) in guild %s", len(bans), guild_id)
    result = await run_batch(bans, _lift, pacer=pacer, describe=_describe_ban)
    return shape_unban_response(result, error_limit=error_limit, unbanned_limit=unbanned_limit)
