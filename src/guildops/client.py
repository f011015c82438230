"""Transient Discord sessions, one per HTTP request."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncIterator, Optional

import discord

from .errors import AuthenticationFailure, SessionNotReady
from .permissions import Capability, OperationKind, capabilities_from_permissions

_log = logging.getLogger(__name__)

__all__ = ["GuildOpsClient", "DiscordSession", "open_discord_session"]


class GuildOpsClient(discord.Client):
    """A bare `discord.Client` with the minimal intents for one operation kind."""

    def __init__(self, kind: OperationKind, **kwargs):
        # Members are read over REST, so READY must not wait on gateway chunking.
        kwargs.setdefault("chunk_guilds_at_startup", False)
        super().__init__(intents=kind.intents, **kwargs)
        self.kind = kind

    async def on_ready(self) -> None:
        _log.debug("Session ready as %s (%s)", self.user, self.kind.value)


class DiscordSession:
    """The guild operations the bulk workflows need, backed by a ready client."""

    def __init__(self, client: GuildOpsClient):
        self.client = client

    async def fetch_guild(self, guild_id: int) -> Optional[discord.Guild]:
        guild = self.client.get_guild(guild_id)
        if guild is not None:
            return guild
        try:
            return await self.client.fetch_guild(guild_id)
        except (discord.NotFound, discord.Forbidden):
            return None

    async def fetch_own_member(self, guild: discord.Guild) -> discord.Member:
        if guild.me is not None:
            return guild.me
        return await guild.fetch_member(self.client.user.id)

    async def fetch_members(self, guild: discord.Guild) -> list[discord.Member]:
        return [member async for member in guild.fetch_members(limit=None)]

    async def fetch_role(self, guild: discord.Guild, role_id: int) -> Optional[discord.Role]:
        role = guild.get_role(role_id)
        if role is not None:
            return role
        return discord.utils.get(await guild.fetch_roles(), id=role_id)

    async def add_role(self, member: discord.Member, role: discord.Role) -> None:
        await member.add_roles(role)

    async def remove_role(self, member: discord.Member, role: discord.Role) -> None:
        await member.remove_roles(role)

    async def fetch_bans(self, guild: discord.Guild) -> list[discord.BanEntry]:
        return [entry async for entry in guild.bans(limit=None)]

    async def unban(self, guild: discord.Guild, user: discord.abc.Snowflake, reason: str) -> None:
        await guild.unban(user, reason=reason)

    def capabilities(self, member: discord.Member) -> frozenset[Capability]:
        return capabilities_from_permissions(member.guild_permissions)


@contextlib.asynccontextmanager
async def open_discord_session(
    token: str,
    kind: OperationKind,
    ready_timeout: float = 30.0,
) -> AsyncIterator[DiscordSession]:
    """Log in with *token*, wait for the gateway to be ready and yield a session.

    The client is closed and its connection task reaped on every exit path.
    """

    client = GuildOpsClient(kind)
    connect_task: Optional[asyncio.Task] = None
    ready_task: Optional[asyncio.Task] = None
    try:
        try:
            await client.login(token)
        except discord.LoginFailure as exc:
            raise AuthenticationFailure(str(exc) or None) from exc

        connect_task = asyncio.create_task(client.connect(reconnect=False))
        ready_task = asyncio.create_task(client.wait_until_ready())
        done, _ = await asyncio.wait(
            {connect_task, ready_task},
            timeout=ready_timeout,
            return_when=asyncio.FIRST_COMPLETED,
        )
        if ready_task not in done:
            if connect_task in done and connect_task.exception() is not None:
                exc = connect_task.exception()
                raise SessionNotReady(f"Discord connection failed: {exc}") from exc
            raise SessionNotReady(f"Discord session was not ready after {ready_timeout:g}s")

        _log.info("Opened %s session as %s", kind.value, client.user)
        yield DiscordSession(client)
    finally:
        if ready_task is not None and not ready_task.done():
            ready_task.cancel()
        await client.close()
        if connect_task is not None:
            if not connect_task.done():
                connect_task.cancel()
            # The connection task's own failure was already reported above.
            await asyncio.gather(connect_task, return_exceptions=True)
        _log.info("Closed %s session", kind.value)
