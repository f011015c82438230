import asyncio
from types import SimpleNamespace

import discord
import pytest

import guildops.client as client_mod
from guildops.errors import AuthenticationFailure, SessionNotReady
from guildops.permissions import Capability, OperationKind


class FakeGatewayClient:
    """Mimics the parts of `discord.Client` that `open_discord_session` drives."""

    instances: list["FakeGatewayClient"] = []
    login_error: Exception | None = None
    connect_error: Exception | None = None
    becomes_ready = True

    def __init__(self, kind) -> None:
        self.kind = kind
        self.user = SimpleNamespace(id=1, name="guildops")
        self.closed = 0
        self._ready = asyncio.Event()
        FakeGatewayClient.instances.append(self)

    async def login(self, token) -> None:
        if self.login_error is not None:
            raise self.login_error

    async def connect(self, reconnect=True) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        if self.becomes_ready:
            self._ready.set()
        await asyncio.Event().wait()

    async def wait_until_ready(self) -> None:
        await self._ready.wait()

    async def close(self) -> None:
        self.closed += 1


@pytest.fixture
def fake_client(monkeypatch):
    FakeGatewayClient.instances = []
    FakeGatewayClient.login_error = None
    FakeGatewayClient.connect_error = None
    FakeGatewayClient.becomes_ready = True
    monkeypatch.setattr(client_mod, "GuildOpsClient", FakeGatewayClient)
    return FakeGatewayClient


@pytest.mark.asyncio
async def test_session_is_closed_after_use(fake_client) -> None:
    async with client_mod.open_discord_session("token", OperationKind.ADD_ROLE, ready_timeout=1) as session:
        assert isinstance(session, client_mod.DiscordSession)
        assert fake_client.instances[0].closed == 0

    assert fake_client.instances[0].closed == 1


@pytest.mark.asyncio
async def test_session_is_closed_when_body_raises(fake_client) -> None:
    with pytest.raises(RuntimeError):
        async with client_mod.open_discord_session("token", OperationKind.UNBAN, ready_timeout=1):
            raise RuntimeError("boom")

    assert fake_client.instances[0].closed == 1


@pytest.mark.asyncio
async def test_rejected_token_raises_authentication_failure(fake_client) -> None:
    fake_client.login_error = discord.LoginFailure("Improper token has been passed.")

    with pytest.raises(AuthenticationFailure) as exc_info:
        async with client_mod.open_discord_session("bad", OperationKind.UNBAN, ready_timeout=1):
            pytest.fail("session must not be yielded")

    assert exc_info.value.detail == "Improper token has been passed."
    assert fake_client.instances[0].closed == 1


@pytest.mark.asyncio
async def test_connection_failure_before_ready(fake_client) -> None:
    fake_client.connect_error = RuntimeError("privileged intents not enabled")

    with pytest.raises(SessionNotReady) as exc_info:
        async with client_mod.open_discord_session("token", OperationKind.ADD_ROLE, ready_timeout=1):
            pytest.fail("session must not be yielded")

    assert "privileged intents not enabled" in exc_info.value.detail
    assert fake_client.instances[0].closed == 1


@pytest.mark.asyncio
async def test_ready_timeout(fake_client) -> None:
    fake_client.becomes_ready = False

    with pytest.raises(SessionNotReady):
        async with client_mod.open_discord_session("token", OperationKind.ADD_ROLE, ready_timeout=0.05):
            pytest.fail("session must not be yielded")

    assert fake_client.instances[0].closed == 1


@pytest.mark.asyncio
async def test_discord_session_lookups() -> None:
    role = SimpleNamespace(id=5, name="Member")
    guild = SimpleNamespace(
        me=None,
        get_role=lambda role_id: None,
        fetch_roles=None,
        fetch_member=None,
    )

    async def fetch_roles():
        return [role]

    async def fetch_member(member_id):
        return SimpleNamespace(id=member_id)

    guild.fetch_roles = fetch_roles
    guild.fetch_member = fetch_member
    session = client_mod.DiscordSession(SimpleNamespace(user=SimpleNamespace(id=77)))

    assert await session.fetch_role(guild, 5) is role
    assert await session.fetch_role(guild, 6) is None
    assert (await session.fetch_own_member(guild)).id == 77


def test_capabilities_from_member_permissions() -> None:
    session = client_mod.DiscordSession(SimpleNamespace())
    member = SimpleNamespace(guild_permissions=discord.Permissions(ban_members=True))
    assert session.capabilities(member) == {Capability.BAN_MEMBERS}


@pytest.mark.parametrize("kind", list(OperationKind))
def test_client_does_not_chunk_guilds_at_startup(monkeypatch, kind) -> None:
    captured = {}

    def fake_init(self, **kwargs):
        captured.update(kwargs)

    monkeypatch.setattr(discord.Client, "__init__", fake_init)
    client = client_mod.GuildOpsClient(kind)

    assert captured["chunk_guilds_at_startup"] is False
    assert captured["intents"].value == kind.intents.value
    assert client.kind is kind
