import contextlib
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from guildops.config import Settings
from guildops.permissions import Capability
from guildops.web.server import get_app

GUILD_ID = 111
BOT_ID = 1
TARGET_ROLE_ID = 500
EQUAL_ROLE_ID = 600
HIGH_ROLE_ID = 700


class FakeRole:
    def __init__(self, role_id: int, name: str, position: int) -> None:
        self.id = role_id
        self.name = name
        self.position = position


class FakeUser:
    def __init__(self, user_id: int, name: str, discriminator: str = "0") -> None:
        self.id = user_id
        self.name = name
        self.discriminator = discriminator


class FakeMember:
    def __init__(self, member_id: int, name: str, roles=None, top_role=None) -> None:
        self.id = member_id
        self.name = name
        self.roles = list(roles or [])
        self.top_role = top_role


class FakeGuild:
    def __init__(self, guild_id: int) -> None:
        self.id = guild_id
        self.roles: dict[int, FakeRole] = {}
        self.members: list[FakeMember] = []
        self.bans: list[SimpleNamespace] = []

    def add_role(self, role: FakeRole) -> FakeRole:
        self.roles[role.id] = role
        return role

    def ban(self, user: FakeUser) -> None:
        self.bans.append(SimpleNamespace(user=user, reason=None))


class FakeSession:
    """In-memory stand-in for `guildops.client.DiscordSession`."""

    def __init__(self, guild: FakeGuild, actor: FakeMember, capabilities=None) -> None:
        self.guilds = {guild.id: guild}
        self.actor = actor
        self.caps = frozenset(capabilities if capabilities is not None else Capability)
        self.failing_ids: set[int] = set()
        self.failure_reason = "Missing Access"
        self.mutations: list[tuple[str, int]] = []
        self.unban_reasons: list[str] = []

    def _maybe_fail(self, item_id: int) -> None:
        if item_id in self.failing_ids:
            raise RuntimeError(self.failure_reason)

    async def fetch_guild(self, guild_id):
        return self.guilds.get(guild_id)

    async def fetch_own_member(self, guild):
        return self.actor

    async def fetch_members(self, guild):
        return list(guild.members)

    async def fetch_role(self, guild, role_id):
        return guild.roles.get(role_id)

    async def add_role(self, member, role):
        self._maybe_fail(member.id)
        member.roles.append(role)
        self.mutations.append(("add", member.id))

    async def remove_role(self, member, role):
        self._maybe_fail(member.id)
        member.roles = [r for r in member.roles if r.id != role.id]
        self.mutations.append(("remove", member.id))

    async def fetch_bans(self, guild):
        return list(guild.bans)

    async def unban(self, guild, user, reason):
        self._maybe_fail(user.id)
        guild.bans = [entry for entry in guild.bans if entry.user.id != user.id]
        self.mutations.append(("unban", user.id))
        self.unban_reasons.append(reason)

    def capabilities(self, member):
        return self.caps


class FakeSessionFactory:
    """Counts how many sessions were opened and released."""

    def __init__(self, session: FakeSession, open_error: Exception | None = None) -> None:
        self.session = session
        self.open_error = open_error
        self.opened = 0
        self.released = 0
        self.calls: list[tuple] = []

    def __call__(self, token, kind, ready_timeout):
        self.calls.append((token, kind, ready_timeout))
        return self._open()

    @contextlib.asynccontextmanager
    async def _open(self):
        self.opened += 1
        if self.open_error is not None:
            self.released += 1
            raise self.open_error
        try:
            yield self.session
        finally:
            self.released += 1


@pytest.fixture
def guild() -> FakeGuild:
    guild = FakeGuild(GUILD_ID)
    guild.add_role(FakeRole(TARGET_ROLE_ID, "Member", position=3))
    guild.add_role(FakeRole(EQUAL_ROLE_ID, "Bot Peer", position=10))
    guild.add_role(FakeRole(HIGH_ROLE_ID, "Admin", position=15))
    target = guild.roles[TARGET_ROLE_ID]
    guild.members = [
        FakeMember(10, "alice"),
        FakeMember(11, "bob", roles=[target]),
        FakeMember(12, "carol"),
        FakeMember(13, "dave", roles=[target]),
        FakeMember(14, "helper-bot"),
    ]
    return guild


@pytest.fixture
def actor() -> FakeMember:
    return FakeMember(BOT_ID, "guildops", top_role=FakeRole(900, "Bot", position=10))


@pytest.fixture
def session(guild, actor) -> FakeSession:
    return FakeSession(guild, actor)


@pytest.fixture
def settings() -> Settings:
    return Settings(role_pacing_seconds=0, unban_pacing_seconds=0, batch_timeout=None)


@pytest.fixture
def factory(session) -> FakeSessionFactory:
    return FakeSessionFactory(session)


@pytest.fixture
def client(settings, factory) -> TestClient:
    return TestClient(get_app(settings=settings, session_factory=factory))


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"x-bot-token": "test-token", "x-guild-id": str(GUILD_ID)}
