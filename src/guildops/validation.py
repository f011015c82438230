from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .errors import (
    InvalidRoleArgument,
    InvalidTarget,
    MissingCredential,
    MissingRoleArgument,
    MissingTarget,
)

__all__ = ["MutationTarget", "validate_target", "validate_role_id"]


@dataclass(frozen=True)
class MutationTarget:
    credential: str
    guild_id: int

    def __repr__(self) -> str:  # keep the token out of logs
        return f"MutationTarget(guild_id={self.guild_id})"


def _parse_snowflake(raw: str) -> Optional[int]:
    raw = raw.strip()
    # isdigit() alone accepts superscripts that int() rejects
    if not (raw.isascii() and raw.isdigit()):
        return None
    return int(raw)


def validate_target(credential: Optional[str], guild_id: Optional[str]) -> MutationTarget:
    """Check the bot token and guild id headers, in that order."""

    if not credential or not credential.strip():
        raise MissingCredential()
    if not guild_id or not guild_id.strip():
        raise MissingTarget()
    parsed = _parse_snowflake(guild_id)
    if parsed is None:
        raise InvalidTarget()
    return MutationTarget(credential=credential.strip(), guild_id=parsed)


def validate_role_id(raw: Union[str, int, None], verb: str) -> int:
    """Return *raw* as a role snowflake; *verb* completes the error detail."""

    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise MissingRoleArgument(f"Please provide a roleId to {verb} all users")
    if isinstance(raw, bool):
        raise InvalidRoleArgument()
    if isinstance(raw, int):
        return raw
    parsed = _parse_snowflake(raw)
    if parsed is None:
        raise InvalidRoleArgument()
    return parsed
