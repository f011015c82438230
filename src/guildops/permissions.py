from __future__ import annotations

import enum

import discord

__all__ = ["Capability", "OperationKind", "capabilities_from_permissions"]


class Capability(enum.Enum):
    """Platform permissions a bulk operation can require."""

    MANAGE_ROLES = "manage_roles"
    BAN_MEMBERS = "ban_members"

    @property
    def display_name(self) -> str:
        return self.name

    def granted_by(self, perms: discord.Permissions) -> bool:
        return perms.administrator or getattr(perms, self.value)


class OperationKind(enum.Enum):
    ADD_ROLE = "add_role"
    REMOVE_ROLE = "remove_role"
    UNBAN = "unban"

    @property
    def required_capability(self) -> Capability:
        if self is OperationKind.UNBAN:
            return Capability.BAN_MEMBERS
        return Capability.MANAGE_ROLES

    @property
    def intents(self) -> discord.Intents:
        """Minimal gateway intents for a session running this operation."""

        intents = discord.Intents.none()
        intents.guilds = True
        if self is OperationKind.UNBAN:
            intents.moderation = True
        else:
            intents.members = True
        return intents


def capabilities_from_permissions(perms: discord.Permissions) -> frozenset[Capability]:
    return frozenset(cap for cap in Capability if cap.granted_by(perms))
