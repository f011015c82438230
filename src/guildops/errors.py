"""Error taxonomy shared by the workflows and the HTTP layer.

Every error carries the HTTP status it maps to, a short machine-readable
``label`` (rendered as ``error``) and a human-readable ``detail``.
"""

from __future__ import annotations

__all__ = [
    "GuildOpsError",
    "ValidationError",
    "MissingCredential",
    "MissingTarget",
    "InvalidTarget",
    "MissingRoleArgument",
    "InvalidRoleArgument",
    "AuthorizationError",
    "InsufficientPermission",
    "RolePrecedenceViolation",
    "NotFoundError",
    "GuildNotFound",
    "RoleNotFound",
    "InternalError",
    "AuthenticationFailure",
    "SessionNotReady",
    "BatchTimeout",
]


class GuildOpsError(Exception):
    status_code: int = 500
    label: str = "Internal server error"
    default_detail: str = "An unexpected error occurred"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_payload(self) -> dict[str, str]:
        return {"error": self.label, "detail": self.detail}


# 400 ---------------------------------------------------------------------


class ValidationError(GuildOpsError):
    status_code = 400
    label = "Invalid request"
    default_detail = "The request is malformed"


class MissingCredential(ValidationError):
    label = "Missing bot token"
    default_detail = "Please provide x-bot-token header"


class MissingTarget(ValidationError):
    label = "Missing guild ID"
    default_detail = "Please provide x-guild-id header"


class InvalidTarget(ValidationError):
    label = "Invalid guild ID"
    default_detail = "The x-guild-id header must be a numeric guild ID"


class MissingRoleArgument(ValidationError):
    label = "Missing roleId in request body"
    default_detail = "Please provide a roleId"


class InvalidRoleArgument(ValidationError):
    label = "Invalid roleId"
    default_detail = "roleId must be a numeric role ID"


# 403 ---------------------------------------------------------------------


class AuthorizationError(GuildOpsError):
    status_code = 403
    label = "Forbidden"
    default_detail = "The bot is not allowed to perform this operation"


class InsufficientPermission(AuthorizationError):
    label = "Insufficient permissions"


class RolePrecedenceViolation(AuthorizationError):
    label = "Cannot manage role"
    default_detail = "Bot role position is not high enough to manage this role"


# 404 ---------------------------------------------------------------------


class NotFoundError(GuildOpsError):
    status_code = 404
    label = "Not found"
    default_detail = "The requested resource could not be found"


class GuildNotFound(NotFoundError):
    label = "Guild not found"
    default_detail = "The specified guild ID could not be found"


class RoleNotFound(NotFoundError):
    label = "Role not found"


# 500 ---------------------------------------------------------------------


class InternalError(GuildOpsError):
    pass


class AuthenticationFailure(InternalError):
    label = "Authentication failed"
    default_detail = "The bot token was rejected by Discord"


class SessionNotReady(InternalError):
    default_detail = "Discord session did not become ready"


class BatchTimeout(InternalError):
    label = "Batch timed out"
    default_detail = "The operation exceeded the configured batch timeout"
