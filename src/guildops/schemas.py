from typing import Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

__all__ = [
    "RoleTargetPayload",
    "RoleBatchResponse",
    "UnbannedUser",
    "UnbanBatchResponse",
    "ErrorResponse",
    "StatusResponse",
]


class _CamelModel(BaseModel):
    """JSON field names are camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RoleTargetPayload(_CamelModel):
    # Optional here so a missing value is reported as our own 400, not a 422.
    role_id: Optional[Union[str, int]] = None


class RoleBatchResponse(_CamelModel):
    success: bool = True
    role_id: str
    role_name: str
    total_members: int
    success_count: int
    skip_count: int
    error_count: int
    errors: list[str] = []
    detail: str


class UnbannedUser(_CamelModel):
    id: str
    username: str
    tag: str


class UnbanBatchResponse(_CamelModel):
    success: bool = True
    total_bans: int
    success_count: int
    error_count: int
    errors: list[str] = []
    unbanned_users: list[UnbannedUser] = []
    detail: str


class ErrorResponse(BaseModel):
    error: str
    detail: str


class StatusResponse(BaseModel):
    status: str
    endpoints: list[str]
