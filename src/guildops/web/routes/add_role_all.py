from typing import Optional

from fastapi import APIRouter, Body, Depends, Request

from guildops.engine import Pacer
from guildops.permissions import OperationKind
from guildops.schemas import RoleBatchResponse, RoleTargetPayload
from guildops.validation import MutationTarget, validate_role_id
from guildops.workflows import add_role_to_all

from ._bulk import ERROR_RESPONSES, mutation_target, run_in_session

router = APIRouter(tags=["bulk"])


@router.post("/addroleall", response_model=RoleBatchResponse, responses=ERROR_RESPONSES)
async def add_role_all(
    request: Request,
    target: MutationTarget = Depends(mutation_target),
    payload: Optional[RoleTargetPayload] = Body(default=None),
):
    """Add a role to every guild member, bots included."""

    role_id = validate_role_id(payload.role_id if payload else None, "add to")
    settings = request.app.state.settings

    return await run_in_session(
        request,
        OperationKind.ADD_ROLE,
        target,
        lambda session: add_role_to_all(
            session,
            target.guild_id,
            role_id,
            pacer=Pacer(settings.role_pacing_seconds),
            error_limit=settings.error_list_limit,
        ),
    )
