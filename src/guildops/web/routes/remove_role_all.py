from typing import Optional

from fastapi import APIRouter, Body, Depends, Request

from guildops.engine import Pacer
from guildops.permissions import OperationKind
from guildops.schemas import RoleBatchResponse, RoleTargetPayload
from guildops.validation import MutationTarget, validate_role_id
from guildops.workflows import remove_role_from_all

from ._bulk import ERROR_RESPONSES, mutation_target, run_in_session

router = APIRouter(tags=["bulk"])


@router.post("/roleremoveall", response_model=RoleBatchResponse, responses=ERROR_RESPONSES)
async def remove_role_all(
    request: Request,
    target: MutationTarget = Depends(mutation_target),
    payload: Optional[RoleTargetPayload] = Body(default=None),
):
    """Remove a role from every guild member, bots included."""

    role_id = validate_role_id(payload.role_id if payload else None, "remove from")
    settings = request.app.state.settings

    return await run_in_session(
        request,
        OperationKind.REMOVE_ROLE,
        target,
        lambda session: remove_role_from_all(
            session,
            target.guild_id,
            role_id,
            pacer=Pacer(settings.role_pacing_seconds),
            error_limit=settings.error_list_limit,
        ),
    )
