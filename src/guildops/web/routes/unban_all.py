from fastapi import APIRouter, Depends, Request

from guildops.engine import Pacer
from guildops.permissions import OperationKind
from guildops.schemas import UnbanBatchResponse
from guildops.validation import MutationTarget
from guildops.workflows import unban_all as unban_all_workflow

from ._bulk import ERROR_RESPONSES, mutation_target, run_in_session

router = APIRouter(tags=["bulk"])


@router.post("/unbanall", response_model=UnbanBatchResponse, responses=ERROR_RESPONSES)
async def unban_all(request: Request, target: MutationTarget = Depends(mutation_target)):
    """Lift every ban in the guild."""

    settings = request.app.state.settings

    return await run_in_session(
        request,
        OperationKind.UNBAN,
        target,
        lambda session: unban_all_workflow(
            session,
            target.guild_id,
            pacer=Pacer(settings.unban_pacing_seconds),
            reason=settings.unban_reason,
            error_limit=settings.error_list_limit,
            unbanned_limit=settings.unbanned_list_limit,
        ),
    )
