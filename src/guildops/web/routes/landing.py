from fastapi import APIRouter

from guildops.schemas import StatusResponse

router = APIRouter(tags=["misc"])

ENDPOINTS = [
    "POST /addroleall - Add role to all guild members",
    "POST /roleremoveall - Remove role from all guild members",
    "POST /unbanall - Unban all users from the server",
]


@router.get("/", response_model=StatusResponse)
async def landing():
    """Service status and the list of supported endpoints."""
    return StatusResponse(status="Discord Bot API Server is running", endpoints=ENDPOINTS)
