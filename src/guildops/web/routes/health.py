from fastapi import APIRouter

router = APIRouter(tags=["misc"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe; never touches Discord."""
    return {"status": "ok"}
