"""Liveness endpoint."""

from fastapi import APIRouter

from herald import __version__

router = APIRouter()


@router.get("/live", summary="Liveness check")
async def live() -> dict[str, str]:
    return {"status": "ok", "version": __version__}
