"""Liveness probe; no identity header required."""

from fastapi import APIRouter

from ...core.db import now_iso

router = APIRouter()


@router.get("/health")
async def health() -> dict:
    return {
        "status": "OK",
        "message": "Startech Backend API po funksionon",
        "timestamp": now_iso(),
    }
