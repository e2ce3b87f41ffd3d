from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(request: Request) -> dict[str, str | int]:
    return {
        "status": "ready",
        "connections": request.app.state.manager.count,
        "pending_tasks": request.app.state.relay.pending_tasks,
    }
