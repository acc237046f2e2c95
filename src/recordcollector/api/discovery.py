# recordcollector/api/discovery.py
"""
Root-level discovery and health endpoints.
"""
from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> dict:
    collector = getattr(request.app.state, "collector", None)
    return {
        "status": "healthy",
        "schemas": len(collector.schemas) if collector else 0,
        "clients": len(collector.clients) if collector else 0,
    }
