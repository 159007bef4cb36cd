from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel
from datetime import datetime, timezone

from ..settings import settings


router = APIRouter()


class Ready(BaseModel):
    status: str
    time_utc: str
    version: str
    store_backend: str
    region: str


@router.get("/readyz", response_model=Ready)
async def readyz():
    return Ready(
        status="ok",
        time_utc=datetime.now(timezone.utc).isoformat(),
        version=settings.app_version,
        store_backend=settings.store_backend,
        region=settings.region,
    )
