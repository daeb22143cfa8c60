# Health router.
# Created: 2026-10-12

from __future__ import annotations

from fastapi import APIRouter, Depends

from wechat_connect.api.deps import get_app_settings
from wechat_connect.config import Settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health(settings: Settings = Depends(get_app_settings)):
    return {"status": "ok", "dev_mode": settings.dev_mode}
