from __future__ import annotations

import logging

from fastapi import APIRouter, Request

import config
from fraction_engine.levels import reload_levels

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/reload")
def reload_level_table(request: Request):
    expected = config.admin_token()
    provided = request.headers.get("x-admin-token")

    if not expected:
        return {"ok": False, "error": "ADMIN_TOKEN not configured on server."}
    if provided != expected:
        return {"ok": False, "error": "unauthorized"}

    n = reload_levels()
    logger.info("Reloaded level table (%d levels)", n)
    return {"ok": True, "count": n}
