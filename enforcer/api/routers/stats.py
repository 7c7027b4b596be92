"""
/stats — evaluation counters collected since the app started.
"""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("")
def get_stats(request: Request):
    return request.app.state.stats.snapshot()
