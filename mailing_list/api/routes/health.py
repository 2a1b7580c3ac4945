from typing import Any

from fastapi import APIRouter

router = APIRouter()


@router.get("/health_check")
def health_check() -> dict[str, Any]:
    """Liveness probe."""
    return {"status": "ok", "service": "mailing-list"}
