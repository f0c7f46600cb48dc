from fastapi import APIRouter, Depends, Header, HTTPException

from app.api.deps import get_cleanup_service
from app.core.config import settings
from app.services.cleanup.service import CleanupService


router = APIRouter(tags=["cleanup"])


def require_admin(x_admin_key: str | None = Header(default=None)) -> None:
    if settings.admin_api_key and x_admin_key != settings.admin_api_key:
        raise HTTPException(status_code=401, detail="unauthorized")


@router.post("/cleanup/run", dependencies=[Depends(require_admin)])
def run_cleanup(service: CleanupService = Depends(get_cleanup_service)) -> dict:
    """
    Removes every artifact past its TTL right away instead of waiting for the
    background sweep. Paid but undelivered artifacts expire the same way.
    """
    return service.expire_artifacts()
