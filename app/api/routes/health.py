from fastapi import APIRouter, Depends, Request, Response

from app.api.deps import get_gateway, get_processor
from app.services.payments.base import PaymentGateway
from app.services.processing.base import DocumentProcessor


router = APIRouter()


@router.get("/health")
def health(
    request: Request,
    processor: DocumentProcessor = Depends(get_processor),
    gateway: PaymentGateway = Depends(get_gateway),
) -> dict:
    """Liveness probe - always returns 200 if app is running."""
    return {
        "status": "ok",
        "artifacts": len(request.app.state.controller.store),
        "processor_configured": processor.is_available(),
        "gateway_configured": gateway.is_available(),
    }


@router.get("/ready")
def readiness(
    response: Response,
    processor: DocumentProcessor = Depends(get_processor),
    gateway: PaymentGateway = Depends(get_gateway),
) -> dict:
    """Readiness probe - returns 503 if a collaborator is not configured."""
    missing = []
    if not processor.is_available():
        missing.append("processor")
    if not gateway.is_available():
        missing.append("payment_gateway")
    if missing:
        response.status_code = 503
        return {"status": "not_ready", "missing": missing}
    return {"status": "ready"}
