"""
Stripe webhook: confirms payment asynchronously, independent of /verify-payment.
Events for artifacts that no longer exist are acknowledged, not retried.
"""
import logging

from fastapi import APIRouter, Depends, Header, Request

from app.api.deps import get_controller, get_gateway
from app.artifacts.lifecycle import LifecycleController
from app.core.errors import ArtifactNotFound, BadSignature, MalformedEvent
from app.services.payments.base import EventVerificationError, MalformedEventError, PaymentGateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])

PAID_EVENT_TYPES = frozenset({
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
})


@router.post("/webhook")
async def payment_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None),
    controller: LifecycleController = Depends(get_controller),
    gateway: PaymentGateway = Depends(get_gateway),
) -> dict:
    payload = await request.body()
    try:
        event = gateway.parse_event(payload, stripe_signature)
    except EventVerificationError as e:
        logger.warning("webhook_bad_signature", extra={"error": str(e)})
        raise BadSignature() from e
    except MalformedEventError as e:
        logger.warning("webhook_malformed", extra={"error": str(e)})
        raise MalformedEvent(str(e)) from e

    checkout = event.checkout
    if event.type not in PAID_EVENT_TYPES or checkout is None or not checkout.paid:
        logger.info("webhook_ignored", extra={"event_type": event.type})
        return {"received": True, "applied": False}

    if not checkout.artifact_id:
        logger.warning("webhook_without_artifact", extra={"event_type": event.type, "checkout_id": checkout.id})
        return {"received": True, "applied": False}

    applied = True
    try:
        controller.confirm(checkout.artifact_id, source="webhook")
    except ArtifactNotFound:
        applied = False
    logger.info(
        "webhook_processed",
        extra={"event_id": event.id, "event_type": event.type, "artifact_id": checkout.artifact_id, "applied": applied},
    )
    return {"received": True, "applied": applied}
