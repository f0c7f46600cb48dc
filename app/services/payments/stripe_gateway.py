"""
Stripe Checkout gateway.

Responsibilities:
- Open a checkout session tagged with the artifact id (client_reference_id + metadata)
- Fetch payment status by session id
- Verify webhook signatures and decode events
"""
import json
import logging
from typing import Any

import pybreaker
import stripe

from app.core.config import settings
from app.services.circuit_breaker import get_circuit_breaker
from app.services.payments.base import (
    CheckoutHandle,
    CheckoutStatus,
    EventVerificationError,
    GatewayEvent,
    MalformedEventError,
    PaymentGateway,
    PaymentGatewayError,
)
from app.utils.metrics import upstream_failures_total

logger = logging.getLogger(__name__)

WEBHOOK_TOLERANCE_SECONDS = 300
METADATA_VALUE_LIMIT = 500  # Stripe metadata value limit

# Raised for a bad request from our caller (unknown session id, declined card);
# they say nothing about Stripe's health and never trip the breaker.
CALLER_ERRORS = (stripe.InvalidRequestError, stripe.CardError)


def _as_dict(obj: Any) -> dict[str, Any]:
    if obj is None:
        return {}
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


def _gateway_error(e: stripe.StripeError) -> PaymentGatewayError:
    return PaymentGatewayError(
        getattr(e, "user_message", None) or str(e),
        {"http_status": getattr(e, "http_status", None), "code": getattr(e, "code", None)},
    )


class StripeGateway(PaymentGateway):
    def __init__(self, breaker: pybreaker.CircuitBreaker | None = None) -> None:
        self.api_key = settings.stripe_secret_key
        self.webhook_secret = settings.stripe_webhook_secret
        self._breaker = breaker or get_circuit_breaker("payment_gateway", exclude=list(CALLER_ERRORS))
        stripe.api_version = settings.stripe_api_version
        stripe.max_network_retries = 0
        stripe.default_http_client = stripe.RequestsClient(timeout=settings.payment_timeout_seconds)

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _call(self, operation: str, func, *args: Any, **kwargs: Any) -> Any:
        if not self.is_available():
            upstream_failures_total.labels(collaborator="payment_gateway", operation=operation).inc()
            raise PaymentGatewayError("Stripe gateway not configured")
        try:
            return self._breaker.call(func, *args, **kwargs)
        except CALLER_ERRORS as e:
            raise _gateway_error(e) from e
        except pybreaker.CircuitBreakerError as e:
            upstream_failures_total.labels(collaborator="payment_gateway", operation=operation).inc()
            raise PaymentGatewayError("Payment gateway temporarily unavailable", {"breaker": "open"}) from e
        except stripe.StripeError as e:
            upstream_failures_total.labels(collaborator="payment_gateway", operation=operation).inc()
            raise _gateway_error(e) from e

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    def create_checkout(self, artifact_id: str, display_name: str) -> CheckoutHandle:
        base = settings.base_url
        session = self._call(
            "create_checkout",
            stripe.checkout.Session.create,
            api_key=self.api_key,
            payment_method_types=["card"],
            line_items=[{
                "price_data": {
                    "currency": settings.payment_currency,
                    "product_data": {
                        "name": settings.payment_product_name,
                        "description": display_name[:METADATA_VALUE_LIMIT],
                    },
                    "unit_amount": settings.payment_unit_amount,
                },
                "quantity": 1,
            }],
            mode="payment",
            success_url=f"{base}/download.html?file_id={artifact_id}&session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base}/?cancelled=true",
            client_reference_id=artifact_id,
            metadata={
                "fileId": artifact_id,
                "fileName": display_name[:METADATA_VALUE_LIMIT],
            },
        )
        return CheckoutHandle(id=session.id, url=session.url)

    def get_checkout(self, checkout_id: str) -> CheckoutStatus:
        session = self._call(
            "get_checkout",
            stripe.checkout.Session.retrieve,
            checkout_id,
            api_key=self.api_key,
        )
        return self._status_from_session(_as_dict(session))

    @staticmethod
    def _status_from_session(session: dict[str, Any]) -> CheckoutStatus:
        metadata = {k: str(v) for k, v in (session.get("metadata") or {}).items()}
        payment_status = session.get("payment_status") or "unpaid"
        return CheckoutStatus(
            id=session.get("id", ""),
            paid=payment_status == "paid",
            payment_status=payment_status,
            artifact_id=session.get("client_reference_id") or metadata.get("fileId"),
            metadata=metadata,
        )

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    def parse_event(self, payload: bytes, signature: str | None) -> GatewayEvent:
        if not self.webhook_secret:
            raise EventVerificationError("Webhook secret not configured")
        if not signature:
            raise EventVerificationError("Missing Stripe-Signature header")
        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedEventError("Event body is not UTF-8") from e
        try:
            stripe.WebhookSignature.verify_header(
                body, signature, self.webhook_secret, WEBHOOK_TOLERANCE_SECONDS
            )
        except stripe.SignatureVerificationError as e:
            raise EventVerificationError(str(e)) from e

        try:
            event = json.loads(body)
        except ValueError as e:
            raise MalformedEventError("Event body is not JSON") from e
        if not isinstance(event, dict) or not event.get("type"):
            raise MalformedEventError("Event has no type")

        checkout = None
        if event["type"].startswith("checkout.session."):
            obj = (event.get("data") or {}).get("object")
            if not isinstance(obj, dict):
                raise MalformedEventError("Checkout event has no session object")
            checkout = self._status_from_session(obj)
        return GatewayEvent(id=event.get("id", ""), type=event["type"], checkout=checkout)
