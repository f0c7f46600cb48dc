"""
Payment gateway abstraction with the Stripe Checkout implementation.
"""
from .base import (
    CheckoutHandle,
    CheckoutStatus,
    EventVerificationError,
    GatewayEvent,
    MalformedEventError,
    PaymentGateway,
    PaymentGatewayError,
)
from .stripe_gateway import StripeGateway

__all__ = [
    "CheckoutHandle",
    "CheckoutStatus",
    "EventVerificationError",
    "GatewayEvent",
    "MalformedEventError",
    "PaymentGateway",
    "PaymentGatewayError",
    "StripeGateway",
]
