"""
Base classes and types for payment gateways.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class CheckoutHandle:
    """Redirectable payment session issued for one artifact."""
    id: str
    url: str


@dataclass
class CheckoutStatus:
    """Gateway view of a checkout session."""
    id: str
    paid: bool
    payment_status: str
    artifact_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class GatewayEvent:
    """Verified asynchronous notification from the gateway."""
    id: str
    type: str
    checkout: CheckoutStatus | None = None


class PaymentGatewayError(Exception):
    """Raised when the gateway call fails or times out."""
    def __init__(self, message: str, detail: dict[str, Any] | None = None):
        super().__init__(message)
        self.detail = detail or {}


class EventVerificationError(Exception):
    """Raised when an event signature does not verify."""


class MalformedEventError(Exception):
    """Raised when an event body cannot be parsed."""


class PaymentGateway(ABC):
    """Base class for payment gateways."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if gateway is configured."""
        pass

    @abstractmethod
    def create_checkout(self, artifact_id: str, display_name: str) -> CheckoutHandle:
        """Open a checkout tagged with artifact_id. Raises PaymentGatewayError."""
        pass

    @abstractmethod
    def get_checkout(self, checkout_id: str) -> CheckoutStatus:
        """Fetch checkout status. Raises PaymentGatewayError."""
        pass

    @abstractmethod
    def parse_event(self, payload: bytes, signature: str | None) -> GatewayEvent:
        """Verify and decode a webhook body. Raises EventVerificationError / MalformedEventError."""
        pass
