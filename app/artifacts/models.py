"""
DTO artifacts: ArtifactRecord (store row), BeginResult, ConfirmOutcome, DeliveredArtifact.
"""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class PaymentState(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class ConfirmOutcome(str, Enum):
    CONFIRMED = "confirmed"
    ALREADY_PAID = "already_paid"


# ----- Store row -----


class ArtifactRecord(BaseModel):
    """One processed submission. Content and name never change after creation."""

    id: str
    content: str
    original_name: str
    created_at: float = Field(..., description="Store clock reading at creation (monotonic seconds)")
    payment_state: PaymentState = PaymentState.PENDING
    delivered: bool = False

    model_config = {"frozen": True}


# ----- Controller results -----


class BeginResult(BaseModel):
    """Result of begin: the artifact handle plus the checkout the client must complete."""

    artifact_id: str
    checkout_id: str
    checkout_url: str

    model_config = {"frozen": True}


class DeliveredArtifact(BaseModel):
    """Result of deliver: content and framing for the single download."""

    content: str
    display_name: str
    filename: str = Field(..., description="Suggested download file name")

    model_config = {"frozen": True}
