"""
Ephemeral paid-artifact lifecycle (internal library).
Storage (ArtifactStore) and transitions (LifecycleController) are separate; the
controller is the only writer and every transition is one store call.
"""
from app.artifacts.lifecycle import LifecycleController, suggested_filename
from app.artifacts.models import (
    ArtifactRecord,
    BeginResult,
    ConfirmOutcome,
    DeliveredArtifact,
    PaymentState,
)
from app.artifacts.store import ArtifactStore

__all__ = [
    "ArtifactRecord",
    "ArtifactStore",
    "BeginResult",
    "ConfirmOutcome",
    "DeliveredArtifact",
    "LifecycleController",
    "PaymentState",
    "suggested_filename",
]
