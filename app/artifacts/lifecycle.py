"""
LifecycleController: Pending -> Paid -> Delivered, with Expired reachable from both.

Every transition is a single ArtifactStore call, so the controller needs no
locking of its own. Deleted records are never recreated.
"""
from __future__ import annotations

import logging
import os
import re
from uuid import uuid4

from app.artifacts.models import (
    ArtifactRecord,
    BeginResult,
    ConfirmOutcome,
    DeliveredArtifact,
    PaymentState,
)
from app.artifacts.store import ArtifactStore
from app.core.config import settings
from app.core.errors import ArtifactNotFound, MissingInput, NotPaid, PaymentSetupFailed
from app.services.payments.base import PaymentGateway, PaymentGatewayError
from app.utils.metrics import (
    artifacts_created_total,
    artifacts_delivered_total,
    payment_confirmations_total,
)

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r'[\x00-\x1f"\\/;]+')


def suggested_filename(display_name: str) -> str:
    """Download name for the repaired text: original stem + .txt."""
    base = os.path.basename(display_name.replace("\\", "/"))
    stem = _UNSAFE_FILENAME_CHARS.sub("_", os.path.splitext(base)[0]).strip(" ._")
    if not stem:
        return settings.default_download_name
    return f"{stem}.txt"


class LifecycleController:
    def __init__(self, store: ArtifactStore, gateway: PaymentGateway) -> None:
        self.store = store
        self.gateway = gateway

    def begin(self, content: str, display_name: str) -> BeginResult:
        """
        Store a Pending artifact and open a checkout for it.

        If the gateway fails the record stays stored without a checkout and is
        reclaimed by TTL; the caller gets PaymentSetupFailed and may retry.
        """
        if not content:
            raise MissingInput("Processed content is empty")
        if not display_name or not display_name.strip():
            raise MissingInput("Missing file name")

        record = ArtifactRecord(
            id=str(uuid4()),
            content=content,
            original_name=display_name,
            created_at=self.store.now(),
        )
        artifact_id = self.store.put(record)
        artifacts_created_total.inc()
        logger.info(
            "artifact_created",
            extra={"artifact_id": artifact_id, "file_name": display_name, "size_bytes": len(content)},
        )

        try:
            checkout = self.gateway.create_checkout(artifact_id, display_name)
        except PaymentGatewayError as e:
            logger.warning(
                "checkout_create_failed",
                extra={"artifact_id": artifact_id, "error": str(e), "detail": e.detail},
            )
            raise PaymentSetupFailed(detail={"artifact_id": artifact_id}) from e

        logger.info("checkout_created", extra={"artifact_id": artifact_id, "checkout_id": checkout.id})
        return BeginResult(artifact_id=artifact_id, checkout_id=checkout.id, checkout_url=checkout.url)

    def confirm(self, artifact_id: str, source: str = "verify") -> ConfirmOutcome:
        """Pending -> Paid. Raises ArtifactNotFound for delivered, expired or unknown ids."""
        try:
            changed = self.store.mark_paid(artifact_id)
        except ArtifactNotFound:
            logger.warning(
                "payment_confirmed_for_missing_artifact",
                extra={"artifact_id": artifact_id, "source": source},
            )
            raise
        outcome = ConfirmOutcome.CONFIRMED if changed else ConfirmOutcome.ALREADY_PAID
        payment_confirmations_total.labels(source=source, outcome=outcome.value).inc()
        logger.info("payment_confirmed", extra={"artifact_id": artifact_id, "source": source})
        return outcome

    def deliver(self, artifact_id: str) -> DeliveredArtifact:
        """
        Hand out the content once. A pending artifact is rejected without being
        consumed; a record that vanishes between the status check and the
        removal (concurrent delivery or sweep) is reported as not found.
        """
        if self.store.peek_status(artifact_id) != PaymentState.PAID:
            raise NotPaid()
        record = self.store.get_and_remove(artifact_id)
        artifacts_delivered_total.inc()
        logger.info("artifact_delivered", extra={"artifact_id": artifact_id})
        return DeliveredArtifact(
            content=record.content,
            display_name=record.original_name,
            filename=suggested_filename(record.original_name),
        )

    def sweep(self) -> int:
        return self.store.expire_sweep()
