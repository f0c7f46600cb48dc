"""
Artifact API: submit (process + checkout), verify payment, single download.
Paths match the public download page (index.html / download.html).
"""
import base64
import binascii
import logging
import unicodedata
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field

from app.api.deps import get_controller, get_gateway, get_processor
from app.artifacts.lifecycle import LifecycleController
from app.core.config import settings
from app.core.errors import (
    GatewayError,
    MissingHandle,
    MissingId,
    MissingInput,
    NotPaid,
    PayloadTooLarge,
    ProcessingFailed,
)
from app.services.payments.base import PaymentGateway, PaymentGatewayError
from app.services.processing.base import DocumentProcessingError, DocumentProcessor

logger = logging.getLogger(__name__)

router = APIRouter(tags=["artifacts"])


class SubmitRequest(BaseModel):
    file_data: str | None = Field(None, alias="fileData", description="Base64 PDF, optionally a data: URL")
    file_name: str | None = Field(None, alias="fileName")

    model_config = {"populate_by_name": True}


class VerifyPaymentRequest(BaseModel):
    session_id: str | None = Field(None, alias="sessionId")

    model_config = {"populate_by_name": True}


def _decode_upload(file_data: str) -> bytes:
    if file_data.startswith("data:") and "," in file_data:
        file_data = file_data.split(",", 1)[1]
    # line-wrapped base64 (MIME style) is accepted
    file_data = "".join(file_data.split())
    # base64 inflates by 4/3; reject before decoding
    if len(file_data) * 3 // 4 > settings.max_upload_bytes:
        raise PayloadTooLarge(f"File exceeds {settings.max_upload_mb} MB")
    try:
        file_bytes = base64.b64decode(file_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MissingInput("File data is not valid base64") from e
    if not file_bytes:
        raise MissingInput("Uploaded file is empty")
    return file_bytes


def _content_disposition(filename: str) -> str:
    folded = unicodedata.normalize("NFKD", filename)
    ascii_name = folded.encode("ascii", "ignore").decode("ascii")
    stem = ascii_name.rpartition(".")[0] if "." in ascii_name else ascii_name
    if not stem.strip(" ._"):
        ascii_name = settings.default_download_name
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


@router.post("/process-and-pay")
def process_and_pay(
    body: SubmitRequest,
    controller: LifecycleController = Depends(get_controller),
    processor: DocumentProcessor = Depends(get_processor),
) -> dict:
    """Process the upload, store the artifact and open a checkout for it."""
    if not body.file_data or not body.file_name or not body.file_name.strip():
        raise MissingInput()
    file_bytes = _decode_upload(body.file_data)

    try:
        processed = processor.process(file_bytes, body.file_name)
    except DocumentProcessingError as e:
        logger.warning(
            "document_processing_failed",
            extra={"file_name": body.file_name, "error": str(e), "detail": e.detail},
        )
        raise ProcessingFailed(f"Document processing failed: {e}", detail=e.detail) from e

    result = controller.begin(processed.content, body.file_name)
    return {
        "success": True,
        "fileId": result.artifact_id,
        "sessionId": result.checkout_id,
        "paymentUrl": result.checkout_url,
    }


@router.post("/verify-payment")
def verify_payment(
    body: VerifyPaymentRequest,
    controller: LifecycleController = Depends(get_controller),
    gateway: PaymentGateway = Depends(get_gateway),
) -> dict:
    """Ask the gateway whether the checkout is paid and, if so, unlock the artifact."""
    if not body.session_id:
        raise MissingHandle()

    try:
        checkout = gateway.get_checkout(body.session_id)
    except PaymentGatewayError as e:
        logger.warning(
            "checkout_lookup_failed",
            extra={"checkout_id": body.session_id, "error": str(e), "detail": e.detail},
        )
        raise GatewayError(detail=e.detail) from e

    if not checkout.paid:
        logger.info(
            "payment_not_completed",
            extra={"checkout_id": checkout.id, "payment_status": checkout.payment_status},
        )
        raise NotPaid()
    if not checkout.artifact_id:
        raise GatewayError("File ID not found in session")

    controller.confirm(checkout.artifact_id, source="verify")
    return {
        "success": True,
        "fileId": checkout.artifact_id,
        "fileName": checkout.metadata.get("fileName") or settings.default_download_name,
    }


@router.get("/get-file")
def get_file(
    file_id: str | None = Query(None),
    controller: LifecycleController = Depends(get_controller),
) -> Response:
    """Single download: the artifact is gone once this returns."""
    if not file_id:
        raise MissingId()
    artifact = controller.deliver(file_id)
    return Response(
        content=artifact.content,
        media_type="text/plain; charset=utf-8",
        headers={
            "Content-Disposition": _content_disposition(artifact.filename),
            "X-Display-Name": quote(artifact.display_name),
        },
    )
