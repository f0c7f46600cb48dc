"""
Error taxonomy shared by the lifecycle core, collaborators and HTTP layer.

Every error carries a stable machine-readable ``kind``; the API layer renders
it as ``{"success": false, "kind": ..., "message": ...}``.
"""
from typing import Any


class ServiceError(Exception):
    """Base class for errors that are reported to the caller."""

    kind: str = "InternalError"
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, detail: dict[str, Any] | None = None):
        self.message = message or self.message
        self.detail = detail or {}
        super().__init__(self.message)


# ----- InputError: malformed or incomplete request -----


class InputError(ServiceError):
    status_code = 400


class MissingInput(InputError):
    kind = "MissingInput"
    message = "Missing file or filename"


class PayloadTooLarge(InputError):
    kind = "PayloadTooLarge"
    status_code = 413
    message = "Uploaded file is too large"


class MalformedRequest(InputError):
    kind = "MalformedRequest"
    message = "Request body could not be parsed"


class MissingHandle(InputError):
    kind = "MissingHandle"
    message = "Session ID is required"


class MissingId(InputError):
    kind = "MissingId"
    message = "File ID is required"


# ----- UpstreamError: processor or gateway failed / timed out -----


class UpstreamError(ServiceError):
    status_code = 502
    retryable = False


class ProcessingFailed(UpstreamError):
    kind = "ProcessingFailed"
    message = "Document processing failed"


class PaymentSetupFailed(UpstreamError):
    kind = "PaymentSetupFailed"
    status_code = 503
    message = "Could not create payment session, please retry"
    retryable = True


class GatewayError(UpstreamError):
    kind = "GatewayError"
    message = "Failed to verify payment"
    retryable = True


# ----- StateError: operation invalid for the artifact's lifecycle state -----


class StateError(ServiceError):
    status_code = 409


class ArtifactNotFound(StateError):
    """Never existed, expired or already delivered; deliberately indistinguishable."""

    kind = "NotFound"
    status_code = 404
    message = "File not found or has expired"


class NotPaid(StateError):
    kind = "NotPaid"
    status_code = 402
    message = "Payment not completed"


# ----- Webhook verification -----


class WebhookError(ServiceError):
    status_code = 400


class BadSignature(WebhookError):
    kind = "BadSignature"
    message = "Invalid webhook signature"


class MalformedEvent(WebhookError):
    kind = "MalformedEvent"
    message = "Malformed webhook event"


# ----- InternalInvariantError: a bug if ever seen -----


class InternalInvariantError(ServiceError):
    kind = "InternalError"
    status_code = 500


class DuplicateArtifactError(InternalInvariantError):
    message = "Artifact id already present in store"
