"""
PDF.co document processor: upload the PDF, extract its text, repair diacritics.
Sync httpx client; every request is bounded by the configured timeout.

Only transport errors, 5xx replies and account-level refusals count against the
circuit breaker. A document PDF.co refuses (not a PDF, password protected,
no text layer) fails that upload alone.
"""
import base64
import logging
import time

import httpx
import pybreaker

from app.services.circuit_breaker import get_circuit_breaker
from app.services.processing.base import (
    DocumentProcessingError,
    DocumentProcessor,
    DocumentRejectedError,
    ProcessedDocument,
)
from app.services.processing.diacritics import fix_diacritics
from app.utils.metrics import processing_duration_seconds, upstream_failures_total

logger = logging.getLogger(__name__)

# 4xx replies about the account rather than the document
ACCOUNT_ERROR_STATUSES = frozenset({401, 402, 403, 408, 429})


def _json_body(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class PdfCoProcessor(DocumentProcessor):
    """PDF.co API processor (file/upload/base64 + pdf/convert/to/text)."""

    def __init__(
        self,
        config: dict,
        breaker: pybreaker.CircuitBreaker | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.api_key = config.get("api_key")
        self.api_url = config.get("api_url", "https://api.pdf.co/v1").rstrip("/")
        self.timeout = config.get("timeout", 60.0)
        self._breaker = breaker or get_circuit_breaker("processor")
        self._transport = transport

    def is_available(self) -> bool:
        return bool(self.api_key)

    def process(self, file_bytes: bytes, file_name: str) -> ProcessedDocument:
        if not self.is_available():
            raise DocumentProcessingError("PDF.co processor not configured")

        start = time.time()
        try:
            original = self._extract_text(file_bytes, file_name)
        except pybreaker.CircuitBreakerError as e:
            upstream_failures_total.labels(collaborator="processor", operation="extract_text").inc()
            raise DocumentProcessingError("Processor temporarily unavailable", {"breaker": "open"}) from e
        except httpx.TimeoutException as e:
            upstream_failures_total.labels(collaborator="processor", operation="extract_text").inc()
            raise DocumentProcessingError("Processor timed out", {"timeout": self.timeout}) from e
        except httpx.HTTPError as e:
            upstream_failures_total.labels(collaborator="processor", operation="extract_text").inc()
            raise DocumentProcessingError(f"Processor request failed: {e}") from e
        except DocumentRejectedError as e:
            logger.info(
                "document_rejected",
                extra={"file_name": file_name, "error": str(e), "detail": e.detail},
            )
            raise
        except DocumentProcessingError:
            upstream_failures_total.labels(collaborator="processor", operation="extract_text").inc()
            raise
        finally:
            processing_duration_seconds.observe(time.time() - start)

        fixed = fix_diacritics(original)
        logger.info(
            "document_processed",
            extra={"file_name": file_name, "size_bytes": len(file_bytes)},
        )
        return ProcessedDocument(
            content=self._render(file_name, fixed),
            file_name=file_name,
            original_length=len(original),
            fixed_length=len(fixed),
        )

    def _extract_text(self, file_bytes: bytes, file_name: str) -> str:
        headers = {"x-api-key": self.api_key}
        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            upload = self._post(
                client,
                "/file/upload/base64",
                headers,
                {"file": base64.b64encode(file_bytes).decode("ascii"), "name": file_name},
                "Error uploading file to PDF.co",
            )
            file_url = upload.get("url")
            if not file_url:
                raise DocumentProcessingError("PDF.co upload returned no URL", {"response": upload})

            converted = self._post(
                client,
                "/pdf/convert/to/text",
                headers,
                {"url": file_url, "inline": True},
                "Error extracting text from PDF",
            )
        text = converted.get("body") or converted.get("text") or ""
        if not text.strip():
            raise DocumentRejectedError("No text could be extracted from the PDF")
        return text

    def _post(self, client: httpx.Client, path: str, headers: dict, payload: dict, fallback: str) -> dict:
        response = self._breaker.call(self._send, client, path, headers, payload, fallback)
        data = _json_body(response)
        if response.is_error or data.get("error"):
            raise DocumentRejectedError(
                data.get("message") or fallback,
                {"status_code": response.status_code, "path": path},
            )
        return data

    def _send(self, client: httpx.Client, path: str, headers: dict, payload: dict, fallback: str) -> httpx.Response:
        """Runs inside the breaker: raises only for failures of PDF.co itself."""
        response = client.post(f"{self.api_url}{path}", headers=headers, json=payload)
        if response.is_server_error or response.status_code in ACCOUNT_ERROR_STATUSES:
            data = _json_body(response)
            raise DocumentProcessingError(
                data.get("message") or fallback,
                {"status_code": response.status_code, "path": path},
            )
        return response

    @staticmethod
    def _render(file_name: str, fixed_text: str) -> str:
        return f"PDF repaired successfully!\nOriginal file: {file_name}\n\n{fixed_text}"
