"""
Unit tests for PdfCoProcessor against a mocked PDF.co API (httpx.MockTransport).
"""
import json
import unittest

import httpx
import pybreaker

from app.services.processing.base import DocumentProcessingError, DocumentRejectedError
from app.services.processing.pdfco import PdfCoProcessor


def _ok_handler(text: str):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/file/upload/base64":
            body = json.loads(request.content)
            assert body["name"] == "doc.pdf"
            assert request.headers["x-api-key"] == "key"
            return httpx.Response(200, json={"url": "https://files.test/doc.pdf", "error": False})
        if request.url.path == "/v1/pdf/convert/to/text":
            assert json.loads(request.content) == {"url": "https://files.test/doc.pdf", "inline": True}
            return httpx.Response(200, json={"body": text, "error": False})
        return httpx.Response(404, json={"error": True, "message": "unknown path"})
    return handler


class TestPdfCoProcessor(unittest.TestCase):
    def _processor(self, handler, api_key: str = "key", breaker=None) -> PdfCoProcessor:
        return PdfCoProcessor(
            {"api_key": api_key, "api_url": "https://pdfco.test/v1", "timeout": 5.0},
            breaker=breaker or pybreaker.CircuitBreaker(),
            transport=httpx.MockTransport(handler),
        )

    def test_extracts_and_repairs_text(self):
        processor = self._processor(_ok_handler("Äƒsta e un test È™i ÅŸcoalÄƒ"))
        result = processor.process(b"%PDF-1.4", "doc.pdf")
        self.assertIn("Original file: doc.pdf", result.content)
        self.assertIn("ăsta e un test și școală", result.content)
        self.assertEqual(result.file_name, "doc.pdf")
        self.assertLess(result.fixed_length, result.original_length)

    def test_not_configured(self):
        processor = self._processor(_ok_handler("x"), api_key="")
        self.assertFalse(processor.is_available())
        with self.assertRaises(DocumentProcessingError):
            processor.process(b"%PDF", "doc.pdf")

    def test_api_error_message_propagates(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": True, "message": "Invalid API key"})

        with self.assertRaises(DocumentProcessingError) as ctx:
            self._processor(handler).process(b"%PDF", "doc.pdf")
        self.assertEqual(str(ctx.exception), "Invalid API key")
        self.assertEqual(ctx.exception.detail["status_code"], 401)

    def test_error_flag_in_ok_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"error": True, "message": "Password protected"})

        with self.assertRaises(DocumentRejectedError):
            self._processor(handler).process(b"%PDF", "doc.pdf")

    def test_empty_text_is_failure(self):
        with self.assertRaises(DocumentRejectedError):
            self._processor(_ok_handler("   ")).process(b"%PDF", "doc.pdf")

    def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with self.assertRaises(DocumentProcessingError) as ctx:
            self._processor(handler).process(b"%PDF", "doc.pdf")
        self.assertIn("timed out", str(ctx.exception))

    def test_open_breaker_short_circuits(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            return httpx.Response(500, json={"error": True, "message": "down"})

        processor = self._processor(handler, breaker=pybreaker.CircuitBreaker(fail_max=1, reset_timeout=60))
        with self.assertRaises(DocumentProcessingError):
            processor.process(b"%PDF", "doc.pdf")
        calls_after_first = len(calls)
        with self.assertRaises(DocumentProcessingError) as ctx:
            processor.process(b"%PDF", "doc.pdf")
        self.assertIn("unavailable", str(ctx.exception))
        self.assertEqual(len(calls), calls_after_first)

    def test_rejected_documents_do_not_open_breaker(self):
        bodies = iter(["   ", "   ", "   ", "Äƒsta e bun"])

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/v1/file/upload/base64":
                return httpx.Response(200, json={"url": "https://files.test/doc.pdf", "error": False})
            return httpx.Response(200, json={"body": next(bodies), "error": False})

        breaker = pybreaker.CircuitBreaker(fail_max=2, reset_timeout=60)
        processor = self._processor(handler, breaker=breaker)
        for _ in range(3):
            with self.assertRaises(DocumentRejectedError):
                processor.process(b"%PDF", "scanned.pdf")

        result = processor.process(b"%PDF", "doc.pdf")
        self.assertIn("ăsta e bun", result.content)
        self.assertEqual(breaker.current_state, pybreaker.STATE_CLOSED)

    def test_client_error_reply_is_rejection(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": True, "message": "Not a valid PDF file"})

        breaker = pybreaker.CircuitBreaker(fail_max=5, reset_timeout=60)
        with self.assertRaises(DocumentRejectedError) as ctx:
            self._processor(handler, breaker=breaker).process(b"GIF89a", "doc.pdf")
        self.assertEqual(str(ctx.exception), "Not a valid PDF file")
        self.assertEqual(breaker.fail_counter, 0)

    def test_account_errors_count_against_breaker(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(402, json={"error": True, "message": "Not enough credits"})

        breaker = pybreaker.CircuitBreaker(fail_max=5, reset_timeout=60)
        with self.assertRaises(DocumentProcessingError) as ctx:
            self._processor(handler, breaker=breaker).process(b"%PDF", "doc.pdf")
        self.assertNotIsInstance(ctx.exception, DocumentRejectedError)
        self.assertEqual(breaker.fail_counter, 1)
