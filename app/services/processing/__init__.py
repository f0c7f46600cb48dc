"""
Document processing: PDF text extraction with diacritics repair.
"""
from .base import DocumentProcessingError, DocumentProcessor, DocumentRejectedError, ProcessedDocument
from .diacritics import fix_diacritics
from .pdfco import PdfCoProcessor

__all__ = [
    "DocumentProcessingError",
    "DocumentProcessor",
    "DocumentRejectedError",
    "ProcessedDocument",
    "PdfCoProcessor",
    "fix_diacritics",
]
