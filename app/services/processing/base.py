"""
Base classes and types for document processors.
A processor turns uploaded PDF bytes into repaired text; it holds no state.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class ProcessedDocument:
    """Result of processing one upload."""
    content: str
    file_name: str
    original_length: int
    fixed_length: int


class DocumentProcessingError(Exception):
    """Raised when processing fails; detail holds upstream fields for logging."""
    def __init__(self, message: str, detail: dict[str, Any] | None = None):
        super().__init__(message)
        self.detail = detail or {}


class DocumentRejectedError(DocumentProcessingError):
    """The upstream service is healthy but refused this particular document."""


class DocumentProcessor(ABC):
    """Base class for document processors."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if processor is configured."""
        pass

    @abstractmethod
    def process(self, file_bytes: bytes, file_name: str) -> ProcessedDocument:
        """Process raw upload. Raises DocumentProcessingError on failure."""
        pass
