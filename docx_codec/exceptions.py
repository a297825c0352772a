"""Custom exceptions for the DOCX codec."""

from typing import Optional


class DocxCodecError(Exception):
    """Base exception for DOCX codec errors."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        operation: Optional[str] = None,
        part: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.operation = operation
        self.part = part

    def __str__(self) -> str:
        text = self.message
        if self.operation:
            text = f"[{self.operation}] {text}"
        if self.details:
            text = f"{text}: {self.details}"
        if self.part:
            text = f"{text} (part: {self.part})"
        return text


class StructuralError(DocxCodecError):
    """Exception raised when a required part or input is missing or empty."""

    pass


class ParsingError(DocxCodecError):
    """Exception raised for malformed XML or a truncated archive."""

    pass


class InvalidArgumentError(DocxCodecError):
    """Exception raised for out-of-range or otherwise unacceptable arguments."""

    pass


class ValidationError(InvalidArgumentError):
    """Exception raised when a value fails content validation."""

    pass


class InvalidStateError(DocxCodecError):
    """Exception raised when an operation conflicts with the model's state."""

    pass


class UnsupportedError(DocxCodecError):
    """Exception raised for features that are intentionally not implemented."""

    pass


class PackageIOError(DocxCodecError):
    """Exception raised when reading or writing the archive fails."""

    pass


class MediaError(DocxCodecError):
    """Exception raised during media processing."""

    pass
