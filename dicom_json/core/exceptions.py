"""Custom exceptions for DICOM decoding operations.

This module defines the exception hierarchy for dicom-json,
providing detailed error information and categorization. Every
parse failure is terminal for the call that raised it.
"""

from typing import Any

from .types import format_tag


class DicomJsonError(Exception):
    """Base exception for DICOM decoding operations.

    Attributes:
        message: Human-readable error description
        error_code: Optional error code for categorization
        context: Additional context information

    """

    kind = "ParseError"
    default_code: str | None = None

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.context = context or {}


class FileAccessError(DicomJsonError):
    """Raised when the input file cannot be accessed."""

    pass


class DicomFileNotFoundError(FileAccessError):
    """Raised when the input path does not exist."""

    kind = "FileNotFound"
    default_code = "FILE_NOT_FOUND"


class FileUnreadableError(FileAccessError):
    """Raised when the input path exists but cannot be read as a file."""

    kind = "FileUnreadable"
    default_code = "FILE_UNREADABLE"


class ParsingError(DicomJsonError):
    """Raised when the byte stream violates the DICOM file format.

    The offending tag and stream offset, when known, are appended to
    the message and stored in ``context``.
    """

    default_code = "PARSE_FAILED"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        *,
        tag: int | None = None,
        offset: int | None = None,
    ) -> None:
        context = dict(context or {})
        location = []
        if tag is not None:
            context["tag"] = format_tag(tag)
            location.append(f"tag {context['tag']}")
        if offset is not None:
            context["offset"] = offset
            location.append(f"offset {offset}")
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message, error_code, context)
        self.tag = tag
        self.offset = offset


class NotADicomFileError(ParsingError):
    """Raised when the preamble or ``DICM`` magic is missing."""

    kind = "NotADicomFile"
    default_code = "NOT_DICOM"


class UnsupportedTransferSyntaxError(ParsingError):
    """Raised when the Transfer Syntax UID is missing or unknown."""

    kind = "UnsupportedTransferSyntax"
    default_code = "UNSUPPORTED_TRANSFER_SYNTAX"

    def __init__(self, uid: str, **kwargs: Any) -> None:
        super().__init__(
            f"Unsupported transfer syntax: {uid}",
            context={"transfer_syntax": uid},
            **kwargs,
        )
        self.uid = uid


class InvalidVRError(ParsingError):
    """Raised when an explicit VR code is not a DICOM VR."""

    kind = "InvalidVR"
    default_code = "INVALID_VR"


class TruncatedStreamError(ParsingError):
    """Raised when a read would run past the end of the stream."""

    kind = "TruncatedStream"
    default_code = "TRUNCATED_STREAM"


class MalformedLengthError(ParsingError):
    """Raised when a length is inconsistent with its context."""

    kind = "MalformedLength"
    default_code = "MALFORMED_LENGTH"


class DuplicateTagError(ParsingError):
    """Raised when a tag repeats within one dataset level."""

    kind = "DuplicateTag"
    default_code = "DUPLICATE_TAG"


class ResourceExhaustedError(DicomJsonError):
    """Raised when a configured resource ceiling is exceeded."""

    pass


class NestingTooDeepError(ResourceExhaustedError):
    """Raised when sequence nesting exceeds the depth ceiling."""

    kind = "NestingTooDeep"
    default_code = "NESTING_TOO_DEEP"


class FileTooLargeError(ResourceExhaustedError):
    """Raised when the input file exceeds the size ceiling."""

    kind = "FileTooLarge"
    default_code = "FILE_TOO_LARGE"


class ResultReleasedError(RuntimeError):
    """Raised when a released ParseResult is read or released again."""

    pass
