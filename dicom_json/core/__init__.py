"""Core DICOM decoding functionality.

This module contains the byte cursor, file meta reader, element decoder,
dataset builder, JSON serializer and the parse/release boundary.
"""

from .boundary import ParseResult, free_dicom_parse_result, parse_dicom_file
from .config import DEFAULT_CONFIG, DuplicateTagPolicy, LogLevel, ParserConfig
from .dataset import DataElement, Dataset, DicomFile, OpaqueValue
from .exceptions import (
    DicomFileNotFoundError,
    DicomJsonError,
    DuplicateTagError,
    FileAccessError,
    FileTooLargeError,
    FileUnreadableError,
    InvalidVRError,
    MalformedLengthError,
    NestingTooDeepError,
    NotADicomFileError,
    ParsingError,
    ResourceExhaustedError,
    ResultReleasedError,
    TruncatedStreamError,
    UnsupportedTransferSyntaxError,
)
from .parser import DicomParser, decode, decode_bytes
from .serializer import dataset_to_dict, to_json
from .summary import DatasetSummary, summarize
from .types import TransferSyntax, format_tag

__all__ = [
    # Boundary
    "ParseResult",
    "parse_dicom_file",
    "free_dicom_parse_result",
    # Parsing
    "DicomParser",
    "decode",
    "decode_bytes",
    "to_json",
    "dataset_to_dict",
    "summarize",
    "DatasetSummary",
    # Configuration
    "ParserConfig",
    "DEFAULT_CONFIG",
    "DuplicateTagPolicy",
    "LogLevel",
    # Data model
    "DataElement",
    "Dataset",
    "DicomFile",
    "OpaqueValue",
    "TransferSyntax",
    "format_tag",
    # Errors
    "DicomJsonError",
    "FileAccessError",
    "DicomFileNotFoundError",
    "FileUnreadableError",
    "ParsingError",
    "NotADicomFileError",
    "UnsupportedTransferSyntaxError",
    "InvalidVRError",
    "TruncatedStreamError",
    "MalformedLengthError",
    "DuplicateTagError",
    "ResourceExhaustedError",
    "NestingTooDeepError",
    "FileTooLargeError",
    "ResultReleasedError",
]
