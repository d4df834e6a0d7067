"""
dicom-json - Decode DICOM Part 10 files into JSON.

This package parses the DICOM tag/value binary format (explicit and
implicit VR, little and big endian, nested sequences, encapsulated pixel
data) and serializes the dataset tree as tag-keyed JSON.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from dicom_json.core.boundary import (
    ParseResult,
    free_dicom_parse_result,
    parse_dicom_file,
)
from dicom_json.core.config import DEFAULT_CONFIG, ParserConfig
from dicom_json.core.exceptions import DicomJsonError
from dicom_json.core.parser import DicomParser

__all__ = [
    "__version__",
    "__license__",
    "parse_dicom_file",
    "free_dicom_parse_result",
    "ParseResult",
    "DicomParser",
    "ParserConfig",
    "DEFAULT_CONFIG",
    "DicomJsonError",
]
