"""DICOM file parsing module with file checks and structured logging.

This module runs the full decode pipeline for a Part 10 file:
preamble and magic, File Meta Information, transfer syntax resolution
and the main dataset, producing a DicomFile tree.
"""

from __future__ import annotations

from pathlib import Path

from dicom_json.utils.logger import get_logger

from .builder import DatasetBuilder
from .config import DEFAULT_CONFIG, ParserConfig
from .cursor import ByteCursor, open_cursor
from .dataset import DicomFile
from .exceptions import (
    DicomFileNotFoundError,
    DicomJsonError,
    FileTooLargeError,
    FileUnreadableError,
)
from .meta import inflate_dataset, read_file_meta, read_preamble, resolve_transfer_syntax
from .serializer import to_json
from .summary import DatasetSummary, summarize

logger = get_logger(__name__)


def decode(
    cursor: ByteCursor,
    config: ParserConfig = DEFAULT_CONFIG,
    path: Path | None = None,
) -> DicomFile:
    """Decode a complete Part 10 stream.

    Args:
        cursor: Cursor positioned at the first preamble byte
        config: Parser limits
        path: Source path, recorded on the result

    Returns:
        The decoded file

    Raises:
        ParsingError: Any format violation (see exceptions module)
        ResourceExhaustedError: If nesting exceeds ``config.max_depth``

    """
    file_size = cursor.size
    preamble = read_preamble(cursor)
    file_meta = read_file_meta(cursor, config)
    syntax = resolve_transfer_syntax(file_meta, cursor)

    if syntax.is_deflated:
        cursor = inflate_dataset(cursor)

    dataset = DatasetBuilder(cursor, syntax, config).read_dataset()
    return DicomFile(
        path=path,
        file_size=file_size,
        preamble=preamble,
        file_meta=file_meta,
        transfer_syntax=syntax,
        dataset=dataset,
    )


def decode_bytes(data: bytes, config: ParserConfig = DEFAULT_CONFIG) -> DicomFile:
    """Decode a Part 10 file held in memory."""
    return decode(ByteCursor(data), config)


class DicomParser:
    """DICOM Part 10 parser with file checks and cached results.

    Attributes:
        file_path: Path to the DICOM file
        config: Parser limits and output options

    """

    def __init__(
        self, file_path: str | Path, config: ParserConfig | None = None
    ) -> None:
        """Initialize the parser. Nothing is read until parse() is called.

        Args:
            file_path: Path to DICOM file to parse
            config: Parser limits, DEFAULT_CONFIG when omitted

        """
        self.file_path = Path(file_path)
        self.config = config or DEFAULT_CONFIG
        self._dicom_file: DicomFile | None = None

    def _check_file(self) -> int:
        """Validate the path before opening it.

        Returns:
            File size in bytes

        Raises:
            DicomFileNotFoundError: If the path does not exist
            FileUnreadableError: If the path is not a readable regular file
            FileTooLargeError: If the file exceeds ``config.max_file_size``

        """
        context = {"file_path": str(self.file_path)}
        if not self.file_path.exists():
            raise DicomFileNotFoundError(
                f"File does not exist: {self.file_path}", context=context
            )
        if not self.file_path.is_file():
            raise FileUnreadableError(
                f"Path is not a regular file: {self.file_path}", context=context
            )

        try:
            file_size = self.file_path.stat().st_size
        except OSError as e:
            raise FileUnreadableError(
                f"Cannot stat file {self.file_path}: {e}", context=context
            ) from e

        max_size = self.config.max_file_size
        if max_size is not None and file_size > max_size:
            raise FileTooLargeError(
                f"File size {file_size} exceeds maximum {max_size}",
                context={**context, "file_size": file_size, "max_size": max_size},
            )

        return file_size

    def parse(self) -> DicomFile:
        """Decode the file, returning the cached tree on repeated calls.

        Raises:
            DicomJsonError: Any file access, format or resource failure

        """
        if self._dicom_file is not None:
            return self._dicom_file

        file_size = self._check_file()
        logger.debug("parse_started", file_path=str(self.file_path), file_size=file_size)

        try:
            with open_cursor(self.file_path) as cursor:
                dicom_file = decode(cursor, self.config, self.file_path)
        except OSError as e:
            raise FileUnreadableError(
                f"Cannot read file {self.file_path}: {e}",
                context={"file_path": str(self.file_path)},
            ) from e
        except DicomJsonError as e:
            logger.warning(
                "parse_failed",
                file_path=str(self.file_path),
                error_code=e.error_code,
                error=e.message,
            )
            raise

        logger.debug(
            "parse_completed",
            file_path=str(self.file_path),
            transfer_syntax=dicom_file.transfer_syntax.uid,
            attribute_count=len(dicom_file.dataset),
        )
        self._dicom_file = dicom_file
        return dicom_file

    def to_json(self) -> str:
        """Parse the file and serialize it to JSON text."""
        return to_json(self.parse(), self.config)

    def summarize(self) -> DatasetSummary:
        """Parse the file and summarize its structure."""
        return summarize(self.parse())

    def get_transfer_syntax(self) -> str:
        """Get the Transfer Syntax UID of the file."""
        return self.parse().transfer_syntax.uid

    def is_compressed(self) -> bool:
        """Check if the file stores its pixel data encapsulated (compressed)."""
        return self.parse().transfer_syntax.is_encapsulated
