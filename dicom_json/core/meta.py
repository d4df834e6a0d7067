"""Preamble and File Meta Information reader.

A Part 10 file starts with a 128-byte preamble, the ``DICM`` magic and
the group 0002 File Meta Information, always encoded as explicit VR
little endian. The Transfer Syntax UID found there governs the rest
of the stream.
"""

from __future__ import annotations

import zlib

from dicom_json.utils.logger import get_logger

from .builder import DatasetBuilder
from .config import DEFAULT_CONFIG, ParserConfig
from .constants import (
    DICOM_MAGIC,
    FILE_META_GROUP,
    FILE_META_GROUP_LENGTH,
    PREAMBLE_LENGTH,
    TRANSFER_SYNTAX_UID,
)
from .cursor import ByteCursor
from .dataset import Dataset
from .exceptions import (
    NotADicomFileError,
    ParsingError,
    TruncatedStreamError,
    UnsupportedTransferSyntaxError,
)
from .syntaxes import EXPLICIT_VR_LITTLE_ENDIAN, TRANSFER_SYNTAXES
from .types import TransferSyntax

logger = get_logger(__name__)


def read_preamble(cursor: ByteCursor) -> bytes:
    """Consume the preamble and magic, returning the preamble bytes.

    Raises:
        NotADicomFileError: If the file is too short or the magic is wrong

    """
    if cursor.remaining < PREAMBLE_LENGTH + len(DICOM_MAGIC):
        raise NotADicomFileError(
            f"File is {cursor.size} bytes, too short for a DICOM preamble",
            offset=cursor.position,
        )
    preamble = cursor.read_fixed(PREAMBLE_LENGTH)
    magic = cursor.read_fixed(len(DICOM_MAGIC))
    if magic != DICOM_MAGIC:
        raise NotADicomFileError(
            f"Expected {DICOM_MAGIC!r} after the preamble, found {magic!r}",
            offset=PREAMBLE_LENGTH,
        )
    return preamble


def read_file_meta(
    cursor: ByteCursor, config: ParserConfig = DEFAULT_CONFIG
) -> Dataset:
    """Decode the group 0002 File Meta Information.

    Decoding stops when the declared group length (0002,0000) is used
    up or a tag outside group 0002 appears, whichever comes first.

    Args:
        cursor: Cursor positioned just after the magic
        config: Parser limits

    Returns:
        The file meta elements

    """
    builder = DatasetBuilder(cursor, EXPLICIT_VR_LITTLE_ENDIAN, config)
    limit: int | None = None
    declared = 0

    def at_meta_end(tag: int) -> bool:
        if tag >> 16 != FILE_META_GROUP:
            return True
        return limit is not None and cursor.position >= limit

    file_meta = Dataset()
    if not cursor.at_end and builder.decoder.peek_tag() == FILE_META_GROUP_LENGTH:
        group_length = builder.read_element()
        file_meta.add(group_length)
        if isinstance(group_length.value, list) and group_length.value:
            declared = int(group_length.value[0])
            limit = cursor.position + declared

    for element in builder.read_dataset(stop_when=at_meta_end):
        file_meta.add(element, config.duplicate_tags)

    if limit is not None and cursor.position != limit:
        logger.warning(
            "meta_group_length_mismatch",
            declared=declared,
            actual=declared + cursor.position - limit,
        )
    return file_meta


def resolve_transfer_syntax(file_meta: Dataset, cursor: ByteCursor) -> TransferSyntax:
    """Look up the transfer syntax named in the file meta group.

    Raises:
        TruncatedStreamError: If the stream ended before any meta element
        UnsupportedTransferSyntaxError: If the UID is missing or unknown

    """
    element = file_meta.get(TRANSFER_SYNTAX_UID)
    if element is None:
        if not len(file_meta) and cursor.at_end:
            raise TruncatedStreamError(
                "File ends before the File Meta Information", offset=cursor.position
            )
        raise UnsupportedTransferSyntaxError(
            "<missing>", tag=TRANSFER_SYNTAX_UID, offset=cursor.position
        )

    uid = element.value if isinstance(element.value, str) else "<undecodable>"
    syntax = TRANSFER_SYNTAXES.get(uid)
    if syntax is None:
        raise UnsupportedTransferSyntaxError(
            uid, tag=TRANSFER_SYNTAX_UID, offset=element.offset
        )
    return syntax


def inflate_dataset(cursor: ByteCursor) -> ByteCursor:
    """Inflate the raw-deflated dataset following the meta group.

    Offsets in later errors refer to the inflated stream.

    Raises:
        ParsingError: If the deflate stream is corrupt

    """
    compressed = cursor.read_fixed(cursor.remaining)
    inflater = zlib.decompressobj(-zlib.MAX_WBITS)
    try:
        inflated = inflater.decompress(compressed) + inflater.flush()
    except zlib.error as e:
        raise ParsingError(
            f"Failed to inflate deflated dataset: {e}",
            error_code="INFLATE_FAILED",
            offset=cursor.position - len(compressed),
        ) from e
    logger.debug("dataset_inflated", compressed=len(compressed), inflated=len(inflated))
    return ByteCursor(inflated)
