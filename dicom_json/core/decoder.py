"""Single data element decoding.

Reads one element header (tag, VR, length) under the active transfer
syntax and decodes its value according to the VR family. Sequences are
not decoded here; DatasetBuilder recurses into them.
"""

from __future__ import annotations

from struct import Struct
from typing import NamedTuple

import numpy as np
from pydicom import config as pydicom_config
from pydicom.charset import decode_bytes
from pydicom.tag import Tag

from dicom_json.utils.logger import get_logger

from .config import DEFAULT_CONFIG, ParserConfig
from .constants import (
    ALL_VRS,
    CHARSET_VRS,
    DEFAULT_ENCODING,
    DEFAULT_ENCODINGS,
    DELIMITER_GROUP,
    FREE_TEXT_VRS,
    ITEM,
    LONG_LENGTH_VRS,
    NUMERIC_VRS,
    PN_DELIMITERS,
    SEQUENCE_DELIMITATION,
    TEXT_DELIMITERS,
    TEXT_PADDING,
    UNDEFINED_LENGTH,
)
from .cursor import ByteCursor
from .dataset import ElementValue, OpaqueValue
from .dictionary import lookup_vr
from .exceptions import InvalidVRError, MalformedLengthError, TruncatedStreamError
from .types import TransferSyntax, VRFamily, format_tag, vr_family

logger = get_logger(__name__)


class ElementHeader(NamedTuple):
    """Tag, VR and length of an element, before its value is read.

    ``vr`` is None for item and delimiter tags; ``length`` is None for
    undefined length.
    """

    tag: int
    vr: str | None
    length: int | None
    offset: int


class ElementDecoder:
    """Decode data elements from a cursor under one transfer syntax.

    Attributes:
        cursor: Stream being decoded
        syntax: Transfer syntax governing VR explicitness and byte order
        config: Size and strictness limits

    """

    def __init__(
        self,
        cursor: ByteCursor,
        syntax: TransferSyntax,
        config: ParserConfig = DEFAULT_CONFIG,
    ) -> None:
        self.cursor = cursor
        self.syntax = syntax
        self.config = config
        self._endian = syntax.endian
        self._tag_layout = Struct(f"{self._endian}HH")

    def peek_tag(self) -> int:
        """Return the tag at the cursor without advancing."""
        group, element = self.cursor.peek(self._tag_layout)
        return Tag(group, element)

    def read_tag(self) -> int:
        group, element = self.cursor.unpack(self._tag_layout)
        return Tag(group, element)

    def read_header(self) -> ElementHeader:
        """Read an element header and leave the cursor at its value.

        Raises:
            InvalidVRError: If an explicit VR code is not a DICOM VR
            TruncatedStreamError: If the header is cut short

        """
        cursor = self.cursor
        offset = cursor.position
        tag = self.read_tag()

        # Items and delimiters never carry a VR
        if tag >> 16 == DELIMITER_GROUP:
            length = cursor.read_u32(self._endian, tag)
            return ElementHeader(tag, None, self._length(length), offset)

        if self.syntax.is_implicit_vr:
            length = cursor.read_u32(self._endian, tag)
            return ElementHeader(tag, lookup_vr(tag), self._length(length), offset)

        raw_vr = cursor.read_fixed(2, tag)
        vr = raw_vr.decode("latin-1")
        if vr not in ALL_VRS:
            raise InvalidVRError(
                f"Invalid value representation {raw_vr!r}", tag=tag, offset=offset + 4
            )

        if vr in LONG_LENGTH_VRS:
            cursor.skip(2, tag)
            length = cursor.read_u32(self._endian, tag)
            return ElementHeader(tag, vr, self._length(length), offset)

        return ElementHeader(tag, vr, cursor.read_u16(self._endian, tag), offset)

    @staticmethod
    def _length(length: int) -> int | None:
        return None if length == UNDEFINED_LENGTH else length

    def decode_value(
        self, header: ElementHeader, encodings: tuple[str, ...] = DEFAULT_ENCODINGS
    ) -> ElementValue:
        """Decode the value of a defined-length, non-sequence element.

        Args:
            header: Header returned by read_header
            encodings: Codecs for text VRs affected by Specific Character Set

        Returns:
            Decoded value; undecodable text is returned as an OpaqueValue

        Raises:
            MalformedLengthError: If the length is undefined, odd, or not a
                multiple of the numeric item size
            TruncatedStreamError: If the value runs past the end of the stream

        """
        tag, vr, length, offset = header
        if vr is None or vr == "SQ":
            raise ValueError(f"({format_tag(tag)}) is not a plain element")
        if length is None:
            raise MalformedLengthError(
                f"Undefined length is not allowed for VR {vr}", tag=tag, offset=offset
            )
        if length % 2 and not self.config.allow_odd_length:
            raise MalformedLengthError(
                f"Odd value length {length} for VR {vr}", tag=tag, offset=offset
            )

        family = vr_family(vr)
        if family is VRFamily.OPAQUE:
            return self._read_opaque(tag, length)

        raw = self.cursor.read_fixed(length, tag)
        if family is VRFamily.TEXT:
            return self._decode_text(tag, vr, raw, encodings)
        if family is VRFamily.NUMERIC:
            return self._decode_numeric(header, vr, raw)
        return self._decode_tags(header, raw)

    def _read_opaque(self, tag: int, length: int) -> OpaqueValue:
        if length > self.config.max_inline_bytes:
            self.cursor.skip(length, tag)
            return OpaqueValue(length)
        return OpaqueValue(length, data=self.cursor.read_fixed(length, tag))

    def _decode_text(
        self, tag: int, vr: str, raw: bytes, encodings: tuple[str, ...]
    ) -> str | OpaqueValue:
        text = raw.rstrip(TEXT_PADDING)
        try:
            if vr not in CHARSET_VRS:
                return text.decode(DEFAULT_ENCODING)
            return self._decode_charset_text(vr, text, encodings)
        except (ValueError, LookupError):
            logger.debug(
                "undecodable_text", tag=format_tag(tag), vr=vr, encodings=encodings
            )
        if len(raw) > self.config.max_inline_bytes:
            return OpaqueValue(len(raw))
        return OpaqueValue(len(raw), data=raw)

    @staticmethod
    def _decode_charset_text(vr: str, text: bytes, encodings: tuple[str, ...]) -> str:
        """Decode text that may switch character sets with ISO 2022 escapes.

        Raises:
            ValueError: If the bytes are invalid for the active character set
            LookupError: If a codec is not available

        """
        values = [text] if vr in FREE_TEXT_VRS else text.split(b"\\")
        delimiters = PN_DELIMITERS if vr == "PN" else TEXT_DELIMITERS

        # Each value starts again in the initial character set
        with pydicom_config.strict_reading():
            return "\\".join(
                decode_bytes(value, list(encodings), set(delimiters)) for value in values
            )

    def _decode_numeric(
        self, header: ElementHeader, vr: str, raw: bytes
    ) -> list[int] | list[float]:
        dtype = np.dtype(f"{self._endian}{NUMERIC_VRS[vr]}")
        if len(raw) % dtype.itemsize:
            raise MalformedLengthError(
                f"Length {len(raw)} is not a multiple of {dtype.itemsize} "
                f"for VR {vr}",
                tag=header.tag,
                offset=header.offset,
            )
        values: list[int] | list[float] = np.frombuffer(raw, dtype=dtype).tolist()
        return values

    def _decode_tags(self, header: ElementHeader, raw: bytes) -> list[str]:
        if len(raw) % self._tag_layout.size:
            raise MalformedLengthError(
                f"Length {len(raw)} is not a multiple of 4 for VR AT",
                tag=header.tag,
                offset=header.offset,
            )
        return [
            format_tag(Tag(group, element))
            for group, element in self._tag_layout.iter_unpack(raw)
        ]

    def read_fragments(self, header: ElementHeader) -> OpaqueValue:
        """Read encapsulated pixel data up to its Sequence Delimitation Item.

        Fragments are embedded while their running total stays within
        ``max_inline_bytes``; past that every fragment is skipped.

        Raises:
            MalformedLengthError: If a non-Item tag or an undefined-length
                fragment appears
            TruncatedStreamError: If the stream ends before the delimiter

        """
        cursor = self.cursor
        fragments: list[bytes] = []
        embed = True
        total = 0
        count = 0

        while True:
            if cursor.at_end:
                raise TruncatedStreamError(
                    "Encapsulated data ended without a Sequence Delimitation Item",
                    tag=header.tag,
                    offset=cursor.position,
                )
            next_tag = self.peek_tag()
            if next_tag not in (ITEM, SEQUENCE_DELIMITATION):
                raise MalformedLengthError(
                    f"Expected a fragment Item, found ({format_tag(next_tag)})",
                    tag=header.tag,
                    offset=cursor.position,
                )
            item = self.read_header()
            if item.tag == SEQUENCE_DELIMITATION:
                break
            if item.length is None:
                raise MalformedLengthError(
                    "Fragment Item with undefined length",
                    tag=header.tag,
                    offset=item.offset,
                )

            count += 1
            total += item.length
            if embed and total <= self.config.max_inline_bytes:
                fragments.append(cursor.read_fixed(item.length, header.tag))
            else:
                embed = False
                fragments.clear()
                cursor.skip(item.length, header.tag)

        return OpaqueValue(
            total,
            fragments=tuple(fragments) if embed else None,
            fragment_count=count,
        )
