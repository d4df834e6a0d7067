"""Shared constants for DICOM Part 10 decoding.

Tag values, length sentinels and value representation (VR) groupings
used across the cursor, decoder, builder and serializer.

References:
- DICOM PS3.5 Section 7 (Data Set encoding)
- DICOM PS3.10 Section 7 (DICOM File Format)

"""

from __future__ import annotations

from typing import Final

from pydicom.tag import Tag

# =============================================================================
# File Layout
# =============================================================================

#: Length of the (ignored) file preamble
PREAMBLE_LENGTH: Final[int] = 128

#: Magic literal following the preamble
DICOM_MAGIC: Final[bytes] = b"DICM"

#: Length sentinel for delimiter-terminated values
UNDEFINED_LENGTH: Final[int] = 0xFFFFFFFF

#: Group number of the File Meta Information
FILE_META_GROUP: Final[int] = 0x0002

#: Group shared by the item and delimiter tags
DELIMITER_GROUP: Final[int] = 0xFFFE

# =============================================================================
# Well-known Tags
# =============================================================================

ITEM = Tag(0xFFFE, 0xE000)
ITEM_DELIMITATION = Tag(0xFFFE, 0xE00D)
SEQUENCE_DELIMITATION = Tag(0xFFFE, 0xE0DD)

FILE_META_GROUP_LENGTH = Tag(0x0002, 0x0000)
TRANSFER_SYNTAX_UID = Tag(0x0002, 0x0010)
SPECIFIC_CHARACTER_SET = Tag(0x0008, 0x0005)

SAMPLES_PER_PIXEL = Tag(0x0028, 0x0002)
PHOTOMETRIC_INTERPRETATION = Tag(0x0028, 0x0004)
NUMBER_OF_FRAMES = Tag(0x0028, 0x0008)
ROWS = Tag(0x0028, 0x0010)
COLUMNS = Tag(0x0028, 0x0011)
BITS_ALLOCATED = Tag(0x0028, 0x0100)
PIXEL_REPRESENTATION = Tag(0x0028, 0x0103)
PIXEL_DATA = Tag(0x7FE0, 0x0010)

DELIMITER_NAMES: Final[dict[int, str]] = {
    ITEM: "Item",
    ITEM_DELIMITATION: "Item Delimitation Item",
    SEQUENCE_DELIMITATION: "Sequence Delimitation Item",
}

# =============================================================================
# Value Representations
# =============================================================================

#: Text VRs, decoded as strings with trailing padding removed
TEXT_VRS: Final[frozenset[str]] = frozenset(
    {
        "AE", "AS", "CS", "DA", "DS", "DT", "IS", "LO", "LT",
        "PN", "SH", "ST", "TM", "UC", "UI", "UR", "UT",
    }
)  # fmt: skip

#: Text VRs affected by Specific Character Set (0008,0005)
CHARSET_VRS: Final[frozenset[str]] = frozenset(
    {"LO", "LT", "PN", "SH", "ST", "UC", "UT"}
)

#: Fixed-width numeric VRs mapped to their numpy type codes
NUMERIC_VRS: Final[dict[str, str]] = {
    "US": "u2",
    "SS": "i2",
    "UL": "u4",
    "SL": "i4",
    "UV": "u8",
    "SV": "i8",
    "FL": "f4",
    "FD": "f8",
}

#: Opaque byte/word streams, retained as raw bytes
OPAQUE_VRS: Final[frozenset[str]] = frozenset(
    {"OB", "OD", "OF", "OL", "OV", "OW", "UN"}
)

#: VRs that may carry encapsulated (fragmented) pixel data
ENCAPSULATED_VRS: Final[frozenset[str]] = frozenset({"OB", "OW"})

#: Explicit VRs with 2 reserved bytes and a 4-byte length field
LONG_LENGTH_VRS: Final[frozenset[str]] = frozenset(
    {"OB", "OD", "OF", "OL", "OV", "OW", "SQ", "SV", "UC", "UN", "UR", "UT", "UV"}
)

ALL_VRS: Final[frozenset[str]] = (
    TEXT_VRS | frozenset(NUMERIC_VRS) | OPAQUE_VRS | frozenset({"AT", "SQ"})
)

# =============================================================================
# Text Decoding
# =============================================================================

#: Codec for the default character repertoire and non-charset text VRs
DEFAULT_ENCODING: Final[str] = "utf_8"

#: Codecs in effect before any Specific Character Set is seen
DEFAULT_ENCODINGS: Final[tuple[str, ...]] = (DEFAULT_ENCODING,)

#: Charset VRs holding one free-text value (backslash is not a separator)
FREE_TEXT_VRS: Final[frozenset[str]] = frozenset({"LT", "ST", "UT"})

#: Bytes that return ISO 2022 text to the initial character set
PN_DELIMITERS: Final[frozenset[int]] = frozenset({0x5E, 0x3D})
TEXT_DELIMITERS: Final[frozenset[int]] = frozenset({0x09, 0x0A, 0x0C, 0x0D})

#: Bytes stripped from the end of text values
TEXT_PADDING: Final[bytes] = b" \x00"
