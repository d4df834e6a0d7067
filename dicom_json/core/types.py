"""dicom-json Type Definitions.

Shared type definitions used across the decoder to avoid circular imports:
transfer syntax descriptions, VR families and tag formatting.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .constants import NUMERIC_VRS, OPAQUE_VRS, TEXT_VRS


def format_tag(tag: int) -> str:
    """Format a tag as canonical ``GGGG,EEEE`` upper-case hex."""
    return f"{(tag >> 16) & 0xFFFF:04X},{tag & 0xFFFF:04X}"


# =============================================================================
# Value Representation Families
# =============================================================================


class VRFamily(Enum):
    """How the raw bytes of a value are interpreted."""

    TEXT = "text"
    NUMERIC = "numeric"
    TAG = "tag"
    OPAQUE = "opaque"
    SEQUENCE = "sequence"


def vr_family(vr: str) -> VRFamily:
    """Classify a VR code.

    Args:
        vr: Two-character VR code

    Returns:
        The family governing how the value is decoded

    Raises:
        KeyError: If the VR code is not a known DICOM VR

    """
    if vr in TEXT_VRS:
        return VRFamily.TEXT
    if vr in NUMERIC_VRS:
        return VRFamily.NUMERIC
    if vr in OPAQUE_VRS:
        return VRFamily.OPAQUE
    if vr == "AT":
        return VRFamily.TAG
    if vr == "SQ":
        return VRFamily.SEQUENCE
    raise KeyError(vr)


# =============================================================================
# Transfer Syntax
# =============================================================================


@dataclass(frozen=True)
class TransferSyntax:
    """Encoding rules for the dataset following the file meta group.

    Attributes:
        uid: Transfer Syntax UID
        name: Human-readable name
        is_implicit_vr: VRs come from the dictionary rather than the stream
        is_little_endian: Byte order of every multi-byte numeric read
        is_deflated: Dataset bytes are zlib-deflated
        is_encapsulated: Pixel data is stored as compressed fragments

    """

    uid: str
    name: str
    is_implicit_vr: bool
    is_little_endian: bool
    is_deflated: bool = False
    is_encapsulated: bool = False

    @property
    def endian(self) -> str:
        """struct/numpy byte order prefix."""
        return "<" if self.is_little_endian else ">"
