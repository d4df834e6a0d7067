"""Known transfer syntaxes.

Maps Transfer Syntax UIDs to the encoding rules the decoder needs.
Compressed (encapsulated) syntaxes encode the dataset itself as
explicit VR little endian; only their pixel data is fragmented.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Final

from pydicom.uid import (
    DeflatedExplicitVRLittleEndian,
    ExplicitVRBigEndian,
    ExplicitVRLittleEndian,
    ImplicitVRLittleEndian,
)

from .types import TransferSyntax

IMPLICIT_VR_LITTLE_ENDIAN: Final = TransferSyntax(
    uid=str(ImplicitVRLittleEndian),
    name="Implicit VR Little Endian",
    is_implicit_vr=True,
    is_little_endian=True,
)

EXPLICIT_VR_LITTLE_ENDIAN: Final = TransferSyntax(
    uid=str(ExplicitVRLittleEndian),
    name="Explicit VR Little Endian",
    is_implicit_vr=False,
    is_little_endian=True,
)

EXPLICIT_VR_BIG_ENDIAN: Final = TransferSyntax(
    uid=str(ExplicitVRBigEndian),
    name="Explicit VR Big Endian",
    is_implicit_vr=False,
    is_little_endian=False,
)

DEFLATED_EXPLICIT_VR_LITTLE_ENDIAN: Final = TransferSyntax(
    uid=str(DeflatedExplicitVRLittleEndian),
    name="Deflated Explicit VR Little Endian",
    is_implicit_vr=False,
    is_little_endian=True,
    is_deflated=True,
)

# Compressed pixel data syntaxes
_ENCAPSULATED: Final[dict[str, str]] = {
    "1.2.840.10008.1.2.4.50": "JPEG Baseline (Process 1)",
    "1.2.840.10008.1.2.4.51": "JPEG Extended (Process 2 and 4)",
    "1.2.840.10008.1.2.4.57": "JPEG Lossless, Non-Hierarchical (Process 14)",
    "1.2.840.10008.1.2.4.70": "JPEG Lossless, Non-Hierarchical, First-Order Prediction",
    "1.2.840.10008.1.2.4.80": "JPEG-LS Lossless Image Compression",
    "1.2.840.10008.1.2.4.81": "JPEG-LS Lossy (Near-Lossless) Image Compression",
    "1.2.840.10008.1.2.4.90": "JPEG 2000 Image Compression (Lossless Only)",
    "1.2.840.10008.1.2.4.91": "JPEG 2000 Image Compression",
    "1.2.840.10008.1.2.4.201": "High-Throughput JPEG 2000 (Lossless Only)",
    "1.2.840.10008.1.2.4.202": "High-Throughput JPEG 2000 with RPCL Options (Lossless Only)",
    "1.2.840.10008.1.2.4.203": "High-Throughput JPEG 2000 Image Compression",
    "1.2.840.10008.1.2.4.100": "MPEG2 Main Profile / Main Level",
    "1.2.840.10008.1.2.4.101": "MPEG2 Main Profile / High Level",
    "1.2.840.10008.1.2.4.102": "MPEG-4 AVC/H.264 High Profile / Level 4.1",
    "1.2.840.10008.1.2.4.103": "MPEG-4 AVC/H.264 BD-compatible High Profile / Level 4.1",
    "1.2.840.10008.1.2.4.104": "MPEG-4 AVC/H.264 High Profile / Level 4.2 For 2D Video",
    "1.2.840.10008.1.2.4.105": "MPEG-4 AVC/H.264 High Profile / Level 4.2 For 3D Video",
    "1.2.840.10008.1.2.4.106": "MPEG-4 AVC/H.264 Stereo High Profile / Level 4.2",
    "1.2.840.10008.1.2.4.107": "HEVC/H.265 Main Profile / Level 5.1",
    "1.2.840.10008.1.2.4.108": "HEVC/H.265 Main 10 Profile / Level 5.1",
    "1.2.840.10008.1.2.5": "RLE Lossless",
}

TRANSFER_SYNTAXES: Final = MappingProxyType(
    {
        syntax.uid: syntax
        for syntax in (
            IMPLICIT_VR_LITTLE_ENDIAN,
            EXPLICIT_VR_LITTLE_ENDIAN,
            EXPLICIT_VR_BIG_ENDIAN,
            DEFLATED_EXPLICIT_VR_LITTLE_ENDIAN,
        )
    }
    | {
        uid: TransferSyntax(
            uid=uid,
            name=name,
            is_implicit_vr=False,
            is_little_endian=True,
            is_encapsulated=True,
        )
        for uid, name in _ENCAPSULATED.items()
    }
)
