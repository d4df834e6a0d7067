"""Read-only tag dictionary lookups.

Implicit VR datasets carry no VR in the stream, so the VR of each
element is looked up in pydicom's standard data dictionary. The
dictionary is process-wide constant data; lookups never mutate it.
"""

from __future__ import annotations

from pydicom.charset import convert_encodings, python_encoding
from pydicom.datadict import dictionary_keyword, dictionary_VR

from dicom_json.utils.logger import get_logger

from .constants import ALL_VRS, DEFAULT_ENCODINGS

logger = get_logger(__name__)

# Character sets equivalent to the default repertoire
_DEFAULT_CHARSETS = frozenset({"", "ISO_IR 6", "ISO 2022 IR 6"})


def lookup_vr(tag: int) -> str:
    """Resolve the VR of a tag for implicit VR decoding.

    Args:
        tag: Element tag

    Returns:
        The dictionary VR; ``UL`` for group lengths, ``LO`` for private
        creators and ``UN`` for anything the dictionary does not know

    """
    group, element = tag >> 16, tag & 0xFFFF
    if element == 0x0000:
        return "UL"
    if group % 2:
        return "LO" if 0x0010 <= element <= 0x00FF else "UN"

    try:
        vr = dictionary_VR(tag)
    except KeyError:
        return "UN"

    if vr in ALL_VRS:
        return vr

    # Ambiguous entries such as "OB or OW" and "US or SS"
    choices = [choice.strip() for choice in vr.split(" or ")]
    if "OB" in choices and "OW" in choices:
        return "OW"
    if choices[0] in ALL_VRS:
        return choices[0]
    return "UN"


def lookup_keyword(tag: int) -> str | None:
    """Return the dictionary keyword for a tag, or None if unknown."""
    if (tag >> 16) % 2:
        return None
    try:
        keyword: str = dictionary_keyword(tag)
    except KeyError:
        return None
    return keyword or None


def resolve_encodings(specific_character_set: str) -> tuple[str, ...]:
    """Map a Specific Character Set value to Python codec names.

    The first term is the initial character set; later terms are the
    ISO 2022 code extensions that escape sequences switch to. Unknown
    terms are logged and dropped; an unknown first term falls back to the
    default repertoire.

    Args:
        specific_character_set: Decoded (0008,0005) value, backslash separated

    Returns:
        Python codec names, in the order pydicom.charset.decode_bytes expects

    """
    terms: list[str] = []
    for index, term in enumerate(specific_character_set.split("\\")):
        term = term.strip()
        if term in python_encoding or (index == 0 and not term):
            terms.append(term)
            continue
        if term:
            logger.warning("unknown_character_set", character_set=term)
        if index == 0:
            terms.append("")

    if all(term in _DEFAULT_CHARSETS for term in terms):
        return DEFAULT_ENCODINGS
    return tuple(convert_encodings(terms))
