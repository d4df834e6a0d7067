"""Tests for recursive dataset assembly."""

import struct

import pytest

from dicom_json.core.config import DuplicateTagPolicy, ParserConfig
from dicom_json.core.dataset import OpaqueValue
from dicom_json.core.exceptions import (
    DuplicateTagError,
    MalformedLengthError,
    NestingTooDeepError,
    TruncatedStreamError,
)
from dicom_json.core.parser import decode_bytes

CONTENT_SEQUENCE = 0x0040A730
TEXT_VALUE = 0x0040A160
PATIENT_NAME = 0x00100010
PIXEL_DATA = 0x7FE00010


def nested_sequence(dicom_bytes, levels: int) -> bytes:
    """``levels`` sequences, each holding one undefined-length item."""
    body = dicom_bytes.element(0x0040, 0xA160, "UT", b"leaf")
    for _ in range(levels):
        body = dicom_bytes.undefined_sequence(
            0x0040, 0xA730, [dicom_bytes.item(body, undefined=True)]
        )
    return body


class TestFlatDatasets:
    """Top-level element collection."""

    def test_stream_order_preserved(self, dicom_bytes):
        dataset = (
            dicom_bytes.element(0x0010, 0x0020, "LO", b"ID01")
            + dicom_bytes.element(0x0008, 0x0060, "CS", b"CT")
            + dicom_bytes.element(0x0010, 0x0010, "PN", b"DOE^JANE")
        )
        result = decode_bytes(dicom_bytes.part10(dataset))
        assert result.dataset.tags == [0x00100020, 0x00080060, 0x00100010]

    def test_empty_dataset(self, dicom_bytes):
        result = decode_bytes(dicom_bytes.part10())
        assert len(result.dataset) == 0

    def test_stray_item_delimiter(self, dicom_bytes):
        data = dicom_bytes.part10(dicom_bytes.item_delimiter())
        with pytest.raises(MalformedLengthError, match="Unexpected Item Delimitation"):
            decode_bytes(data)

    def test_stray_sequence_delimiter(self, dicom_bytes):
        data = dicom_bytes.part10(dicom_bytes.sequence_delimiter())
        with pytest.raises(MalformedLengthError, match="Sequence Delimitation"):
            decode_bytes(data)

    def test_truncated_value_names_tag(self, dicom_bytes):
        dataset = dicom_bytes.element(0x0010, 0x0010, "PN", b"DOE", length=100)
        with pytest.raises(TruncatedStreamError, match="tag 0010,0010") as exc:
            decode_bytes(dicom_bytes.part10(dataset))
        assert exc.value.kind == "TruncatedStream"


class TestSequences:
    """Sequence and item decoding."""

    def test_undefined_length_sequence_with_two_items(self, dicom_bytes):
        items = [
            dicom_bytes.item(dicom_bytes.element(0x0040, 0xA160, "UT", b"first "), undefined=True),
            dicom_bytes.item(dicom_bytes.element(0x0040, 0xA160, "UT", b"second")),
        ]
        result = decode_bytes(dicom_bytes.part10(dicom_bytes.undefined_sequence(0x0040, 0xA730, items)))
        element = result.dataset[CONTENT_SEQUENCE]
        assert element.vr == "SQ"
        assert element.length is None
        assert [item[TEXT_VALUE].value for item in element.value] == ["first", "second"]

    def test_defined_length_sequence(self, dicom_bytes):
        item = dicom_bytes.item(dicom_bytes.element(0x0040, 0xA160, "UT", b"text"))
        dataset = dicom_bytes.element(0x0040, 0xA730, "SQ", item) + dicom_bytes.element(
            0x0040, 0xA731, "CS", b"OK"
        )
        result = decode_bytes(dicom_bytes.part10(dataset))
        assert len(result.dataset[CONTENT_SEQUENCE].value) == 1
        assert 0x0040A731 in result.dataset

    def test_empty_sequence(self, dicom_bytes):
        result = decode_bytes(dicom_bytes.part10(dicom_bytes.undefined_sequence(0x0040, 0xA730, [])))
        assert result.dataset[CONTENT_SEQUENCE].value == ()

    def test_sequence_length_past_end(self, dicom_bytes):
        dataset = dicom_bytes.element(0x0040, 0xA730, "SQ", b"", length=64)
        with pytest.raises(TruncatedStreamError, match="tag 0040,A730"):
            decode_bytes(dicom_bytes.part10(dataset))

    def test_missing_sequence_delimiter(self, dicom_bytes):
        dataset = dicom_bytes.element(0x0040, 0xA730, "SQ", b"", length=0xFFFFFFFF)
        dataset += dicom_bytes.item(dicom_bytes.element(0x0040, 0xA160, "UT", b"text"))
        with pytest.raises(TruncatedStreamError, match="Sequence Delimitation"):
            decode_bytes(dicom_bytes.part10(dataset))

    def test_missing_item_delimiter(self, dicom_bytes):
        dataset = dicom_bytes.element(0x0040, 0xA730, "SQ", b"", length=0xFFFFFFFF)
        dataset += dicom_bytes.tag(0xFFFE, 0xE000) + struct.pack("<L", 0xFFFFFFFF)
        dataset += dicom_bytes.element(0x0040, 0xA160, "UT", b"text")
        with pytest.raises(TruncatedStreamError, match="Item Delimitation"):
            decode_bytes(dicom_bytes.part10(dataset))

    def test_non_item_inside_sequence(self, dicom_bytes):
        dataset = dicom_bytes.undefined_sequence(
            0x0040, 0xA730, [dicom_bytes.element(0x0040, 0xA160, "UT", b"text")]
        )
        with pytest.raises(MalformedLengthError, match="Expected an Item"):
            decode_bytes(dicom_bytes.part10(dataset))

    def test_element_overruns_item(self, dicom_bytes):
        element = dicom_bytes.element(0x0040, 0xA160, "UT", b"text")
        short_item = dicom_bytes.tag(0xFFFE, 0xE000) + struct.pack("<L", 4) + element
        dataset = dicom_bytes.element(0x0040, 0xA730, "SQ", short_item)
        with pytest.raises(MalformedLengthError, match="overruns"):
            decode_bytes(dicom_bytes.part10(dataset))

    def test_items_shorter_than_sequence(self, dicom_bytes):
        item = dicom_bytes.item(dicom_bytes.element(0x0040, 0xA160, "UT", b"text"))
        dataset = dicom_bytes.element(0x0040, 0xA730, "SQ", item, length=len(item) + 8)
        dataset += dicom_bytes.sequence_delimiter()
        with pytest.raises(MalformedLengthError, match="defined-length sequence"):
            decode_bytes(dicom_bytes.part10(dataset))


class TestNestingCeiling:
    """Depth limiting of nested items."""

    def test_nesting_at_ceiling(self, dicom_bytes):
        config = ParserConfig(max_depth=3)
        result = decode_bytes(dicom_bytes.part10(nested_sequence(dicom_bytes, 3)), config)
        depth = 0
        dataset = result.dataset
        while CONTENT_SEQUENCE in dataset:
            dataset = dataset[CONTENT_SEQUENCE].value[0]
            depth += 1
        assert depth == 3
        assert dataset[TEXT_VALUE].value == "leaf"

    def test_nesting_beyond_ceiling(self, dicom_bytes):
        config = ParserConfig(max_depth=3)
        with pytest.raises(NestingTooDeepError, match="maximum depth of 3") as exc:
            decode_bytes(dicom_bytes.part10(nested_sequence(dicom_bytes, 4)), config)
        assert exc.value.context["depth"] == 4

    def test_pathological_nesting_does_not_exhaust_stack(self, dicom_bytes):
        with pytest.raises(NestingTooDeepError):
            decode_bytes(dicom_bytes.part10(nested_sequence(dicom_bytes, 2000)))


class TestDuplicateTags:
    """Duplicate tag policies."""

    def _dataset(self, dicom_bytes) -> bytes:
        return (
            dicom_bytes.element(0x0010, 0x0010, "PN", b"FIRST ")
            + dicom_bytes.element(0x0010, 0x0020, "LO", b"ID")
            + dicom_bytes.element(0x0010, 0x0010, "PN", b"SECOND")
        )

    def test_reject_by_default(self, dicom_bytes):
        with pytest.raises(DuplicateTagError, match="tag 0010,0010"):
            decode_bytes(dicom_bytes.part10(self._dataset(dicom_bytes)))

    def test_last_wins_keeps_first_position(self, dicom_bytes):
        config = ParserConfig(duplicate_tags=DuplicateTagPolicy.LAST_WINS)
        result = decode_bytes(dicom_bytes.part10(self._dataset(dicom_bytes)), config)
        assert result.dataset.tags == [PATIENT_NAME, 0x00100020]
        assert result.dataset[PATIENT_NAME].value == "SECOND"

    def test_same_tag_in_different_items(self, dicom_bytes):
        items = [
            dicom_bytes.item(dicom_bytes.element(0x0040, 0xA160, "UT", b"a "), undefined=True),
            dicom_bytes.item(dicom_bytes.element(0x0040, 0xA160, "UT", b"b "), undefined=True),
        ]
        dataset = dicom_bytes.undefined_sequence(0x0040, 0xA730, items)
        result = decode_bytes(dicom_bytes.part10(dataset))
        assert len(result.dataset[CONTENT_SEQUENCE].value) == 2


class TestSpecialValues:
    """Encapsulated pixel data, unknown sequences and character sets."""

    def test_encapsulated_pixel_data(self, dicom_bytes):
        fragments = dicom_bytes.item(b"") + dicom_bytes.item(b"\xff\xd8\xff\xd9")
        dataset = dicom_bytes.element(0x7FE0, 0x0010, "OB", b"", length=0xFFFFFFFF)
        dataset += fragments + dicom_bytes.sequence_delimiter()
        result = decode_bytes(dicom_bytes.part10(dataset))
        value = result.dataset[PIXEL_DATA].value
        assert isinstance(value, OpaqueValue)
        assert value.fragments == (b"", b"\xff\xd8\xff\xd9")

    def test_undefined_length_un_is_read_as_sequence(self, dicom_bytes):
        implicit_item = dicom_bytes.element(0x0040, 0xA160, "UT", b"text", implicit=True)
        dataset = dicom_bytes.undefined_sequence(
            0x0040, 0xA730, [dicom_bytes.item(implicit_item, undefined=True)], vr="UN"
        )
        result = decode_bytes(dicom_bytes.part10(dataset))
        element = result.dataset[CONTENT_SEQUENCE]
        assert element.vr == "SQ"
        assert element.value[0][TEXT_VALUE].value == "text"

    def test_specific_character_set(self, dicom_bytes):
        dataset = dicom_bytes.element(0x0008, 0x0005, "CS", b"ISO_IR 100")
        dataset += dicom_bytes.element(0x0010, 0x0010, "PN", "Jürgen".encode("latin-1"))
        result = decode_bytes(dicom_bytes.part10(dataset))
        assert result.dataset[PATIENT_NAME].value == "Jürgen"

    def test_iso_2022_code_extensions(self, dicom_bytes):
        dataset = dicom_bytes.element(0x0008, 0x0005, "CS", b"\\ISO 2022 IR 149")
        dataset += dicom_bytes.element(
            0x0010, 0x0010, "PN", b"\x1b$)C" + "김희중".encode("euc_kr")
        )
        result = decode_bytes(dicom_bytes.part10(dataset))
        assert result.dataset[PATIENT_NAME].value == "김희중"

    def test_item_inherits_code_extensions(self, dicom_bytes):
        name = b"\x1b$B;3ED\x1b(B^\x1b$BB@O:\x1b(B "
        item = dicom_bytes.element(0x0010, 0x0010, "PN", name)
        dataset = dicom_bytes.element(0x0008, 0x0005, "CS", b"\\ISO 2022 IR 87 ")
        dataset += dicom_bytes.undefined_sequence(
            0x0040, 0xA730, [dicom_bytes.item(item, undefined=True)]
        )
        result = decode_bytes(dicom_bytes.part10(dataset))
        assert result.dataset[CONTENT_SEQUENCE].value[0][PATIENT_NAME].value == "山田^太郎"

    def test_item_character_set_does_not_leak(self, dicom_bytes):
        item = dicom_bytes.element(0x0008, 0x0005, "CS", b"ISO_IR 100")
        dataset = dicom_bytes.undefined_sequence(
            0x0040, 0xA730, [dicom_bytes.item(item, undefined=True)]
        )
        dataset += dicom_bytes.element(0x0010, 0x0010, "PN", b"\xfc\xfc")
        result = decode_bytes(dicom_bytes.part10(dataset))
        assert isinstance(result.dataset[PATIENT_NAME].value, OpaqueValue)

    def test_big_endian_dataset(self, dicom_bytes):
        dataset = dicom_bytes.element(0x0028, 0x0010, "US", struct.pack(">H", 256), endian=">")
        result = decode_bytes(dicom_bytes.part10(dataset, transfer_syntax="1.2.840.10008.1.2.2"))
        assert result.dataset[0x00280010].value == [256]
        assert not result.transfer_syntax.is_little_endian
