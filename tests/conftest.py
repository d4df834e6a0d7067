"""
Pytest configuration and shared fixtures for dicom-json tests.

Well-formed inputs are written with pydicom; malformed inputs are
assembled byte by byte with ``struct`` through the ``dicom_bytes`` fixture.
"""

import struct
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Generator

import pydicom
import pytest
from pydicom.dataset import Dataset, FileDataset, FileMetaDataset
from pydicom.sequence import Sequence
from pydicom.uid import (
    DeflatedExplicitVRLittleEndian,
    ExplicitVRLittleEndian,
    ImplicitVRLittleEndian,
    generate_uid,
)

from dicom_json.core.constants import LONG_LENGTH_VRS

UNDEFINED = 0xFFFFFFFF


class DicomBytes:
    """Byte-level builders for hand-made DICOM streams."""

    @staticmethod
    def tag(group: int, element: int, endian: str = "<") -> bytes:
        return struct.pack(f"{endian}HH", group, element)

    @classmethod
    def element(
        cls,
        group: int,
        element: int,
        vr: str,
        value: bytes,
        *,
        endian: str = "<",
        implicit: bool = False,
        length: int | None = None,
    ) -> bytes:
        """Encode one element; ``length`` overrides the true value length."""
        length = len(value) if length is None else length
        header = cls.tag(group, element, endian)
        if implicit:
            return header + struct.pack(f"{endian}L", length) + value
        if vr in LONG_LENGTH_VRS:
            return header + vr.encode() + b"\x00\x00" + struct.pack(f"{endian}L", length) + value
        return header + vr.encode() + struct.pack(f"{endian}H", length) + value

    @classmethod
    def item(cls, body: bytes, *, undefined: bool = False, endian: str = "<") -> bytes:
        if undefined:
            return (
                cls.tag(0xFFFE, 0xE000, endian)
                + struct.pack(f"{endian}L", UNDEFINED)
                + body
                + cls.item_delimiter(endian)
            )
        return cls.tag(0xFFFE, 0xE000, endian) + struct.pack(f"{endian}L", len(body)) + body

    @classmethod
    def item_delimiter(cls, endian: str = "<") -> bytes:
        return cls.tag(0xFFFE, 0xE00D, endian) + struct.pack(f"{endian}L", 0)

    @classmethod
    def sequence_delimiter(cls, endian: str = "<") -> bytes:
        return cls.tag(0xFFFE, 0xE0DD, endian) + struct.pack(f"{endian}L", 0)

    @classmethod
    def undefined_sequence(
        cls, group: int, element: int, items: list[bytes], *, vr: str = "SQ"
    ) -> bytes:
        """Explicit VR LE sequence of undefined length holding ``items``."""
        return (
            cls.element(group, element, vr, b"", length=UNDEFINED)
            + b"".join(items)
            + cls.sequence_delimiter()
        )

    @staticmethod
    def text(value: str, pad: bytes = b" ") -> bytes:
        raw = value.encode("ascii")
        return raw + pad if len(raw) % 2 else raw

    @classmethod
    def file_meta(cls, transfer_syntax: str | None = ExplicitVRLittleEndian) -> bytes:
        """Group 0002 with a correct group length element."""
        body = cls.element(0x0002, 0x0001, "OB", b"\x00\x01")
        if transfer_syntax is not None:
            body += cls.element(0x0002, 0x0010, "UI", cls.text(transfer_syntax, b"\x00"))
        group_length = cls.element(0x0002, 0x0000, "UL", struct.pack("<L", len(body)))
        return group_length + body

    @classmethod
    def part10(
        cls,
        dataset: bytes = b"",
        transfer_syntax: str | None = ExplicitVRLittleEndian,
        preamble: bytes = b"\x00" * 128,
    ) -> bytes:
        """Preamble, magic, file meta and ``dataset`` concatenated."""
        return preamble + b"DICM" + cls.file_meta(transfer_syntax) + dataset


@pytest.fixture
def dicom_bytes() -> type[DicomBytes]:
    """Provide the byte-level stream builders."""
    return DicomBytes


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files.

    Yields:
        Path to temporary directory that will be cleaned up after test
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def write_bytes(temp_dir: Path) -> Callable[..., Path]:
    """Write raw bytes to a file in temp_dir and return its path."""

    def _write(data: bytes, name: str = "raw.dcm") -> Path:
        path = temp_dir / name
        path.write_bytes(data)
        return path

    return _write


def _write_dataset(path: Path, dataset: Dataset, transfer_syntax: str) -> Path:
    file_meta = FileMetaDataset()
    file_meta.MediaStorageSOPClassUID = "1.2.840.10008.5.1.4.1.1.2"  # CT Image Storage
    file_meta.MediaStorageSOPInstanceUID = generate_uid()
    file_meta.TransferSyntaxUID = transfer_syntax
    file_meta.ImplementationClassUID = generate_uid()

    file_dataset = FileDataset(
        str(path), dataset, file_meta=file_meta, preamble=b"\x00" * 128
    )
    file_dataset.save_as(str(path), enforce_file_format=True)
    return path


@pytest.fixture
def sample_dataset() -> Dataset:
    """Create a small image dataset with one nested sequence.

    Returns:
        DICOM Dataset object
    """
    dataset = Dataset()
    dataset.SpecificCharacterSet = "ISO_IR 100"
    dataset.SOPClassUID = "1.2.840.10008.5.1.4.1.1.2"
    dataset.SOPInstanceUID = "1.2.3.4.5"
    dataset.StudyDate = "20240101"
    dataset.Modality = "CT"
    dataset.PatientName = "Müller^Jürgen"
    dataset.PatientID = "TEST123"

    code = Dataset()
    code.CodeValue = "T-04000"
    code.CodingSchemeDesignator = "SRT"
    code.CodeMeaning = "Breast"
    dataset.AnatomicRegionSequence = Sequence([code])

    dataset.SamplesPerPixel = 1
    dataset.PhotometricInterpretation = "MONOCHROME2"
    dataset.Rows = 2
    dataset.Columns = 2
    dataset.BitsAllocated = 16
    dataset.BitsStored = 12
    dataset.HighBit = 11
    dataset.PixelRepresentation = 0
    dataset.WindowCenter = "40"
    dataset.PixelData = struct.pack("<4H", 1, 2, 3, 4)
    return dataset


@pytest.fixture
def sample_dicom_file(temp_dir: Path, sample_dataset: Dataset) -> Path:
    """Create a valid Explicit VR Little Endian DICOM file.

    Args:
        temp_dir: Temporary directory fixture
        sample_dataset: Dataset to write

    Returns:
        Path to created DICOM file
    """
    return _write_dataset(temp_dir / "explicit.dcm", sample_dataset, ExplicitVRLittleEndian)


@pytest.fixture
def implicit_dicom_file(temp_dir: Path, sample_dataset: Dataset) -> Path:
    """Same dataset written as Implicit VR Little Endian."""
    return _write_dataset(temp_dir / "implicit.dcm", sample_dataset, ImplicitVRLittleEndian)


@pytest.fixture
def deflated_dicom_file(temp_dir: Path, sample_dataset: Dataset) -> Path:
    """Same dataset written as Deflated Explicit VR Little Endian."""
    return _write_dataset(
        temp_dir / "deflated.dcm", sample_dataset, DeflatedExplicitVRLittleEndian
    )


@pytest.fixture
def reference_dataset(sample_dicom_file: Path) -> Dataset:
    """The sample file as read back by pydicom."""
    return pydicom.dcmread(sample_dicom_file)


@pytest.fixture
def reset_structlog():
    """Reset structlog configuration after each test.

    This ensures tests don't interfere with each other's logging configuration.
    """
    import logging

    import structlog

    yield

    structlog.reset_defaults()
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
