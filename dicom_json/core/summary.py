"""File-level summary of a decoded DICOM file.

Gathers the structural facts a viewer shows next to the attribute list:
file size, preamble, transfer syntax, element counts and the image
attributes that describe the pixel data.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .constants import (
    BITS_ALLOCATED,
    COLUMNS,
    DICOM_MAGIC,
    NUMBER_OF_FRAMES,
    PHOTOMETRIC_INTERPRETATION,
    PIXEL_DATA,
    PIXEL_REPRESENTATION,
    ROWS,
    SAMPLES_PER_PIXEL,
)
from .dataset import Dataset, DicomFile


@dataclass
class DatasetSummary:
    """Structural overview of one parsed file."""

    file_size: int
    file_preamble: str
    dicom_magic: str
    transfer_syntax: str
    transfer_syntax_name: str
    attribute_count: int
    total_element_count: int
    sequence_count: int
    meta_info_present: bool
    has_pixel_data: bool
    pixel_data_vr: str | None = None
    rows: int | None = None
    columns: int | None = None
    number_of_frames: int | None = None
    bits_allocated: int | None = None
    samples_per_pixel: int | None = None
    photometric_interpretation: str | None = None
    pixel_representation: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return asdict(self)


def _int_value(dataset: Dataset, tag: int) -> int | None:
    """Read a single integer from a numeric or IS element."""
    element = dataset.get(tag)
    if element is None:
        return None
    value = element.value
    if isinstance(value, list) and value and isinstance(value[0], int):
        return value[0]
    if isinstance(value, str):
        try:
            return int(value.split("\\")[0].strip())
        except ValueError:
            return None
    return None


def _str_value(dataset: Dataset, tag: int) -> str | None:
    element = dataset.get(tag)
    if element is None or not isinstance(element.value, str):
        return None
    return element.value


def summarize(dicom_file: DicomFile) -> DatasetSummary:
    """Summarize a decoded file.

    Args:
        dicom_file: Decoded file

    Returns:
        DatasetSummary with counts taken from the top-level dataset

    """
    dataset = dicom_file.dataset
    pixel_data = dataset.get(PIXEL_DATA)
    syntax = dicom_file.transfer_syntax

    return DatasetSummary(
        file_size=dicom_file.file_size,
        file_preamble=dicom_file.preamble.hex().upper(),
        dicom_magic=DICOM_MAGIC.decode("ascii"),
        transfer_syntax=syntax.uid,
        transfer_syntax_name=syntax.name,
        attribute_count=len(dataset),
        total_element_count=sum(1 for _ in dataset.walk()),
        sequence_count=sum(1 for element in dataset if element.is_sequence),
        meta_info_present=len(dicom_file.file_meta) > 0,
        has_pixel_data=pixel_data is not None,
        pixel_data_vr=pixel_data.vr if pixel_data is not None else None,
        rows=_int_value(dataset, ROWS),
        columns=_int_value(dataset, COLUMNS),
        number_of_frames=_int_value(dataset, NUMBER_OF_FRAMES),
        bits_allocated=_int_value(dataset, BITS_ALLOCATED),
        samples_per_pixel=_int_value(dataset, SAMPLES_PER_PIXEL),
        photometric_interpretation=_str_value(dataset, PHOTOMETRIC_INTERPRETATION),
        pixel_representation=_int_value(dataset, PIXEL_REPRESENTATION),
    )
