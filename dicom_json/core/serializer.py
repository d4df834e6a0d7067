"""JSON rendering of decoded datasets.

Each dataset becomes an object keyed by ``GGGG,EEEE`` tag strings in
stream order; each element becomes ``{"vr", "name", "value"}`` where
``name`` is present only for tags known to the dictionary.

Value shapes:
- text VRs: string
- numeric VRs and AT: a scalar for exactly one value, otherwise an array
- SQ: array of item objects
- opaque payloads (and undecodable text): ``{"length", "encoding", "data"?,
  "fragments"?}`` with ``encoding`` either ``base64`` or ``omitted``
"""

from __future__ import annotations

import base64
import json
import math
from typing import Any

from .config import DEFAULT_CONFIG, ParserConfig
from .dataset import DataElement, Dataset, DicomFile, OpaqueValue
from .types import format_tag


def _json_number(value: int | float | str) -> int | float | str:
    # JSON has no literal for NaN or infinities
    if isinstance(value, float) and not math.isfinite(value):
        if math.isnan(value):
            return "NaN"
        return "Infinity" if value > 0 else "-Infinity"
    return value


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def opaque_to_dict(value: OpaqueValue) -> dict[str, Any]:
    """Describe an opaque payload, embedding its bytes when retained."""
    descriptor: dict[str, Any] = {
        "length": value.length,
        "encoding": "omitted" if value.is_omitted else "base64",
    }
    if value.is_encapsulated:
        descriptor["fragments"] = value.fragment_count
    if value.fragments is not None:
        descriptor["data"] = [_b64(fragment) for fragment in value.fragments]
    elif value.data is not None:
        descriptor["data"] = _b64(value.data)
    return descriptor


def value_to_json(element: DataElement) -> Any:
    value = element.value
    if isinstance(value, OpaqueValue):
        return opaque_to_dict(value)
    if isinstance(value, tuple):
        return [dataset_to_dict(item) for item in value]
    if isinstance(value, str):
        return value
    values = [_json_number(v) for v in value]
    return values[0] if len(values) == 1 else values


def element_to_dict(element: DataElement) -> dict[str, Any]:
    rendered: dict[str, Any] = {"vr": element.vr}
    keyword = element.keyword
    if keyword:
        rendered["name"] = keyword
    rendered["value"] = value_to_json(element)
    return rendered


def dataset_to_dict(dataset: Dataset) -> dict[str, Any]:
    """Render a dataset as a tag-keyed dict in stream order."""
    return {format_tag(element.tag): element_to_dict(element) for element in dataset}


def to_json(dicom_file: DicomFile, config: ParserConfig = DEFAULT_CONFIG) -> str:
    """Serialize a decoded file to JSON text.

    The same DicomFile and config always produce byte-identical output.

    Args:
        dicom_file: Decoded file
        config: Output options (``include_file_meta``, ``indent``)

    Returns:
        ASCII-only JSON document

    """
    document: dict[str, Any] = {}
    if config.include_file_meta:
        document.update(dataset_to_dict(dicom_file.file_meta))
    document.update(dataset_to_dict(dicom_file.dataset))

    if config.indent is None:
        return json.dumps(document, allow_nan=False, separators=(",", ":"))
    return json.dumps(document, allow_nan=False, indent=config.indent)
