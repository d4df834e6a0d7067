"""In-memory DICOM dataset tree.

Elements, items and datasets are built bottom-up in a single pass over
the stream and are not modified once the builder has returned them.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from .config import DuplicateTagPolicy
from .dictionary import lookup_keyword
from .exceptions import DuplicateTagError
from .types import TransferSyntax, format_tag


@dataclass(frozen=True)
class OpaqueValue:
    """Uninterpreted bytes of an OB/OW/UN-style value.

    Attributes:
        length: Total byte count of the value in the stream
        data: The bytes, or None when omitted by the size policy
        fragments: Encapsulated fragments (first is the offset table),
            or None for a contiguous value
        fragment_count: Number of fragments seen, even when omitted

    """

    length: int
    data: bytes | None = None
    fragments: tuple[bytes, ...] | None = None
    fragment_count: int = 0

    @property
    def is_encapsulated(self) -> bool:
        return self.fragments is not None or self.fragment_count > 0

    @property
    def is_omitted(self) -> bool:
        return self.data is None and self.fragments is None


ElementValue = Union[
    str,
    list[int],
    list[float],
    list[str],
    OpaqueValue,
    tuple["Dataset", ...],
]


@dataclass(frozen=True)
class DataElement:
    """A single decoded data element.

    Attributes:
        tag: Element tag
        vr: Value representation used to decode the value
        length: Declared value length, None for undefined length
        value: Decoded value
        offset: Stream offset of the element's tag

    """

    tag: int
    vr: str
    length: int | None
    value: ElementValue
    offset: int = 0

    @property
    def keyword(self) -> str | None:
        return lookup_keyword(self.tag)

    @property
    def is_sequence(self) -> bool:
        return self.vr == "SQ"

    def __str__(self) -> str:
        return f"({format_tag(self.tag)}) {self.vr}"


class Dataset:
    """Ordered collection of elements for the file or for one sequence item.

    Iteration yields elements in stream order.
    """

    def __init__(self) -> None:
        self._elements: dict[int, DataElement] = {}

    def add(
        self,
        element: DataElement,
        policy: DuplicateTagPolicy = DuplicateTagPolicy.REJECT,
    ) -> None:
        """Append an element, applying the duplicate tag policy.

        Raises:
            DuplicateTagError: If the tag is already present and the
                policy is REJECT

        """
        if element.tag in self._elements and policy is DuplicateTagPolicy.REJECT:
            raise DuplicateTagError(
                "Tag appears more than once in the same dataset",
                tag=element.tag,
                offset=element.offset,
            )
        self._elements[element.tag] = element

    def __iter__(self) -> Iterator[DataElement]:
        return iter(self._elements.values())

    def __len__(self) -> int:
        return len(self._elements)

    def __contains__(self, tag: object) -> bool:
        return tag in self._elements

    def __getitem__(self, tag: int) -> DataElement:
        return self._elements[tag]

    def get(self, tag: int) -> DataElement | None:
        return self._elements.get(tag)

    @property
    def tags(self) -> list[int]:
        return list(self._elements)

    def walk(self) -> Iterator[DataElement]:
        """Yield every element depth-first, including those inside items."""
        for element in self:
            yield element
            if element.is_sequence and isinstance(element.value, tuple):
                for item in element.value:
                    yield from item.walk()

    def __repr__(self) -> str:
        return f"Dataset({len(self)} elements)"


@dataclass
class DicomFile:
    """A fully decoded Part 10 file."""

    path: Path | None
    file_size: int
    preamble: bytes
    file_meta: Dataset
    transfer_syntax: TransferSyntax
    dataset: Dataset = field(default_factory=Dataset)
