"""Recursive dataset assembly.

DatasetBuilder drives the ElementDecoder over a stream, collecting
elements into Datasets and recursing into sequence items. Item nesting
is counted explicitly so pathological files fail with
NestingTooDeepError instead of exhausting the call stack.
"""

from __future__ import annotations

from collections.abc import Callable

from dicom_json.utils.logger import get_logger

from .config import DEFAULT_CONFIG, ParserConfig
from .constants import (
    DEFAULT_ENCODINGS,
    DELIMITER_GROUP,
    DELIMITER_NAMES,
    ENCAPSULATED_VRS,
    ITEM,
    ITEM_DELIMITATION,
    SEQUENCE_DELIMITATION,
    SPECIFIC_CHARACTER_SET,
)
from .cursor import ByteCursor
from .dataset import DataElement, Dataset, ElementValue
from .decoder import ElementDecoder, ElementHeader
from .dictionary import resolve_encodings
from .exceptions import MalformedLengthError, NestingTooDeepError, TruncatedStreamError
from .syntaxes import IMPLICIT_VR_LITTLE_ENDIAN
from .types import TransferSyntax, format_tag

logger = get_logger(__name__)


class DatasetBuilder:
    """Build Dataset trees from a cursor under one transfer syntax.

    Attributes:
        cursor: Stream being decoded
        syntax: Transfer syntax of the stream
        config: Depth, size and strictness limits
        decoder: Element decoder sharing the same cursor

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
        self.decoder = ElementDecoder(cursor, syntax, config)

    def read_dataset(
        self,
        *,
        end: int | None = None,
        depth: int = 0,
        delimited: bool = False,
        encodings: tuple[str, ...] = DEFAULT_ENCODINGS,
        stop_when: Callable[[int], bool] | None = None,
    ) -> Dataset:
        """Decode elements until a limit, a delimiter or end of stream.

        Args:
            end: Absolute offset at which the dataset ends (defined-length items)
            depth: Item nesting depth of this dataset, 0 for the top level
            delimited: Dataset is an undefined-length item ending in an
                Item Delimitation Item
            encodings: Codecs inherited from the enclosing dataset
            stop_when: Called with each upcoming tag; returning True stops
                decoding before that element is consumed

        Returns:
            The decoded elements in stream order

        Raises:
            MalformedLengthError: On stray delimiters or elements overrunning ``end``
            TruncatedStreamError: If a delimited item reaches end of stream

        """
        cursor = self.cursor
        dataset = Dataset()

        while True:
            if end is not None and cursor.position >= end:
                break
            if cursor.at_end:
                if delimited:
                    raise TruncatedStreamError(
                        "Item ended without an Item Delimitation Item",
                        offset=cursor.position,
                    )
                break

            tag = self.decoder.peek_tag()
            if stop_when is not None and stop_when(tag):
                break

            if tag >> 16 == DELIMITER_GROUP:
                header = self.decoder.read_header()
                if tag == ITEM_DELIMITATION and delimited:
                    break
                raise MalformedLengthError(
                    f"Unexpected {DELIMITER_NAMES.get(tag, 'delimiter tag')} in dataset",
                    tag=tag,
                    offset=header.offset,
                )

            element = self.read_element(depth, encodings)
            if end is not None and cursor.position > end:
                raise MalformedLengthError(
                    "Element overruns the end of its enclosing item",
                    tag=element.tag,
                    offset=element.offset,
                )
            dataset.add(element, self.config.duplicate_tags)

            if element.tag == SPECIFIC_CHARACTER_SET and isinstance(element.value, str):
                encodings = resolve_encodings(element.value)

        return dataset

    def read_element(
        self, depth: int = 0, encodings: tuple[str, ...] = DEFAULT_ENCODINGS
    ) -> DataElement:
        """Decode one element, recursing into sequences."""
        header = self.decoder.read_header()
        vr = header.vr or "UN"
        value: ElementValue

        if vr == "SQ":
            value = self.read_sequence(header, depth, encodings)
        elif vr == "UN" and header.length is None:
            # Undefined-length UN holds an implicit VR little endian sequence
            value = self._read_unknown_sequence(header, depth, encodings)
            vr = "SQ"
        elif vr in ENCAPSULATED_VRS and header.length is None:
            value = self.decoder.read_fragments(header)
        else:
            value = self.decoder.decode_value(header, encodings)

        return DataElement(header.tag, vr, header.length, value, header.offset)

    def read_sequence(
        self,
        header: ElementHeader,
        depth: int,
        encodings: tuple[str, ...] = DEFAULT_ENCODINGS,
    ) -> tuple[Dataset, ...]:
        """Decode the items of a sequence element.

        Args:
            header: Header of the SQ element, cursor positioned at its value
            depth: Depth of the dataset holding the sequence
            encodings: Codecs inherited by the items

        Returns:
            Items in stream order

        Raises:
            MalformedLengthError: If a non-Item tag appears or items do not
                exactly fill a defined-length sequence
            TruncatedStreamError: If the sequence runs past the end of stream

        """
        cursor = self.cursor
        end: int | None = None
        if header.length is not None:
            if header.length > cursor.remaining:
                raise TruncatedStreamError(
                    f"Sequence length {header.length} exceeds the "
                    f"{cursor.remaining} bytes remaining",
                    tag=header.tag,
                    offset=header.offset,
                )
            end = cursor.position + header.length

        items: list[Dataset] = []
        while end is None or cursor.position < end:
            if cursor.at_end:
                raise TruncatedStreamError(
                    "Sequence ended without a Sequence Delimitation Item",
                    tag=header.tag,
                    offset=cursor.position,
                )

            tag = self.decoder.peek_tag()
            if tag not in (ITEM, SEQUENCE_DELIMITATION):
                raise MalformedLengthError(
                    f"Expected an Item in sequence, found ({format_tag(tag)})",
                    tag=header.tag,
                    offset=cursor.position,
                )

            item = self.decoder.read_header()
            if item.tag == SEQUENCE_DELIMITATION:
                if end is None:
                    break
                raise MalformedLengthError(
                    "Sequence Delimitation Item inside a defined-length sequence",
                    tag=header.tag,
                    offset=item.offset,
                )
            items.append(self.read_item(item, depth + 1, encodings, parent=header.tag))

        if end is not None and cursor.position != end:
            raise MalformedLengthError(
                "Items overrun the declared sequence length",
                tag=header.tag,
                offset=cursor.position,
            )
        return tuple(items)

    def read_item(
        self,
        header: ElementHeader,
        depth: int,
        encodings: tuple[str, ...] = DEFAULT_ENCODINGS,
        parent: int | None = None,
    ) -> Dataset:
        """Decode one sequence item as a nested dataset.

        Raises:
            NestingTooDeepError: If ``depth`` exceeds ``config.max_depth``
            TruncatedStreamError: If a defined-length item runs past end of stream

        """
        if depth > self.config.max_depth:
            location = f" in ({format_tag(parent)})" if parent is not None else ""
            raise NestingTooDeepError(
                f"Sequence nesting exceeds the maximum depth of "
                f"{self.config.max_depth}{location} at offset {header.offset}",
                context={"depth": depth, "offset": header.offset},
            )

        if header.length is None:
            return self.read_dataset(depth=depth, delimited=True, encodings=encodings)

        if header.length > self.cursor.remaining:
            raise TruncatedStreamError(
                f"Item length {header.length} exceeds the "
                f"{self.cursor.remaining} bytes remaining",
                tag=parent,
                offset=header.offset,
            )
        return self.read_dataset(
            end=self.cursor.position + header.length, depth=depth, encodings=encodings
        )

    def _read_unknown_sequence(
        self, header: ElementHeader, depth: int, encodings: tuple[str, ...]
    ) -> tuple[Dataset, ...]:
        logger.debug("unknown_vr_sequence", tag=format_tag(header.tag))
        if self.syntax == IMPLICIT_VR_LITTLE_ENDIAN:
            return self.read_sequence(header, depth, encodings)
        nested = DatasetBuilder(self.cursor, IMPLICIT_VR_LITTLE_ENDIAN, self.config)
        return nested.read_sequence(header, depth, encodings)
