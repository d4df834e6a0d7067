"""dicom-json - Command Line Interface

Decode a DICOM Part 10 file and print its dataset as JSON, or print a
structural summary of the file.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from dicom_json import __version__
from dicom_json.core.boundary import parse_dicom_file
from dicom_json.core.config import DuplicateTagPolicy, LogLevel, ParserConfig
from dicom_json.core.exceptions import DicomJsonError
from dicom_json.core.parser import DicomParser
from dicom_json.utils.logger import configure_logging, get_logger


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dicom-json",
        description="dicom-json - Decode DICOM Part 10 files into JSON",
        epilog="Example: %(prog)s image.dcm --indent 2 -o image.json",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("input_file", help="Path to the DICOM file to decode")
    parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="Write the JSON document to FILE instead of stdout",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print a structural summary instead of the dataset",
    )
    parser.add_argument("--version", action="version", version=f"dicom-json v{__version__}")

    output_group = parser.add_argument_group("output", "Control the JSON document")
    output_group.add_argument(
        "--indent",
        type=int,
        metavar="N",
        help="Indent the JSON document by N spaces (default: compact)",
    )
    output_group.add_argument(
        "--include-meta",
        action="store_true",
        help="Emit File Meta Information (group 0002) before the dataset",
    )
    output_group.add_argument(
        "--max-inline-bytes",
        type=int,
        default=4096,
        metavar="N",
        help="Embed opaque payloads up to N bytes as base64 (default: 4096)",
    )

    limits_group = parser.add_argument_group("limits", "Decoding strictness and ceilings")
    limits_group.add_argument(
        "--max-depth",
        type=int,
        default=64,
        metavar="N",
        help="Maximum nested sequence depth (default: 64)",
    )
    limits_group.add_argument(
        "--max-file-size",
        type=int,
        metavar="BYTES",
        help="Refuse files larger than BYTES",
    )
    limits_group.add_argument(
        "--allow-odd-length",
        action="store_true",
        help="Accept odd value lengths instead of failing",
    )
    limits_group.add_argument(
        "--duplicate-tags",
        choices=[policy.value for policy in DuplicateTagPolicy],
        default=DuplicateTagPolicy.REJECT.value,
        help="Handling of repeated tags within one dataset (default: reject)",
    )

    logging_group = parser.add_argument_group("logging")
    logging_group.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        default=LogLevel.WARNING.value,
        help="Logging level (default: WARNING)",
    )
    logging_group.add_argument(
        "--log-format",
        choices=["json", "console"],
        default="console",
        help="Log output format (default: console)",
    )
    return parser


def build_config(args: argparse.Namespace) -> ParserConfig:
    """Translate parsed arguments into a ParserConfig.

    Raises:
        ValidationError: If an argument is out of range

    """
    return ParserConfig(
        max_depth=args.max_depth,
        max_file_size=args.max_file_size,
        max_inline_bytes=args.max_inline_bytes,
        duplicate_tags=DuplicateTagPolicy(args.duplicate_tags),
        allow_odd_length=args.allow_odd_length,
        include_file_meta=args.include_meta,
        indent=args.indent,
    )


def _write_output(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
    else:
        sys.stdout.write(text + "\n")


def main(argv: list[str] | None = None) -> int:
    """Decode the requested file.

    Returns:
        0 on success, 1 on a parse failure, 2 on invalid options

    """
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(log_level=args.log_level, json_format=args.log_format == "json")
    logger = get_logger(__name__)

    try:
        config = build_config(args)
    except ValidationError as e:
        print(f"Invalid options: {e}", file=sys.stderr)
        return 2

    if args.summary:
        try:
            summary = DicomParser(args.input_file, config).summarize()
        except DicomJsonError as e:
            print(f"{e.kind}: {e.message}", file=sys.stderr)
            return 1
        _write_output(json.dumps(summary.to_dict(), indent=config.indent), args.output)
        logger.info(
            "summary_written",
            file_size=summary.file_size,
            attribute_count=summary.attribute_count,
        )
        return 0

    with parse_dicom_file(args.input_file, config) as result:
        json_data = result.json_data
        if json_data is None:
            print(result.error_message, file=sys.stderr)
            return 1
        _write_output(json_data, args.output)
        logger.info("json_written", output=args.output or "<stdout>")
    return 0


if __name__ == "__main__":
    sys.exit(main())
