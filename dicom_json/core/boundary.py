"""Two-function parse/release boundary.

``parse_dicom_file`` never raises for bad input: it returns a ParseResult
holding exactly one of ``json_data`` or ``error_message``.
``free_dicom_parse_result`` releases it.

Caller obligations:
- release each result exactly once (``with`` does this automatically)
- do not read either field after release

Both violations raise ResultReleasedError rather than failing silently.
"""

from __future__ import annotations

from pathlib import Path
from types import TracebackType

from .config import ParserConfig
from .exceptions import DicomJsonError, ResultReleasedError
from .parser import DicomParser


class ParseResult:
    """Owner of the outcome of one parse call.

    Exactly one of ``json_data`` and ``error_message`` is non-None until
    the result is released.
    """

    __slots__ = ("_json_data", "_error_message", "_released")

    def __init__(
        self, json_data: str | None = None, error_message: str | None = None
    ) -> None:
        if (json_data is None) == (error_message is None):
            raise ValueError("ParseResult needs exactly one of json_data, error_message")
        if error_message is not None and not error_message:
            raise ValueError("error_message must not be empty")
        self._json_data = json_data
        self._error_message = error_message
        self._released = False

    @classmethod
    def success(cls, json_data: str) -> ParseResult:
        return cls(json_data=json_data)

    @classmethod
    def failure(cls, error_message: str) -> ParseResult:
        return cls(error_message=error_message)

    def _ensure_live(self) -> None:
        if self._released:
            raise ResultReleasedError("ParseResult has already been released")

    @property
    def json_data(self) -> str | None:
        self._ensure_live()
        return self._json_data

    @property
    def error_message(self) -> str | None:
        self._ensure_live()
        return self._error_message

    @property
    def ok(self) -> bool:
        self._ensure_live()
        return self._json_data is not None

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Drop both owned strings.

        Raises:
            ResultReleasedError: If the result was already released

        """
        self._ensure_live()
        self._json_data = None
        self._error_message = None
        self._released = True

    def __enter__(self) -> ParseResult:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if not self._released:
            self.release()

    def __repr__(self) -> str:
        if self._released:
            state = "released"
        elif self._json_data is not None:
            state = f"json_data={len(self._json_data)} chars"
        else:
            state = f"error_message={self._error_message!r}"
        return f"ParseResult({state})"


def parse_dicom_file(
    path: str | Path | None, config: ParserConfig | None = None
) -> ParseResult:
    """Parse a DICOM file into JSON.

    Args:
        path: Path to the DICOM file
        config: Parser limits and output options

    Returns:
        A success result carrying the JSON text, or a failure result
        carrying ``"<Kind>: <message>"``

    """
    if path is None:
        return ParseResult.failure("Path is null")

    try:
        json_data = DicomParser(path, config).to_json()
    except DicomJsonError as e:
        return ParseResult.failure(f"{e.kind}: {e.message}")
    return ParseResult.success(json_data)


def free_dicom_parse_result(result: ParseResult) -> None:
    """Release a result returned by parse_dicom_file.

    Raises:
        ResultReleasedError: If the result was already released

    """
    result.release()
