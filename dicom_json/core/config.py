"""Parser Configuration - Call-Time Settings.

Validated, immutable settings for a single parse call. Values are passed
in by the caller (or taken from ``DEFAULT_CONFIG``); nothing here is read
from the environment.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DuplicateTagPolicy(str, Enum):
    """What to do when a tag repeats within one dataset level.

    - REJECT: fail the parse with DuplicateTagError
    - LAST_WINS: keep the first position, take the last value
    """

    REJECT = "reject"
    LAST_WINS = "last_wins"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ParserConfig(BaseModel):
    """Decoding and serialization limits.

    Usage:
        from dicom_json.core.config import ParserConfig
        config = ParserConfig(max_inline_bytes=0, indent=2)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Resource ceilings
    max_depth: int = Field(
        default=64, ge=1, le=128, description="Maximum nested sequence depth"
    )
    max_file_size: int | None = Field(
        default=None, ge=1, description="Maximum input file size in bytes"
    )

    # Opaque payload policy
    max_inline_bytes: int = Field(
        default=4096,
        ge=0,
        description="Largest opaque payload embedded as base64; larger ones are omitted",
    )

    # Format strictness
    duplicate_tags: DuplicateTagPolicy = Field(
        default=DuplicateTagPolicy.REJECT,
        description="Handling of repeated tags within one dataset level",
    )
    allow_odd_length: bool = Field(
        default=False, description="Accept odd value lengths instead of failing"
    )

    # Output
    include_file_meta: bool = Field(
        default=False, description="Emit group 0002 elements before the dataset"
    )
    indent: int | None = Field(
        default=None, ge=0, le=8, description="JSON indentation, None for compact"
    )


DEFAULT_CONFIG = ParserConfig()
