"""
Defines custom exception types for trimkit.

Callers can catch a specific failure (an unsupported codec, a broken probe
report, a crashed ffmpeg process) instead of a generic `Exception`. Each
exception keeps the offending values as attributes and puts them in its
message, so the message can be shown to the user as is.

All custom exceptions inherit from the base `TrimkitException`.
"""
from typing import Optional


class TrimkitException(Exception):
    """Base class for all custom exceptions in trimkit."""

    pass


# --- Probe report parsing ---
class ProbeException(TrimkitException):
    """Base class for malformed or incomplete ffprobe reports."""

    pass


class MissingSectionException(ProbeException):
    """
    Raised when a whole section (such as `format`) is absent from the report.

    Attributes:
        section: Name of the missing section.
    """

    def __init__(self, section: str):
        self.section = section
        super().__init__(f"Missing {section} section")


class MissingFieldException(ProbeException):
    """
    Raised when a mandatory field is absent or cannot be parsed.

    Duration is mandatory for every media file, including audio-only ones,
    because the trim range is validated against it.

    Attributes:
        field: Name of the missing field.
    """

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing {field}")


# --- Encoding plan ---
class PlanException(TrimkitException):
    """Base class for requests that cannot be turned into an ffmpeg command."""

    pass


class InvalidRangeException(PlanException):
    """Raised when the trim range starts before 0 or does not end after its start."""

    def __init__(self, start_ms: int, end_ms: int):
        self.start_ms = start_ms
        self.end_ms = end_ms
        if start_ms < 0:
            problem = "Start time must not be negative"
        else:
            problem = "End time must be greater than start time"
        super().__init__(f"{problem} (start={start_ms}ms, end={end_ms}ms)")


class NoCodecAvailableException(PlanException):
    """
    Raised when the container defines no encoder of the required kind.

    Attributes:
        format_name: The container identifier.
        kind: "video" or "audio".
    """

    def __init__(self, format_name: str, kind: str):
        self.format_name = format_name
        self.kind = kind
        super().__init__(f"No {kind} codecs available for format: {format_name}")


class CodecNotAllowedException(PlanException):
    """
    Raised when a user-chosen encoder is not compatible with the container.

    Attributes:
        format_name: The container identifier.
        codec: The rejected encoder name.
        kind: "video" or "audio".
    """

    def __init__(self, format_name: str, codec: str, kind: str):
        self.format_name = format_name
        self.codec = codec
        self.kind = kind
        super().__init__(f"{kind.capitalize()} codec {codec} not allowed for format {format_name}")


class UnsupportedFormatException(PlanException):
    """Raised when a container has encoders listed but no output rules."""

    def __init__(self, format_name: str):
        self.format_name = format_name
        super().__init__(f"Unsupported format: {format_name}")


# --- External tools ---
class ExternalProcessException(TrimkitException):
    """
    Raised when ffprobe or ffmpeg cannot be launched or exits with an error.

    The captured standard error is kept verbatim so it can be displayed.

    Attributes:
        tool: "ffprobe" or "ffmpeg".
        returncode: The exit status, or None if the process never started.
        stderr: The captured diagnostic text.
    """

    def __init__(self, tool: str, stderr: str, returncode: Optional[int] = None, reason: str = "failed"):
        self.tool = tool
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(f"{tool} {reason}: {stderr}")
