"""
This module contains helper functions for converting between numbers and the
strings shown to users or passed to ffmpeg: second offsets, frame rates,
clock times, output sizes and output file names.
"""

import math
import re
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import List, Optional, Union

from ..config.common import TRIMMED_SUFFIX
from ..config.formats import extension_for_format


def format_seconds(seconds: float) -> str:
    """Formats seconds with millisecond precision, as ffmpeg's `-ss`/`-t` expect ("2.500")."""
    return f"{seconds:.3f}"


def format_number(value: Union[int, float]) -> str:
    """
    Formats a number without a trailing ".0" for whole values.

    Used for filter arguments, where "fps=30" reads better than "fps=30.0"
    while "fps=29.97" has to keep its fraction.
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_timedelta(td_object: timedelta) -> str:
    """
    Formats a timedelta object into a "HH:MM:SS" string.

    Returns "00:00:00" if the input is not a valid timedelta object.
    """
    if not isinstance(td_object, timedelta):
        return "00:00:00"

    total_seconds = int(td_object.total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02}:{minutes:02}:{seconds:02}"


def format_hms(ms: float) -> str:
    """
    Formats a millisecond offset as a short clock time.

    Hours are only shown when non-zero: 65000 becomes "1:05" and 3723000
    becomes "1:02:03". Non-finite input gives "--:--".

    Args:
        ms: The offset in milliseconds. Negative values are clamped to 0.
    """
    try:
        total_seconds = max(0, int(ms // 1000))
    except (OverflowError, ValueError):
        return "--:--"
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02}:{seconds:02}"
    return f"{minutes}:{seconds:02}"


_TIMESTAMP_PATTERN = re.compile(r"(?:(\d+):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)")


def parse_timestamp_ms(text: str) -> int:
    """
    Parses a user-supplied time into milliseconds.

    Accepts plain seconds ("12.5") or clock times ("1:02:03.250", "02:03").

    Raises:
        ValueError: If the text is neither.
    """
    text = text.strip()
    try:
        seconds = float(text)
    except ValueError:
        match = _TIMESTAMP_PATTERN.fullmatch(text)
        if not match:
            raise ValueError(f"Could not parse time: {text!r}") from None
        hours_str, minutes_str, seconds_str = match.groups()
        hours = int(hours_str) if hours_str else 0
        seconds = hours * 3600 + int(minutes_str) * 60 + float(seconds_str)
    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError(f"Time must be a finite, non-negative value: {text!r}")
    return int(round(seconds * 1000))


def even_dimension(value: float) -> int:
    """Rounds to the nearest integer and bumps odd results up, since yuv420p needs even sizes."""
    # Half-up rounding; round() would round 4.5 down to 4.
    rounded = math.floor(value + 0.5)
    return rounded if rounded % 2 == 0 else rounded + 1


@dataclass(frozen=True)
class ResolutionOption:
    label: str
    value: str
    width: int
    height: int


def build_resolution_options(source_width: int, source_height: int) -> List[ResolutionOption]:
    """
    Suggests output sizes for a source: 125%, the source itself, 75% and 50%.

    Scaled sizes are rounded to even dimensions. Options that end up with the
    same size as an earlier one are dropped.
    """

    def scale_option(label: str, factor: float, key: str) -> ResolutionOption:
        width = even_dimension(source_width * factor)
        height = even_dimension(source_height * factor)
        return ResolutionOption(f"{label} ({width}x{height})", key, width, height)

    options = [
        scale_option("125%", 1.25, "scale_125"),
        ResolutionOption(
            f"Source ({source_width}x{source_height})", "source", source_width, source_height
        ),
        scale_option("75%", 0.75, "scale_75"),
        scale_option("50%", 0.5, "scale_50"),
    ]

    unique: List[ResolutionOption] = []
    seen = set()
    for option in options:
        key = (option.width, option.height)
        if key not in seen:
            seen.add(key)
            unique.append(option)
    return unique


def default_output_path(
    input_path: Union[str, Path], format_name: str, output_dir: Optional[Union[str, Path]] = None
) -> Path:
    """
    Derives an output file name from the input file and the target container.

    "clips/holiday.mov" converted to "mp4" becomes "clips/holiday_trimmed.mp4".

    Args:
        input_path: The source file.
        format_name: The target container identifier.
        output_dir: Directory for the result; the input's directory if None.
    """
    source = Path(input_path)
    directory = Path(output_dir) if output_dir is not None else source.parent
    return directory / f"{source.stem}{TRIMMED_SUFFIX}.{extension_for_format(format_name)}"
