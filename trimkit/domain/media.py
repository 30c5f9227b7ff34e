"""
Normalized description of a media file, built from an ffprobe report.

`parse_media_info` accepts the dictionary produced by
`ffprobe -show_format -show_streams -of json` (which is what `ffmpeg.probe`
returns) and keeps only what the conversion workflow needs: duration,
geometry, frame rate and bitrate. It never runs ffprobe itself; see
`trimkit.services.media_service` for that.
"""
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional

from .exceptions import MissingFieldException, MissingSectionException


@dataclass(frozen=True)
class MediaInfo:
    """
    Technical properties of a media file.

    Width, height and fps are only ever set when the file has a video stream;
    for audio-only media they are all None and `has_video` is False. Any of
    them may also be None for a video file whose report omits them.

    Attributes:
        duration_seconds (float): Container duration in seconds.
        width (int | None): Width of the first video stream in pixels.
        height (int | None): Height of the first video stream in pixels.
        fps (float | None): Frame rate of the first video stream.
        bitrate_kbps (int | None): Overall bitrate in kbit/s, taken from the
            container or, failing that, from the first video stream.
        has_video (bool): Whether any video stream was found.
    """

    duration_seconds: float
    width: Optional[int] = None
    height: Optional[int] = None
    fps: Optional[float] = None
    bitrate_kbps: Optional[int] = None
    has_video: bool = False

    def to_dict(self) -> dict:
        """Serialize to a plain dictionary (for YAML/JSON output)."""
        return asdict(self)


def _strict_float(text: str) -> float:
    """`float()` without its leniency for surrounding whitespace, underscores and non-ASCII digits."""
    if not text.isascii() or text != text.strip() or "_" in text:
        raise ValueError(f"Not a plain number: {text!r}")
    return float(text)


def parse_frame_rate(rate: str) -> Optional[float]:
    """
    Parses an ffprobe frame rate expression.

    ffprobe reports rates as ratios such as "30000/1001" or "25/1", and
    occasionally as plain numbers. "0/0" is what ffprobe prints when it does
    not know the rate.

    Args:
        rate: The rate expression.

    Returns:
        The rate as a float, or None if it is malformed or has a zero
        denominator.
    """
    numerator, slash, denominator = rate.partition("/")
    try:
        if not slash:
            return _strict_float(rate)
        num = _strict_float(numerator)
        den = _strict_float(denominator)
    except ValueError:
        return None
    if den == 0.0:
        return None
    return num / den


def _parse_unsigned(text: Any) -> Optional[int]:
    if not isinstance(text, str) or not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def _unsigned_field(stream: Mapping[str, Any], key: str) -> Optional[int]:
    value = stream.get(key)
    # bool is an int subclass; JSON true/false is not a dimension.
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return None


def _rate_field(stream: Mapping[str, Any], key: str) -> Optional[float]:
    value = stream.get(key)
    if not isinstance(value, str):
        return None
    return parse_frame_rate(value)


def parse_media_info(probe: Mapping[str, Any]) -> MediaInfo:
    """
    Builds a `MediaInfo` from an ffprobe JSON report.

    Args:
        probe: The decoded report, with a `format` mapping and a `streams` list.

    Returns:
        The normalized media description.

    Raises:
        MissingSectionException: If the `format` section is absent.
        MissingFieldException: If `format.duration` is absent or not a
            decimal string, or if the `streams` list is absent.
    """
    format_section = probe.get("format")
    if not isinstance(format_section, Mapping):
        raise MissingSectionException("format")

    duration_text = format_section.get("duration")
    if not isinstance(duration_text, str):
        raise MissingFieldException("duration")
    try:
        duration_seconds = _strict_float(duration_text)
    except ValueError:
        raise MissingFieldException("duration") from None

    streams = probe.get("streams")
    if not isinstance(streams, list):
        raise MissingFieldException("streams")

    video_stream = next(
        (
            s
            for s in streams
            if isinstance(s, Mapping) and s.get("codec_type") == "video"
        ),
        None,
    )

    width = height = fps = None
    if video_stream is not None:
        width = _unsigned_field(video_stream, "width")
        height = _unsigned_field(video_stream, "height")
        fps = _rate_field(video_stream, "avg_frame_rate")
        if fps is None:
            fps = _rate_field(video_stream, "r_frame_rate")

    bitrate = _parse_unsigned(format_section.get("bit_rate"))
    if bitrate is None and video_stream is not None:
        bitrate = _parse_unsigned(video_stream.get("bit_rate"))

    return MediaInfo(
        duration_seconds=duration_seconds,
        width=width,
        height=height,
        fps=fps,
        bitrate_kbps=bitrate // 1000 if bitrate is not None else None,
        has_video=video_stream is not None,
    )
