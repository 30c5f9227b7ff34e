"""
The description of a single trim/transcode job.
"""
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class ConversionRequest:
    """
    Everything needed to plan one ffmpeg invocation.

    A request is created once per conversion, handed to
    `EncodingPlanBuilder.build` and never modified. Paths are passed to ffmpeg
    as given; they are not checked here. The builder rejects requests whose
    `start_ms` is negative or whose `end_ms` is not greater than `start_ms`.

    Attributes:
        input_path: Source media file.
        output_path: Destination file.
        start_ms: Start of the kept range, in milliseconds.
        end_ms: End of the kept range, in milliseconds.
        width, height: Output size. Scaling only happens when both are set.
        fps: Output frame rate.
        video_bitrate_kbps, audio_bitrate_kbps: Target bitrates in kbit/s.
        format: Container identifier, "mp4" when None.
        is_audio_only: Drop the video and write an audio-only file.
        video_codec, audio_codec: Encoders chosen by the user, if any.
    """

    input_path: str
    output_path: str
    start_ms: int
    end_ms: int
    width: Optional[int] = None
    height: Optional[int] = None
    fps: Optional[float] = None
    video_bitrate_kbps: Optional[int] = None
    audio_bitrate_kbps: Optional[int] = None
    format: Optional[str] = None
    is_audio_only: bool = False
    video_codec: Optional[str] = None
    audio_codec: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConversionRequest":
        """
        Creates a request from a plain mapping, such as a parsed YAML job file.

        Raises:
            ValueError: If a key is unknown, a required key is missing or a
                value has the wrong type.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown conversion request fields: {', '.join(unknown)}")
        for name, value in data.items():
            _check_field_type(name, value)
        try:
            return cls(**data)
        except TypeError as e:
            raise ValueError(f"Invalid conversion request: {e}") from e


_STRING_FIELDS = {"input_path", "output_path"}
_OPTIONAL_STRING_FIELDS = {"format", "video_codec", "audio_codec"}
_INT_FIELDS = {"start_ms", "end_ms"}
_OPTIONAL_INT_FIELDS = {"width", "height", "video_bitrate_kbps", "audio_bitrate_kbps"}


def _is_int(value: Any) -> bool:
    # bool is an int subclass; YAML true/false is not a number.
    return isinstance(value, int) and not isinstance(value, bool)


def _check_field_type(name: str, value: Any):
    if name in _STRING_FIELDS:
        valid = isinstance(value, str)
        expected = "a string"
    elif name in _OPTIONAL_STRING_FIELDS:
        valid = value is None or isinstance(value, str)
        expected = "a string"
    elif name in _INT_FIELDS:
        valid = _is_int(value)
        expected = "an integer"
    elif name in _OPTIONAL_INT_FIELDS:
        valid = value is None or _is_int(value)
        expected = "an integer"
    elif name == "fps":
        valid = value is None or _is_int(value) or isinstance(value, float)
        expected = "a number"
    else:
        valid = isinstance(value, bool)
        expected = "true or false"
    if not valid:
        raise ValueError(f"Conversion request field {name} must be {expected}, got {value!r}")
