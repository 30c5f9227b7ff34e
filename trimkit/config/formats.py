"""
Container/codec compatibility rules.

This module is the single place that knows which encoders each output
container accepts and which quirks a container or encoder forces on the
ffmpeg command line. `EncodingPlanBuilder` only reads from here.

The first codec listed for a container is its default. The override rules are
applied in a fixed order: first the rule of the resolved video codec (pixel
format and encoder flags), then the rule of the container, so that container
rules win.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

DEFAULT_FORMAT = "mp4"

# --- Encoder names referenced by the rules below ---
H264_ENCODER = "libx264"
H265_ENCODER = "libx265"
VP9_ENCODER = "libvpx-vp9"
PRORES_ENCODER = "prores_ks"
MJPEG_ENCODER = "mjpeg"
GIF_ENCODER = "gif"
AAC_ENCODER = "aac"
OPUS_ENCODER = "libopus"
VORBIS_ENCODER = "libvorbis"
MP3_LAME_ENCODER = "libmp3lame"
# Name ffmpeg resolves to its MP3 encoder. Used as the forced AVI audio codec.
MP3_ENCODER = "mp3"
FLAC_ENCODER = "flac"
PCM_S16LE_ENCODER = "pcm_s16le"

DEFAULT_PIXEL_FORMAT = "yuv420p"
H264_PRESET = "medium"
# prores_ks profile 3 is "standard quality" (ProRes 422 HQ).
PRORES_PROFILE = "3"


VIDEO_CODECS_BY_FORMAT: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "mp4": (H264_ENCODER, H265_ENCODER),
        "mov": (H264_ENCODER, H265_ENCODER, PRORES_ENCODER, MJPEG_ENCODER),
        "mkv": (H264_ENCODER, H265_ENCODER, VP9_ENCODER, PRORES_ENCODER, MJPEG_ENCODER),
        "webm": (VP9_ENCODER,),
        "avi": (H264_ENCODER, MJPEG_ENCODER),
        "flv": (H264_ENCODER,),
        "gif": (GIF_ENCODER,),
    }
)

AUDIO_CODECS_BY_FORMAT: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "mp4": (AAC_ENCODER, MP3_LAME_ENCODER),
        "mov": (AAC_ENCODER,),
        "mkv": (AAC_ENCODER, OPUS_ENCODER, VORBIS_ENCODER, MP3_LAME_ENCODER, FLAC_ENCODER),
        "webm": (OPUS_ENCODER, VORBIS_ENCODER),
        "avi": (MP3_LAME_ENCODER,),
        "flv": (AAC_ENCODER,),
        "gif": (),
        "mp3": (MP3_LAME_ENCODER,),
        "wav": (PCM_S16LE_ENCODER,),
        "flac": (FLAC_ENCODER,),
        "m4a": (AAC_ENCODER,),
        "aac": (AAC_ENCODER,),
        "ogg": (VORBIS_ENCODER,),
        "opus": (OPUS_ENCODER,),
    }
)


def video_codecs_for_format(format_name: str) -> Tuple[str, ...]:
    """Allowed video encoders for a container, default first. Unknown containers allow none."""
    return VIDEO_CODECS_BY_FORMAT.get(format_name, ())


def audio_codecs_for_format(format_name: str) -> Tuple[str, ...]:
    """Allowed audio encoders for a container, default first. Unknown containers allow none."""
    return AUDIO_CODECS_BY_FORMAT.get(format_name, ())


@dataclass(frozen=True)
class EncodingOverrides:
    """
    A set of forced changes to an encoding plan.

    Attributes:
        video_codec: Replaces the resolved video encoder.
        audio_codec: Replaces the resolved audio encoder.
        drop_audio: Removes the audio encoder entirely.
        suppress_preset: Prevents the x264 `-preset` flag.
        pixel_format: Replaces the output pixel format.
        extra_args: Flags appended after the codec/bitrate flags.
    """

    video_codec: Optional[str] = None
    audio_codec: Optional[str] = None
    drop_audio: bool = False
    suppress_preset: bool = False
    pixel_format: Optional[str] = None
    extra_args: Tuple[str, ...] = ()


NO_OVERRIDES = EncodingOverrides()

_FASTSTART = EncodingOverrides(extra_args=("-movflags", "+faststart"))

# Applied first, keyed by the resolved video encoder.
CODEC_OVERRIDES: Mapping[str, EncodingOverrides] = MappingProxyType(
    {
        PRORES_ENCODER: EncodingOverrides(
            pixel_format="yuv422p10le", extra_args=("-profile:v", PRORES_PROFILE)
        ),
        MJPEG_ENCODER: EncodingOverrides(pixel_format="yuvj422p"),
    }
)

# Applied second, keyed by container. A container that has video encoders but
# no entry here is not supported for video output.
FORMAT_OVERRIDES: Mapping[str, EncodingOverrides] = MappingProxyType(
    {
        "mp4": _FASTSTART,
        "mov": _FASTSTART,
        "mkv": NO_OVERRIDES,
        "webm": EncodingOverrides(
            video_codec=VP9_ENCODER, audio_codec=OPUS_ENCODER, suppress_preset=True
        ),
        "avi": EncodingOverrides(audio_codec=MP3_ENCODER),
        "flv": EncodingOverrides(audio_codec=AAC_ENCODER),
        "gif": EncodingOverrides(
            video_codec=GIF_ENCODER,
            drop_audio=True,
            suppress_preset=True,
            pixel_format="rgb8",
            extra_args=("-an", "-loop", "0"),
        ),
    }
)


# --- User-facing choices ---


@dataclass(frozen=True)
class FormatOption:
    label: str
    value: str
    ext: str


@dataclass(frozen=True)
class NumericPreset:
    label: str
    value: str
    amount: Optional[int] = None


VIDEO_FORMAT_OPTIONS: Tuple[FormatOption, ...] = (
    FormatOption("MP4", "mp4", "mp4"),
    FormatOption("MKV", "mkv", "mkv"),
    FormatOption("MOV", "mov", "mov"),
    FormatOption("WebM", "webm", "webm"),
    FormatOption("AVI", "avi", "avi"),
    FormatOption("FLV", "flv", "flv"),
    FormatOption("GIF", "gif", "gif"),
)

AUDIO_FORMAT_OPTIONS: Tuple[FormatOption, ...] = (
    FormatOption("MP3", "mp3", "mp3"),
    FormatOption("WAV", "wav", "wav"),
    FormatOption("FLAC", "flac", "flac"),
    FormatOption("AAC", "m4a", "m4a"),
    FormatOption("OGG", "ogg", "ogg"),
    FormatOption("Opus", "opus", "opus"),
)

FPS_PRESETS: Tuple[NumericPreset, ...] = (
    NumericPreset("60 fps", "60", 60),
    NumericPreset("30 fps", "30", 30),
    NumericPreset("24 fps", "24", 24),
    NumericPreset("Custom", "custom"),
)

VIDEO_BITRATE_PRESETS: Tuple[NumericPreset, ...] = (
    NumericPreset("Source", "source"),
    NumericPreset("8000 kbps", "8000", 8000),
    NumericPreset("6000 kbps", "6000", 6000),
    NumericPreset("4000 kbps", "4000", 4000),
    NumericPreset("2500 kbps", "2500", 2500),
    NumericPreset("Custom", "custom"),
)


def extension_for_format(format_name: str) -> str:
    """
    Returns the file extension used for a container identifier.

    Identifiers without a listed option (for example "aac") use the
    identifier itself as the extension.
    """
    for option in VIDEO_FORMAT_OPTIONS + AUDIO_FORMAT_OPTIONS:
        if option.value == format_name:
            return option.ext
    return format_name
