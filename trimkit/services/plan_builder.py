"""
Turns a `ConversionRequest` into the argument list for ffmpeg.

The builder is a pure function of the request and the rules in
`trimkit.config.formats`: it does not touch the filesystem, run processes or
log. The order of the produced arguments matters to ffmpeg:

- `-ss` comes before `-i` so the input is seeked (fast) rather than decoded
  up to the start point;
- the output path is always the last argument.
"""
from typing import List, Optional, Sequence

from ..config.formats import (
    CODEC_OVERRIDES,
    DEFAULT_FORMAT,
    DEFAULT_PIXEL_FORMAT,
    FORMAT_OVERRIDES,
    GIF_ENCODER,
    H264_ENCODER,
    H264_PRESET,
    NO_OVERRIDES,
    audio_codecs_for_format,
    video_codecs_for_format,
)
from ..domain.exceptions import (
    CodecNotAllowedException,
    InvalidRangeException,
    NoCodecAvailableException,
    UnsupportedFormatException,
)
from ..domain.request import ConversionRequest
from ..utils.format_utils import format_number, format_seconds


class EncodingPlanBuilder:
    """
    Resolves codecs and container quirks and synthesizes ffmpeg arguments.

    Instances hold no state, so one builder can serve any number of requests,
    including concurrently.
    """

    def build(self, request: ConversionRequest) -> List[str]:
        """
        Builds the ffmpeg argument list for a request.

        Args:
            request: The conversion to plan.

        Returns:
            The arguments, without the ffmpeg executable itself.

        Raises:
            InvalidRangeException: If `start_ms` is negative or `end_ms` is not
                greater than it.
            NoCodecAvailableException: If the container has no encoder of the
                required kind.
            CodecNotAllowedException: If the requested video codec (or, for
                audio-only output, the requested audio codec) does not fit
                the container.
            UnsupportedFormatException: If the container has video encoders
                but no output rules.
        """
        if request.start_ms < 0 or request.end_ms <= request.start_ms:
            raise InvalidRangeException(request.start_ms, request.end_ms)

        format_name = DEFAULT_FORMAT if request.format is None else request.format
        start_secs = request.start_ms / 1000.0
        duration_secs = (request.end_ms - request.start_ms) / 1000.0

        args = ["-y"]
        if start_secs > 0:
            args += ["-ss", format_seconds(start_secs)]
        args += ["-i", request.input_path]
        args += ["-t", format_seconds(duration_secs)]

        if request.is_audio_only:
            args += self._audio_only_args(request, format_name)
        else:
            args += self._video_args(request, format_name)

        args.append(request.output_path)
        return args

    def _audio_only_args(self, request: ConversionRequest, format_name: str) -> List[str]:
        allowed_audio = audio_codecs_for_format(format_name)
        if not allowed_audio:
            raise NoCodecAvailableException(format_name, "audio")
        audio_codec = self._select_codec(request.audio_codec, allowed_audio, format_name, "audio")

        args = ["-vn", "-c:a", audio_codec]
        if request.audio_bitrate_kbps is not None:
            args += ["-b:a", f"{request.audio_bitrate_kbps}k"]
        return args

    def _video_args(self, request: ConversionRequest, format_name: str) -> List[str]:
        args: List[str] = []

        filter_graph = self._filter_graph(request)
        if filter_graph:
            args += ["-vf", filter_graph]

        allowed_video = video_codecs_for_format(format_name)
        if not allowed_video:
            raise NoCodecAvailableException(format_name, "video")
        video_codec = self._select_codec(request.video_codec, allowed_video, format_name, "video")

        # An incompatible audio codec falls back to the container default
        # instead of failing, unlike the video codec.
        allowed_audio = audio_codecs_for_format(format_name)
        audio_codec: Optional[str] = None
        if request.audio_codec in allowed_audio:
            audio_codec = request.audio_codec
        elif allowed_audio:
            audio_codec = allowed_audio[0]

        add_preset = True
        pixel_format = DEFAULT_PIXEL_FORMAT
        extra_args: List[str] = []

        codec_rule = CODEC_OVERRIDES.get(video_codec, NO_OVERRIDES)
        if codec_rule.pixel_format:
            pixel_format = codec_rule.pixel_format
        extra_args += codec_rule.extra_args

        format_rule = FORMAT_OVERRIDES.get(format_name)
        if format_rule is None:
            raise UnsupportedFormatException(format_name)
        if format_rule.video_codec:
            video_codec = format_rule.video_codec
        if format_rule.audio_codec:
            audio_codec = format_rule.audio_codec
        if format_rule.drop_audio:
            audio_codec = None
        if format_rule.suppress_preset:
            add_preset = False
        if format_rule.pixel_format:
            pixel_format = format_rule.pixel_format
        extra_args += format_rule.extra_args

        args += ["-c:v", video_codec]
        if add_preset and video_codec == H264_ENCODER:
            args += ["-preset", H264_PRESET]

        # The GIF encoder derives quality from its palette, not a target bitrate.
        if request.video_bitrate_kbps is not None and video_codec != GIF_ENCODER:
            args += ["-b:v", f"{request.video_bitrate_kbps}k"]

        if audio_codec:
            args += ["-c:a", audio_codec]
            if request.audio_bitrate_kbps is not None:
                args += ["-b:a", f"{request.audio_bitrate_kbps}k"]

        args += extra_args
        args += ["-pix_fmt", pixel_format]
        return args

    @staticmethod
    def _filter_graph(request: ConversionRequest) -> str:
        filters = []
        if request.width is not None and request.height is not None:
            filters.append(f"scale={request.width}:{request.height}")
        if request.fps is not None:
            filters.append(f"fps={format_number(request.fps)}")
        return ",".join(filters)

    @staticmethod
    def _select_codec(
        requested: Optional[str], allowed: Sequence[str], format_name: str, kind: str
    ) -> str:
        if requested is None:
            return allowed[0]
        if requested not in allowed:
            raise CodecNotAllowedException(format_name, requested, kind)
        return requested


_default_builder = EncodingPlanBuilder()


def build_ffmpeg_args(request: ConversionRequest) -> List[str]:
    """Shortcut for `EncodingPlanBuilder().build(request)`."""
    return _default_builder.build(request)
