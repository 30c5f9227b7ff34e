"""
trimkit: trim and transcode media files with ffmpeg.

The package is split the same way the encoding workflow is split:

- `config`: static settings, most importantly the container/codec
  compatibility table in `config.formats`.
- `domain`: the data the rest of the application talks about (`MediaInfo`,
  `ConversionRequest`) and the exception hierarchy.
- `services`: the argument synthesis engine (`EncodingPlanBuilder`) and the
  caller-facing `MediaService` that runs ffprobe/ffmpeg.
- `utils`: process execution, executable lookup and formatting helpers.

The most common entry points are re-exported here so callers can write
`from trimkit import MediaService, ConversionRequest`.
"""

from .domain.exceptions import TrimkitException
from .domain.media import MediaInfo, parse_frame_rate, parse_media_info
from .domain.request import ConversionRequest
from .services.media_service import MediaService
from .services.plan_builder import EncodingPlanBuilder, build_ffmpeg_args

__version__ = "0.3.0"

__all__ = [
    "ConversionRequest",
    "EncodingPlanBuilder",
    "MediaInfo",
    "MediaService",
    "TrimkitException",
    "build_ffmpeg_args",
    "parse_frame_rate",
    "parse_media_info",
]
