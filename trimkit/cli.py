"""
Command-Line Interface (CLI) for trimkit.

This module uses Python's `argparse` to define the sub-commands:

- `analyze`: print the media description of a file.
- `convert`: trim/transcode a file (or just print the ffmpeg command).
- `formats`: list containers, their codecs and the presets.
- `check`: verify that ffmpeg and ffprobe can be started.
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

import yaml
from loguru import logger

from .config.common import DEFAULT_LOG_LEVEL, LOGGER_FORMAT
from .config.formats import (
    AUDIO_CODECS_BY_FORMAT,
    AUDIO_FORMAT_OPTIONS,
    DEFAULT_FORMAT,
    FPS_PRESETS,
    VIDEO_BITRATE_PRESETS,
    VIDEO_CODECS_BY_FORMAT,
    VIDEO_FORMAT_OPTIONS,
)
from .domain.exceptions import TrimkitException
from .domain.request import ConversionRequest
from .services.media_service import MediaService
from .utils.ffmpeg_utils import format_command
from .utils.format_utils import build_resolution_options, default_output_path, parse_timestamp_ms
from .utils.tools import Tools


def _timestamp(text: str) -> int:
    try:
        return parse_timestamp_ms(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments.

    Args:
        argv: The arguments to parse; `sys.argv[1:]` when None.

    Returns:
        argparse.Namespace: The parsed arguments. `command` holds the name of
                            the chosen sub-command.
    """
    parser = argparse.ArgumentParser(prog="trimkit", description="Trim and transcode media files with ffmpeg.")
    parser.add_argument(
        "--log-level", type=str, default=DEFAULT_LOG_LEVEL, choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging level."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Show duration, size, frame rate and bitrate of a file.")
    analyze.add_argument("path", help="Media file to analyze.")
    analyze.add_argument("--json", action="store_true", help="Print JSON instead of YAML.")

    convert = subparsers.add_parser("convert", help="Trim and transcode a file.")
    convert.add_argument("input", nargs="?", help="Source media file.")
    convert.add_argument("-o", "--output", help="Output file. Defaults to '<input stem>_trimmed.<ext>'.")
    convert.add_argument("--job", type=Path, help="YAML file with the conversion request fields.")
    convert.add_argument("--start", type=_timestamp, default=0, help="Start time (seconds or H:MM:SS.mmm).")
    convert.add_argument("--end", type=_timestamp, help="End time. Defaults to the end of the input.")
    convert.add_argument("--format", default=None, help=f"Output container (default: {DEFAULT_FORMAT}).")
    convert.add_argument("--audio-only", action="store_true", help="Drop the video and write audio only.")
    convert.add_argument("--vcodec", help="Video encoder, e.g. libx265.")
    convert.add_argument("--acodec", help="Audio encoder, e.g. libopus.")
    convert.add_argument("--width", type=int, help="Output width (used together with --height).")
    convert.add_argument("--height", type=int, help="Output height (used together with --width).")
    convert.add_argument("--fps", type=float, help="Output frame rate.")
    convert.add_argument("--vbitrate", type=int, help="Video bitrate in kbps.")
    convert.add_argument("--abitrate", type=int, help="Audio bitrate in kbps.")
    convert.add_argument("--dry-run", action="store_true", help="Print the ffmpeg command instead of running it.")

    subparsers.add_parser("formats", help="List output containers, codecs and presets.")
    subparsers.add_parser("check", help="Verify that ffmpeg and ffprobe are available.")

    args = parser.parse_args(argv)

    if args.command == "convert" and not args.input and not args.job:
        parser.error("convert needs an input file or --job")

    return args


def configure_logging(level: str = DEFAULT_LOG_LEVEL):
    """Routes loguru output to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOGGER_FORMAT)


def _build_request(args: argparse.Namespace, service: MediaService) -> ConversionRequest:
    if args.job:
        with args.job.open("r", encoding="utf-8") as f:
            job = yaml.safe_load(f) or {}
        if not isinstance(job, dict):
            raise ValueError(f"Job file {args.job} must contain a mapping")
        return ConversionRequest.from_dict(job)

    format_name = DEFAULT_FORMAT if args.format is None else args.format
    end_ms = args.end
    if end_ms is None:
        media_info = asyncio.run(service.analyze(args.input))
        end_ms = int(round(media_info.duration_seconds * 1000))
        logger.info(f"No end time given, using the input duration ({media_info.duration_seconds}s)")

    return ConversionRequest(
        input_path=args.input,
        output_path=args.output or str(default_output_path(args.input, format_name)),
        start_ms=args.start,
        end_ms=end_ms,
        width=args.width,
        height=args.height,
        fps=args.fps,
        video_bitrate_kbps=args.vbitrate,
        audio_bitrate_kbps=args.abitrate,
        format=args.format,
        is_audio_only=args.audio_only,
        video_codec=args.vcodec,
        audio_codec=args.acodec,
    )


def _analyze(args: argparse.Namespace, service: MediaService) -> int:
    media_info = asyncio.run(service.analyze(args.path))
    report = {"media": media_info.to_dict()}
    if media_info.width and media_info.height:
        report["resolution_options"] = [
            {"label": o.label, "value": o.value, "width": o.width, "height": o.height}
            for o in build_resolution_options(media_info.width, media_info.height)
        ]
    if args.json:
        print(json.dumps(report, indent=2))
    else:
        print(yaml.safe_dump(report, sort_keys=False, allow_unicode=True), end="")
    return 0


def _convert(args: argparse.Namespace, service: MediaService) -> int:
    request = _build_request(args, service)
    if args.dry_run:
        print(format_command([Tools.ffmpeg_path(), *service.plan(request)]))
        return 0
    asyncio.run(service.convert(request))
    return 0


def _formats() -> int:
    report = {
        "video_formats": {
            o.value: {
                "label": o.label,
                "ext": o.ext,
                "video_codecs": list(VIDEO_CODECS_BY_FORMAT.get(o.value, ())),
                "audio_codecs": list(AUDIO_CODECS_BY_FORMAT.get(o.value, ())),
            }
            for o in VIDEO_FORMAT_OPTIONS
        },
        "audio_formats": {
            o.value: {
                "label": o.label,
                "ext": o.ext,
                "audio_codecs": list(AUDIO_CODECS_BY_FORMAT.get(o.value, ())),
            }
            for o in AUDIO_FORMAT_OPTIONS
        },
        "fps_presets": [p.amount for p in FPS_PRESETS if p.amount is not None],
        "video_bitrate_presets_kbps": [p.amount for p in VIDEO_BITRATE_PRESETS if p.amount is not None],
    }
    print(yaml.safe_dump(report, sort_keys=False), end="")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Runs the CLI and returns the process exit status.

    trimkit errors (rejected requests, failing tools, broken job files) are
    logged and turn into exit status 1.
    """
    args = get_args(argv)
    configure_logging(args.log_level)
    logger.debug(f"Parsed arguments: {args}")

    if args.command == "formats":
        return _formats()
    if args.command == "check":
        return 0 if all(Tools.verify_all().values()) else 1

    with MediaService() as service:
        try:
            if args.command == "analyze":
                return _analyze(args, service)
            return _convert(args, service)
        except (TrimkitException, ValueError, OSError) as e:
            logger.error(str(e))
            return 1
