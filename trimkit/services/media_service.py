"""
This module defines MediaService, the caller-facing API of trimkit.

It connects the pure parts of the application (the probe report parser and
the encoding plan builder) to the external ffprobe and ffmpeg executables.
Both tools can run for a long time, so the public `analyze` and `convert`
operations are coroutines: the blocking call is handed to a thread pool and
the event loop stays free while it runs.

Failures of the external tools are raised as `ExternalProcessException` with
the tool's standard error text preserved verbatim.
"""

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import ffmpeg
from loguru import logger

from ..config.common import COMMAND_TEXT, ERROR_LOG_DIR
from ..domain.exceptions import ExternalProcessException
from ..domain.media import MediaInfo, parse_media_info
from ..domain.request import ConversionRequest
from ..utils.ffmpeg_utils import format_command, run_cmd
from ..utils.format_utils import format_hms, format_timedelta
from ..utils.tools import Tools
from .logging_service import ErrorLog
from .plan_builder import EncodingPlanBuilder


class MediaService:
    """
    Analyzes media files and runs conversions.

    The service owns a thread pool used to run the external tools. Close it
    with `close()`, or use the service as a context manager.

    Attributes:
        builder (EncodingPlanBuilder): Turns requests into ffmpeg arguments.
        error_log_dir (Path | None): Where failed invocations and executed
            commands are recorded. Nothing is written when None.
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        error_log_dir: Optional[Path] = None,
        builder: Optional[EncodingPlanBuilder] = None,
    ):
        """
        Args:
            max_workers: Size of the thread pool; the `ThreadPoolExecutor`
                         default when None.
            error_log_dir: Directory for error records. Falls back to
                           `paths.error_log_dir` from the user config.
            builder: The plan builder to use. A new one when None.
        """
        self.builder = builder or EncodingPlanBuilder()
        self.error_log_dir = error_log_dir if error_log_dir is not None else ERROR_LOG_DIR
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="trimkit")

    def __enter__(self) -> "MediaService":
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        """Shuts the thread pool down, waiting for running tool invocations."""
        self._executor.shutdown(wait=True)

    async def _run_blocking(self, func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(func, *args))

    def _record_failure(self, *messages: str):
        if self.error_log_dir:
            ErrorLog(self.error_log_dir).write(*messages)

    # --- Probing ---

    def probe(self, path: str) -> Dict[str, Any]:
        """
        Runs ffprobe on a file and returns its decoded JSON report.

        Blocks until ffprobe exits.

        Raises:
            ExternalProcessException: If ffprobe cannot be started, exits with
                an error, or prints something that is not a JSON object.
        """
        ffprobe_cmd = Tools.ffprobe_path()
        logger.debug(f"Probing {path} with {ffprobe_cmd}")
        try:
            report = ffmpeg.probe(str(path), cmd=ffprobe_cmd, v="error")
        except ffmpeg.Error as e:
            stderr = e.stderr.decode("utf-8", errors="replace") if e.stderr else ""
            logger.error(f"ffprobe failed for {path}: {stderr}")
            self._record_failure(f"ffprobe failed for: {path}", stderr)
            raise ExternalProcessException("ffprobe", stderr, reason="error") from e
        except OSError as e:
            logger.error(f"Failed to run ffprobe for {path}: {e}")
            self._record_failure(f"ffprobe could not be started for: {path}", str(e))
            raise ExternalProcessException("ffprobe", str(e), reason="could not be started") from e
        except ValueError as e:
            # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors.
            logger.error(f"Failed to parse ffprobe JSON for {path}: {e}")
            self._record_failure(f"ffprobe returned malformed JSON for: {path}", str(e))
            raise ExternalProcessException("ffprobe", str(e), reason="returned malformed JSON") from e

        if not isinstance(report, dict):
            message = f"expected a JSON object, got {type(report).__name__}"
            self._record_failure(f"ffprobe returned malformed JSON for: {path}", message)
            raise ExternalProcessException("ffprobe", message, reason="returned malformed JSON")
        return report

    def analyze_sync(self, path: str) -> MediaInfo:
        """Blocking version of `analyze`."""
        media_info = parse_media_info(self.probe(path))
        logger.debug(f"Media info for {path}: {media_info}")
        return media_info

    async def analyze(self, path: str) -> MediaInfo:
        """
        Probes a media file and returns its normalized description.

        Raises:
            ExternalProcessException: If ffprobe fails.
            ProbeException: If the ffprobe report lacks mandatory data.
        """
        return await self._run_blocking(self.analyze_sync, path)

    # --- Conversion ---

    def plan(self, request: ConversionRequest) -> List[str]:
        """
        Returns the ffmpeg arguments for a request without running anything.

        Raises:
            PlanException: If the request cannot be encoded.
        """
        return self.builder.build(request)

    def convert_sync(self, request: ConversionRequest) -> List[str]:
        """Blocking version of `convert`."""
        args = self.plan(request)
        cmd_list = [Tools.ffmpeg_path(), *args]

        logger.info(
            f"Converting {request.input_path} -> {request.output_path} "
            f"({format_hms(request.start_ms)} to {format_hms(request.end_ms)})"
        )
        started = datetime.now()
        result = run_cmd(
            cmd_list,
            show_cmd=True,
            cmd_log_file_path=self.error_log_dir / COMMAND_TEXT if self.error_log_dir else None,
            error_log_dir=self.error_log_dir,
        )

        if result.returncode != 0:
            logger.error(f"ffmpeg failed for {request.input_path} (rc={result.returncode})")
            self._record_failure(
                f"ffmpeg failed for: {request.input_path}",
                f"Command: {format_command(cmd_list)}",
                f"Return code: {result.returncode}",
                result.stderr or "",
            )
            raise ExternalProcessException("ffmpeg", result.stderr or "", result.returncode, reason="failed")

        logger.success(
            f"Finished {request.output_path} in {format_timedelta(datetime.now() - started)}"
        )
        return args

    async def convert(self, request: ConversionRequest) -> List[str]:
        """
        Plans and runs one conversion.

        The request is validated before ffmpeg is started, so a rejected codec
        or an empty range never spawns a process.

        Returns:
            The ffmpeg arguments that were executed.

        Raises:
            PlanException: If the request cannot be encoded.
            ExternalProcessException: If ffmpeg cannot be started or fails.
        """
        self.plan(request)
        return await self._run_blocking(self.convert_sync, request)
