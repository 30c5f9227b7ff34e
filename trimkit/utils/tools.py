"""
This module provides the Tools class, which locates and verifies the external
executables trimkit depends on: ffmpeg and ffprobe.
"""
import subprocess
import sys
from typing import Dict

from loguru import logger

# Import paths from the user configuration file.
from ..config.common import MODULE_PATH

FFMPEG = "ffmpeg"
FFPROBE = "ffprobe"


class Tools:
    """
    Resolves the ffmpeg/ffprobe executables.

    The directory from the user's `config.user.yaml` (`paths.ffmpeg_dir`) is
    preferred. If it is not configured, or the executable is not found there,
    the bare name is returned and the system's PATH decides.
    """

    @staticmethod
    def executable_path(name: str) -> str:
        """
        Determines the command or absolute path to use for an executable.

        Args:
            name: "ffmpeg" or "ffprobe".

        Returns:
            The absolute path inside the configured directory, or `name`
            itself to rely on the system PATH.
        """
        exe_name = f"{name}.exe" if sys.platform == "win32" else name

        if MODULE_PATH and MODULE_PATH.is_dir():
            configured_path = MODULE_PATH / exe_name
            if configured_path.is_file():
                logger.debug(f"Using {name} from configured path: '{configured_path}'")
                return str(configured_path)
            logger.warning(
                f"`ffmpeg_dir` is configured, but '{exe_name}' was not found there. Falling back to system PATH."
            )

        return name

    @staticmethod
    def ffmpeg_path() -> str:
        return Tools.executable_path(FFMPEG)

    @staticmethod
    def ffprobe_path() -> str:
        return Tools.executable_path(FFPROBE)

    @staticmethod
    def verify(name: str) -> bool:
        """
        Checks that an executable can be started by running it with `-version`.

        The first line of the version output is logged on success; failures
        are logged with the reason.

        Returns:
            True if the executable ran and exited with status 0.
        """
        cmd = Tools.executable_path(name)
        try:
            result = subprocess.run(
                [cmd, "-version"],
                check=True,
                capture_output=True,
                text=True,
                encoding="utf-8",
            )
        except subprocess.CalledProcessError as e:
            logger.error(f"{name} version command failed (return code {e.returncode}):\n{e.stderr}")
            return False
        except FileNotFoundError:
            logger.error(
                f"{name} command not found. Please ensure FFmpeg is installed and accessible.\n"
                "You can either add it to your system's PATH or specify its location in the 'config.user.yaml' file."
            )
            return False
        except OSError as e:
            logger.error(f"Could not start {name}: {e}")
            return False

        version_lines = result.stdout.splitlines()
        logger.info(f"{name} version check successful: {version_lines[0] if version_lines else '(no output)'}")
        return True

    @staticmethod
    def verify_all() -> Dict[str, bool]:
        """Runs `verify` for ffmpeg and ffprobe and returns the result per tool."""
        return {name: Tools.verify(name) for name in (FFMPEG, FFPROBE)}
