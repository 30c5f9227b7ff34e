"""
This module provides a robust function for running external command-line
processes, used to launch ffmpeg with a planned argument list.
"""

import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..domain.exceptions import ExternalProcessException
from ..services.logging_service import ErrorLog


def format_command(cmd_list: List[str]) -> str:
    """
    Joins an argument list into a single string that can be pasted into a shell.

    Windows quoting rules are used on Windows, POSIX rules elsewhere.
    """
    if os.name == "nt":
        return subprocess.list2cmdline(cmd_list)
    return shlex.join(cmd_list)


def run_cmd(
    cmd_list: List[str],
    show_cmd: bool = False,
    cmd_log_file_path: Optional[Path] = None,
    error_log_dir: Optional[Path] = None,
) -> subprocess.CompletedProcess:
    """
    Executes an external command and captures its output.

    This is a wrapper around `subprocess.run` that adds logging and turns a
    failure to start the process into an `ExternalProcessException`. A
    non-zero exit status is NOT an exception here; callers inspect
    `returncode` and decide.

    Args:
        cmd_list: The command to execute, executable first. The list is passed
                  to the OS as is, never through a shell.
        show_cmd: If True, the command is logged at the DEBUG level before
                  execution.
        cmd_log_file_path: If provided, the command string is appended to
                           this file.
        error_log_dir: If provided, a failure to start the process is also
                       recorded in this directory's error log.

    Returns:
        The `subprocess.CompletedProcess`, with stdout and stderr as text.

    Raises:
        ValueError: If the command list is empty.
        ExternalProcessException: If the executable cannot be started.
    """
    if not cmd_list:
        raise ValueError("run_cmd received an empty command list.")

    display_cmd_str = format_command(cmd_list)
    tool = Path(cmd_list[0]).stem

    if show_cmd:
        logger.debug(f"Executing command: {display_cmd_str}")

    if cmd_log_file_path:
        try:
            cmd_log_file_path.parent.mkdir(parents=True, exist_ok=True)
            with cmd_log_file_path.open("a", encoding="utf-8") as cmd_f:
                cmd_f.write(display_cmd_str + "\n")
        except OSError as e:
            logger.error(f"Failed to write command to log file {cmd_log_file_path}: {e}")

    try:
        result = subprocess.run(
            cmd_list,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            shell=False,
        )
    except OSError as e:
        # FileNotFoundError lands here when the executable is not installed.
        logger.error(
            f"Command could not be started ('{cmd_list[0]}'): {e}. "
            "Ensure it's in your system's PATH or configured correctly."
        )
        if error_log_dir:
            ErrorLog(error_log_dir).write(
                f"Command: {display_cmd_str}",
                f"Error: {type(e).__name__} - {e}",
            )
        raise ExternalProcessException(tool, str(e), reason="could not be started") from e

    if result.stderr and result.returncode != 0:
        logger.debug(f"Command stderr (error, rc={result.returncode}): {result.stderr}")
    elif result.stderr:
        logger.trace(f"Command stderr (non-error, rc={result.returncode}): {result.stderr}")

    return result
