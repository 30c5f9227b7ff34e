"""
Common configuration settings used throughout the application.

This module contains globally shared configuration settings and constants:
the logging format, the names of the files written next to failed jobs, and
the location of the FFmpeg executables. The location can be overridden by the
user through an external YAML file, so no path has to be hardcoded.
"""
import os
from pathlib import Path

import yaml
from loguru import logger

# --- User-Defined Path Configuration ---
# This block loads user-specific paths from a 'config.user.yaml' file located
# at the project root, or from the file named by the TRIMKIT_CONFIG
# environment variable.

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = Path(os.environ.get("TRIMKIT_CONFIG", PROJECT_ROOT / "config.user.yaml"))

# The directory containing the ffmpeg and ffprobe executables. If not provided
# or None, the executables are expected on the system's PATH.
MODULE_PATH: Path | None = None

# Directory for plain text error records and executed command lines. If None,
# nothing is written to disk.
ERROR_LOG_DIR: Path | None = None


def load_user_config(config_path: Path) -> dict:
    """
    Reads the user configuration file and returns its content as a dictionary.

    Missing files and files that do not contain a mapping yield an empty
    dictionary. Parse errors are logged and also yield an empty dictionary,
    because a broken optional config file should not stop the application.

    Args:
        config_path: Path to the YAML file.

    Returns:
        The parsed configuration mapping.
    """
    if not config_path.is_file():
        logger.debug(f"User config '{config_path}' not found. Relying on system PATH for executables.")
        return {}
    try:
        with config_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{config_path}': {e}")
        return {}
    return user_config if isinstance(user_config, dict) else {}


_paths_config = load_user_config(USER_CONFIG_PATH).get("paths") or {}
if _paths_config.get("ffmpeg_dir"):
    MODULE_PATH = Path(_paths_config["ffmpeg_dir"])
if _paths_config.get("error_log_dir"):
    ERROR_LOG_DIR = Path(_paths_config["error_log_dir"])


# --- Logging Configuration ---

# The format string for the Loguru logger.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

DEFAULT_LOG_LEVEL = "INFO"


# --- Files written for failed jobs ---

# Plain text file receiving one record per failed ffprobe/ffmpeg invocation.
ERROR_LOG_FILE_NAME = "error.txt"

# Every executed command line is appended here, which makes failed jobs
# reproducible from a shell.
COMMAND_TEXT = "cmd.txt"


# --- Output naming ---

# Suffix appended to the input file stem when the user gives no output path.
TRIMMED_SUFFIX = "_trimmed"
