"""
This module provides the file-based error record for failed jobs.

Console logging goes through loguru. In addition, when an error log directory
is configured, every failed ffprobe/ffmpeg invocation is appended to a plain
text file there, so the full diagnostic output of overnight batches survives
after the console is gone.
"""

from pathlib import Path

from loguru import logger

from ..config.common import ERROR_LOG_FILE_NAME


class Log:
    """
    A base class for file logs.

    Handles the basic setup of the log directory.
    """

    # A decorative separator line used in text-based logs for better readability.
    linesep_marker: str = "=" * 50

    def __init__(self, log_base_path: Path):
        """
        Initializes the Log instance and creates the log directory.

        Args:
            log_base_path: The base path for logging. If it's an existing
                           file, its parent is used as the log directory.
        """
        self.log_file_path: Path
        if log_base_path.is_file():
            self.log_dir: Path = log_base_path.parent.resolve()
        else:
            self.log_dir = log_base_path.resolve()
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def write(self, *log_content: str):
        raise NotImplementedError("Subclasses must implement the write() method.")


class ErrorLog(Log):
    """
    Appends human-readable error records to a plain text file.

    Each record is the given message parts on separate lines followed by a
    separator line.
    """

    def __init__(self, error_log_dir: Path, filename: str = ERROR_LOG_FILE_NAME):
        super().__init__(error_log_dir)
        self.log_file_path = self.log_dir / filename

    def write(self, *error_messages: str):
        """
        Writes one error record.

        If the file cannot be written, the messages are sent to the console
        logger instead so they are not lost.

        Args:
            *error_messages: The parts of the record, one per line.
        """
        if not error_messages:
            return

        content_to_write = "\n".join(error_messages) + "\n" + self.linesep_marker + "\n"

        try:
            with self.log_file_path.open("a", encoding="utf-8") as f:
                f.write(content_to_write)
        except OSError as e:
            logger.error(f"Failed to write to error log {self.log_file_path}: {e}")
            logger.error("Original error messages attempted to log:")
            for msg in error_messages:
                logger.error(f"  - {msg}")
