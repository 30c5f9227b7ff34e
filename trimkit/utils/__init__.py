"""
Utilities Package for trimkit.

This package contains helper modules that support the services but are not
part of the encoding rules themselves.

Modules:
    - ffmpeg_utils.py: Runs external commands (ffmpeg) with logging and
      captured output.
    - format_utils.py: Converts times, frame rates, sizes and file names to
      and from the strings shown to users or passed to ffmpeg.
    - tools.py: Locates and verifies the ffmpeg and ffprobe executables.
"""
