"""
Configuration Package for trimkit.

This package centralizes the static configuration of the application so that
encoding rules and tool locations can be changed without touching the code
that uses them.

This package includes settings for:
- Common application settings like the logging format, file names used for
  error records and the user-overridable location of the FFmpeg executables.
- The container/codec compatibility table, the codec- and container-driven
  override rules, and the presets offered to users (`formats.py`).
"""
