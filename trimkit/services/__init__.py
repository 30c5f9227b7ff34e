"""
Services Package for trimkit.

This package contains the "service layer" of the application:

- **EncodingPlanBuilder (`plan_builder.py`):**
  Validates a conversion request against the container/codec rules and
  produces the ordered ffmpeg argument list. Pure, no I/O.

- **MediaService (`media_service.py`):**
  The caller-facing API. Runs ffprobe to analyze files and ffmpeg to convert
  them, off the event loop, and reports tool failures.

- **Logging Service (`ErrorLog`):**
  Appends failed tool invocations to a plain text file, separate from the
  real-time console logging.
"""
