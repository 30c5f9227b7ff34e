"""
This package contains the core domain models of trimkit.

The domain layer describes media and conversion jobs the way the rest of the
application sees them. It does not run external tools and does not log, so
everything in here can be tested with plain dictionaries.

Modules:
    exceptions.py: The exception hierarchy. Every error the application
                   reports derives from `TrimkitException`.
    media.py: `MediaInfo` and the ffprobe report parser.
    request.py: `ConversionRequest`, the immutable description of one
                trim/transcode job.
"""
