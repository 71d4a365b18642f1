"""
Exception classes for the collection conversion engine.

Every error raised on purpose by the parsers, converters and bulk
operations derives from CollectionError so callers can surface a message
and let the user retry with different input.
"""


class CollectionError(Exception):
    """Base exception for collection errors."""

    def __init__(self, detail: str, error_code: str | None = None):
        self.detail = detail
        self.error_code = error_code
        super().__init__(detail)


class FormatDetectionError(CollectionError):
    """Raised when an input cannot be classified into a supported source format."""

    def __init__(self, detail: str = "Unrecognized collection format"):
        super().__init__(detail=detail, error_code="FORMAT_DETECTION")


class MalformedCollectionError(CollectionError):
    """Raised when the format is recognized but required vendor fields are missing."""

    def __init__(self, detail: str):
        super().__init__(detail=detail, error_code="MALFORMED_COLLECTION")


class UnsupportedTargetFormatError(CollectionError, ValueError):
    """Raised when convert() is called with a target outside the supported set."""

    def __init__(self, target: object):
        super().__init__(
            detail=f"Unsupported target format: {target!r}",
            error_code="UNSUPPORTED_TARGET",
        )
        self.target = target
