"""
Error taxonomy for the AI room preview workflow.

All three composition failures collapse to one user-facing message at the
session boundary; the distinct types exist for logging and tests.
"""
from typing import Optional

USER_FAILURE_MESSAGE = "Failed to process image. Try a different room template or upload your own photo."
UPLOAD_FAILURE_MESSAGE = "Could not read that photo. Please try another image."


class PreviewError(Exception):
    """Base class for preview workflow errors"""


class ImageLoadError(PreviewError):
    """A room or product image could not be fetched, decoded or re-encoded"""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Image failed to load ({reason}): {_describe_source(source)}")


class CompositionError(PreviewError):
    """The generative compose call failed; wraps the underlying cause"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class NoImageInResponse(CompositionError):
    """The generative service answered without any inline image part"""

    def __init__(self, text_parts: int = 0):
        super().__init__(f"No image in response ({text_parts} text part(s) returned)")
        self.text_parts = text_parts


class UploadReadError(PreviewError):
    """A user-supplied room photo could not be read into an embedded image"""


def _describe_source(source: str) -> str:
    # Data URIs can be megabytes long; keep log lines readable
    if source.startswith("data:"):
        return f"{source.split(',', 1)[0]},... ({len(source)} chars)"
    return source
