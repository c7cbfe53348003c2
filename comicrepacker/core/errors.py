"""Exceptions raised by comicrepacker. ``str(exc)`` is always the user-facing message."""

from typing import Any, Dict


class RepackerError(Exception):
    """Base exception for all comicrepacker errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class InputPathError(RepackerError):
    """Source file or output directory is missing or invalid."""
    pass


class ToolError(RepackerError):
    """The external archive tool could not be found or launched."""
    pass


class InspectionError(RepackerError):
    """The listing tool produced no usable archive information."""
    pass


class ExtractionError(RepackerError):
    """The external tool failed to extract an archive."""
    pass


class OutputError(RepackerError):
    """Writing the output CBZ failed."""
    pass
