"""Error taxonomy shared by the analysis pipeline and its callers.

Root-level failures (bad path) are raised before any per-file work starts.
Per-file parse failures are represented by ParseWarning, which the extractors
return or collect instead of letting it escape the run.
"""

from depviz.utils.exit_codes import ExitCodes


class DepvizError(Exception):
    """Base class for every error surfaced to a caller.

    Attributes:
        message: Human-readable description
        operation: Name of the operation that failed, when known
    """

    status_code = 500
    exit_code = ExitCodes.INTERNAL_ERROR

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.message = message
        self.operation = operation

    def to_dict(self) -> dict:
        payload = {"error": self.message, "type": type(self).__name__}
        if self.operation:
            payload["operation"] = self.operation
        return payload


class InputError(DepvizError):
    """Missing or invalid root path or file path."""

    status_code = 400
    exit_code = ExitCodes.INPUT_ERROR


class NotFoundError(DepvizError):
    """Root directory or requested file does not exist on disk."""

    status_code = 404
    exit_code = ExitCodes.NOT_FOUND


class InternalError(DepvizError):
    """Unexpected failure, tagged with the operation that triggered it."""

    def __init__(self, message: str, operation: str | None = None):
        if operation and not message.startswith(operation):
            message = f"{operation} failed: {message}"
        super().__init__(message, operation)


class ParseWarning(DepvizError):
    """A single file could not be parsed.

    Never aborts a run: the file contributes an empty dependency list and the
    warning is collected on the result.
    """

    status_code = 422

    def __init__(self, file_path: str, reason: str):
        super().__init__(f"Failed to parse {file_path}: {reason}", operation="parse")
        self.file_path = file_path
        self.reason = reason

    def to_dict(self) -> dict:
        return {"file": self.file_path, "reason": self.reason}


__all__ = [
    "DepvizError",
    "InputError",
    "NotFoundError",
    "InternalError",
    "ParseWarning",
]
