"""Centralized exit codes for the depviz CLI."""


class ExitCodes:
    """Standard exit codes for depviz CLI commands."""

    SUCCESS = 0

    INTERNAL_ERROR = 1
    INPUT_ERROR = 2
    NOT_FOUND = 3

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success",
            cls.INTERNAL_ERROR: "Internal failure while analyzing",
            cls.INPUT_ERROR: "Missing or invalid input path",
            cls.NOT_FOUND: "Directory or file not found",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")
