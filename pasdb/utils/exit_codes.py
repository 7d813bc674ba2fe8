"""Centralized exit codes for the pasdb CLI."""


class ExitCodes:
    """Standard exit codes for pasdb CLI commands."""

    SUCCESS = 0

    NO_OPERATIONS = 1

    INPUT_UNREADABLE = 3

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success",
            cls.NO_OPERATIONS: "No database operations found (--fail-empty)",
            cls.INPUT_UNREADABLE: "One or more units could not be read",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")
