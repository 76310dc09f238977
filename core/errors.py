# /core/errors.py

class ArgumentError(ValueError):
    """Raised when a caller supplies an invalid argument. Answered with HTTP 400."""


class SchemaParseError(ValueError):
    """Raised when a schema record returned by the database has an unexpected shape."""


def format_error_message(condition_type: str, invalid_property: str, reason: str) -> str:
    return f"Invalid {condition_type}: property '{invalid_property}' {reason}."


class SearchUnavailableError(RuntimeError):
    """Raised when the search index could not be built. Answered with HTTP 503."""
