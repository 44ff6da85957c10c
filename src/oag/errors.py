# Error types raised by oag
# ABOUTME: Most errors are also ValueErrors so callers catching ValueError keep working
# ABOUTME: SourceNotFoundError stays catchable as FileNotFoundError


class OagError(Exception):
    """Base class for all oag errors."""


class ConfigurationError(OagError, ValueError):
    """A tool, asset, preset or mode is not configured the way it is used.

    ABOUTME: Missing path mapping, unknown asset id, invalid install mode
    """


class PathEscapeError(ConfigurationError):
    """An asset file points outside its own asset directory."""


class ConflictError(OagError):
    """Something already occupies a destination in an incompatible shape.

    ABOUTME: Never resolved automatically (directories are never deleted)
    """


class UnsupportedServerTypeError(ConflictError, ValueError):
    """An MCP server type cannot be expressed in the target config format."""

    def __init__(self, server_type: str, target_format: str, server_name: str | None = None) -> None:
        self.server_type = server_type
        self.target_format = target_format
        self.server_name = server_name
        where = f" (server '{server_name}')" if server_name else ""
        super().__init__(
            f"Unsupported MCP server type '{server_type}' for format '{target_format}'{where}"
        )


class IntegrityError(OagError, ValueError):
    """A native config document is malformed."""


class SourceNotFoundError(OagError, FileNotFoundError):
    """An asset source file is missing on disk."""
