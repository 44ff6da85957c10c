# Native MCP config format registry
from pathlib import Path

from oag.errors import ConfigurationError
from oag.models import ToolConfig
from oag.platforms.base import NativeConfigAdapter, merge_servers, unmerge_servers
from oag.platforms.json_map import JsonMapAdapter
from oag.platforms.toml_map import TomlMapAdapter, translate_server

# Registry of all available native config formats
ALL_FORMATS: dict[str, type[JsonMapAdapter] | type[TomlMapAdapter]] = {
    JsonMapAdapter.format: JsonMapAdapter,
    TomlMapAdapter.format: TomlMapAdapter,
}

# ABOUTME: Format names written by older state files
FORMAT_ALIASES = {
    "claude_json": JsonMapAdapter.format,
    "codex_toml": TomlMapAdapter.format,
}

__all__ = [
    "NativeConfigAdapter",
    "JsonMapAdapter",
    "TomlMapAdapter",
    "ALL_FORMATS",
    "get_adapter",
    "merge_servers",
    "resolve_mcp_format",
    "translate_server",
    "unmerge_servers",
]


def resolve_mcp_format(tool_config: ToolConfig) -> str:
    """Pick the native MCP format of a tool.

    ABOUTME: Explicit mcp_format wins; else .toml mapping -> toml_map, else json_map
    """
    if tool_config.mcp_format:
        return tool_config.mcp_format
    mapping = tool_config.paths.get("mcp") or ""
    return TomlMapAdapter.format if mapping.lower().endswith(".toml") else JsonMapAdapter.format


def get_adapter(format_name: str, config_path: Path) -> NativeConfigAdapter:
    """Instantiate the adapter for a recorded or resolved format.

    Raises:
        ConfigurationError: If the format is unknown
    """
    adapter_cls = ALL_FORMATS.get(FORMAT_ALIASES.get(format_name, format_name))
    if adapter_cls is None:
        raise ConfigurationError(f"Unsupported MCP config format '{format_name}'.")
    return adapter_cls(config_path)
