# Configuration loading and parsing for oag
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from oag.errors import ConfigurationError
from oag.models import ToolConfig
from oag.platforms import ALL_FORMATS
from oag.utils import expand_env_vars

# ABOUTME: Default config directory in user's home
CONFIG_DIR = Path.home() / ".oag"

# ABOUTME: Main config file location (JSON format)
CONFIG_FILE = CONFIG_DIR / "config.json"

# ABOUTME: Layouts used when the config file defines no tools
DEFAULT_TOOLS: dict[str, ToolConfig] = {
    "claude": ToolConfig(
        name="claude",
        paths={
            "agent": ".claude/agents/",
            "skill": ".claude/skills/",
            "mcp": ".mcp.json",
        },
        mcp_format="json_map",
    ),
    "codex": ToolConfig(
        name="codex",
        paths={
            "skill": ".codex/skills/",
            "mcp": ".codex/config.toml",
        },
        mcp_format="toml_map",
    ),
}


@dataclass
class OagConfig:
    """oag configuration loaded from config.json.

    ABOUTME: registry_path points at a local checkout of the asset registry
    ABOUTME: tools maps tool name -> destination layout
    """
    tools: dict[str, ToolConfig] = field(default_factory=lambda: dict(DEFAULT_TOOLS))
    registry_path: Path | None = None

    def get_tool(self, name: str) -> ToolConfig:
        """Return a tool's layout.

        Raises:
            ConfigurationError: If the tool is not configured
        """
        tool = self.tools.get(name)
        if tool is None or not tool.paths:
            raise ConfigurationError(f"Tool '{name}' is not configured.")
        return tool


def get_config_path() -> Path:
    """Return the path to the oag config file (may not exist yet)."""
    return CONFIG_FILE


def ensure_config_dir() -> Path:
    """Create ~/.oag/ if missing and return it."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR


def parse_tool_config(name: str, data: Any) -> ToolConfig:
    """Parse one entry of the "tools" section.

    Raises:
        ConfigurationError: If paths is missing or malformed
    """
    if not isinstance(data, dict):
        raise ConfigurationError(f"Tool '{name}' must be an object")

    paths = data.get("paths")
    if not isinstance(paths, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in paths.items()
    ):
        raise ConfigurationError(f"Tool '{name}' needs a 'paths' object of strings")

    mcp_format = data.get("mcpFormat")
    if mcp_format is not None and mcp_format not in ALL_FORMATS:
        raise ConfigurationError(
            f"Tool '{name}' has invalid mcpFormat '{mcp_format}'. "
            f"Must be one of: {', '.join(sorted(ALL_FORMATS))}."
        )

    return ToolConfig(name=name, paths=dict(paths), mcp_format=mcp_format)


def load_config(path: Path) -> OagConfig:
    """Load and parse oag config from JSON file.

    ABOUTME: Uses built-in json module for JSON parsing
    ABOUTME: Fail-fast on parse errors with clear error messages
    ABOUTME: Expands environment variables in registry.path

    Args:
        path: Path to config.json file

    Returns:
        Parsed OagConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigurationError: If JSON is invalid or sections are malformed
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config must be a JSON object: {path}")

    config = OagConfig()

    tools_data = data.get("tools")
    if tools_data is not None:
        if not isinstance(tools_data, dict):
            raise ConfigurationError("'tools' section must be an object")
        if tools_data:
            config.tools = {name: parse_tool_config(name, tool) for name, tool in tools_data.items()}

    registry = data.get("registry", {})
    if not isinstance(registry, dict):
        raise ConfigurationError("'registry' section must be an object")
    if registry.get("path"):
        config.registry_path = Path(expand_env_vars(str(registry["path"]))).expanduser()

    return config


def save_config(path: Path, config: OagConfig) -> None:
    """Save config to JSON file.

    ABOUTME: Creates parent directory if needed
    """
    tools: dict[str, Any] = {}
    for name, tool in config.tools.items():
        tool_data: dict[str, Any] = {"paths": dict(tool.paths)}
        if tool.mcp_format:
            tool_data["mcpFormat"] = tool.mcp_format
        tools[name] = tool_data

    config_data: dict[str, Any] = {"tools": tools}
    if config.registry_path is not None:
        config_data["registry"] = {"path": str(config.registry_path)}

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config_data, f, indent=2)
        f.write("\n")
