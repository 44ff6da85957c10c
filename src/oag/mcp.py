# MCP asset install/uninstall against a tool's native config
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from oag.errors import ConfigurationError, IntegrityError, SourceNotFoundError
from oag.models import Asset, McpState, ToolConfig
from oag.paths import strip_trailing_separators
from oag.platforms import get_adapter, merge_servers, resolve_mcp_format, unmerge_servers
from oag.platforms.base import read_json_file
from oag.platforms.json_map import normalize_servers_shape

logger = logging.getLogger(__name__)

# ABOUTME: Preferred source file names inside an MCP asset, in order
PREFERRED_SOURCE_NAMES = ("mcp.json", ".mcp.json")
MANIFEST_NAME = "asset.json"


@dataclass
class McpInstallResult:
    targets: list[str]
    state: McpState


def resolve_tool_config_path(project_root: Path, tool_config: ToolConfig) -> Path:
    """Absolute path of the tool's native MCP config file.

    Raises:
        ConfigurationError: If the tool has no "mcp" path mapping
    """
    mapping = tool_config.paths.get("mcp")
    if not mapping or not isinstance(mapping, str):
        raise ConfigurationError("Missing path mapping for type 'mcp'")
    return Path(project_root) / strip_trailing_separators(mapping)


def pick_mcp_source_file(asset: Asset) -> Path:
    """Choose the JSON file holding an MCP asset's server descriptors.

    ABOUTME: Ignores asset.json; prefers mcp.json, then .mcp.json
    ABOUTME: Otherwise exactly one JSON candidate is required
    """
    candidates = [
        f.source for f in asset.files
        if f.source.endswith(".json") and Path(f.source).name != MANIFEST_NAME
    ]

    for preferred in PREFERRED_SOURCE_NAMES:
        for source in candidates:
            if Path(source).name == preferred:
                return asset.dir / source

    if len(candidates) == 1:
        return asset.dir / candidates[0]

    if not candidates:
        raise ConfigurationError(
            f"MCP asset '{asset.id}' has no JSON config file (expected e.g. mcp.json)."
        )
    raise ConfigurationError(
        f"MCP asset '{asset.id}' has multiple JSON files; include exactly one (recommended: mcp.json)."
    )


def load_asset_mcp_servers(asset: Asset) -> dict[str, Any]:
    """Read the tool-neutral server map declared by an MCP asset."""
    file_path = pick_mcp_source_file(asset)
    if not file_path.exists():
        raise SourceNotFoundError(f"Source file not found: {file_path}")

    parsed = read_json_file(file_path)
    if not parsed:
        raise IntegrityError(f"Empty MCP config: {file_path}")

    _, servers = normalize_servers_shape(parsed, file_path)
    return servers


def install_mcp(asset: Asset, project_root: Path, tool_config: ToolConfig) -> McpInstallResult:
    """Merge an MCP asset's servers into the tool's native config.

    ABOUTME: Every server is translated before anything is written, so an
    ABOUTME: unsupported server type leaves the native file untouched
    ABOUTME: Returns the ledger needed to undo the merge exactly

    Args:
        asset: MCP asset to install
        project_root: Root of the target project
        tool_config: Destination tool configuration

    Returns:
        McpInstallResult with the native config path and the McpState ledger

    Raises:
        ConfigurationError: No mcp mapping, or unusable asset files
        UnsupportedServerTypeError: A server type the target format can't express
        IntegrityError: Malformed native config or server descriptor
    """
    config_path = resolve_tool_config_path(project_root, tool_config)
    adapter = get_adapter(resolve_mcp_format(tool_config), config_path)
    servers = load_asset_mcp_servers(asset)

    translated = {name: adapter.translate(name, server) for name, server in servers.items()}

    file_existed = adapter.exists()
    root, native_servers = adapter.load()
    changes = merge_servers(native_servers, translated)
    adapter.save(root, native_servers)

    for name, change in changes.items():
        logger.info(f"MCP server '{name}' {change.action} in {config_path}")

    state = McpState(
        format=adapter.format,
        config_path=str(config_path),
        servers=changes,
        created_file=not file_existed,
        created_table=adapter.servers_table_created,
    )
    return McpInstallResult(targets=[str(config_path)], state=state)


def uninstall_mcp(mcp_state: McpState | None) -> bool:
    """Undo a recorded merge.

    ABOUTME: Missing native file or empty ledger -> nothing to do
    ABOUTME: Other servers sharing the file are left as they are
    ABOUTME: A server table or file the install created is removed once empty

    Returns:
        True if the native config was rewritten or removed
    """
    if mcp_state is None or not mcp_state.config_path or not mcp_state.format:
        return False

    adapter = get_adapter(mcp_state.format, Path(mcp_state.config_path))
    if not adapter.exists():
        logger.debug(f"MCP config already gone: {mcp_state.config_path}")
        return False

    root, native_servers = adapter.load()
    unmerge_servers(native_servers, mcp_state.servers)

    for name in mcp_state.servers:
        logger.info(f"MCP server '{name}' reverted in {mcp_state.config_path}")

    if native_servers or not mcp_state.created_table:
        adapter.save(root, native_servers)
        return True

    # load() always places the server table in root, so one key means nothing else is left
    if mcp_state.created_file and len(root) == 1:
        adapter.config_path.unlink()
        logger.info(f"Removed {mcp_state.config_path} (created by install, now empty)")
        return True

    adapter.save(root, None)
    return True
