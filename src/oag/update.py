# In-place update of already installed assets
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from oag.config import OagConfig
from oag.installers import install_asset, normalize_mode, remove_targets, uninstall_file_item
from oag.mcp import install_mcp, uninstall_mcp
from oag.models import Asset, InstalledItem, InstallMode, ToolState, type_from_id
from oag.reconcile import is_legacy_id
from oag.state import load_state, save_state

logger = logging.getLogger(__name__)


@dataclass
class UpdateSummary:
    """Report from update operation.

    ABOUTME: Skipped items keep their old record untouched
    """
    total_items: int = 0
    updated: int = 0
    skipped_missing: list[tuple[str, str]] = field(default_factory=list)
    skipped_no_mapping: list[tuple[str, str, str]] = field(default_factory=list)
    skipped_no_tool_config: list[str] = field(default_factory=list)
    skipped_legacy: list[tuple[str, str]] = field(default_factory=list)


def _resolve_mode(item: InstalledItem, forced_mode: InstallMode | None) -> InstallMode:
    if forced_mode:
        return forced_mode
    return normalize_mode(item.mode)


def update_installed_assets(
    project_root: Path,
    config: OagConfig,
    assets: Iterable[Asset],
    commit: str,
    tool: str | None = None,
    mode: str | None = None,
) -> UpdateSummary:
    """Reinstall every recorded asset from the current registry contents.

    ABOUTME: Each item is uninstalled then installed again in place
    ABOUTME: Keeps each item's recorded mode unless mode forces one
    ABOUTME: State is saved only if at least one item was updated

    Args:
        project_root: Root of the target project
        config: Loaded oag configuration (tool layouts)
        assets: Assets known to the registry
        commit: Provenance marker for refreshed items
        tool: Restrict the update to one tool
        mode: Force "copy" or "symlink" for every refreshed item

    Returns:
        UpdateSummary
    """
    project_root = Path(project_root)
    state = load_state(project_root)
    assets_by_id = {asset.id: asset for asset in assets}
    forced_mode = normalize_mode(mode) if mode else None
    target_tools = [tool] if tool else list(state.tools)

    summary = UpdateSummary()
    state_changed = False

    for tool_name in target_tools:
        entries = list(state.tool(tool_name).items.items())
        if not entries:
            continue
        summary.total_items += len(entries)

        tool_config = config.tools.get(tool_name)
        if tool_config is None or not tool_config.paths:
            summary.skipped_no_tool_config.append(tool_name)
            continue

        next_items: dict[str, InstalledItem] = {}
        tool_changed = False

        for asset_id, item in entries:
            if is_legacy_id(asset_id):
                summary.skipped_legacy.append((tool_name, asset_id))
                next_items[asset_id] = item
                continue

            asset = assets_by_id.get(asset_id)
            if asset is None:
                summary.skipped_missing.append((tool_name, asset_id))
                next_items[asset_id] = item
                continue

            asset_type = asset.type or type_from_id(asset_id)
            if not tool_config.paths.get(asset_type):
                summary.skipped_no_mapping.append((tool_name, asset_id, asset_type))
                next_items[asset_id] = item
                continue

            desired_mode = _resolve_mode(item, forced_mode)

            if asset_type == "mcp":
                if item.mcp is not None:
                    uninstall_mcp(item.mcp)
                else:
                    remove_targets(item.targets)
                mcp_result = install_mcp(asset, project_root, tool_config)
                next_items[asset_id] = InstalledItem(
                    targets=mcp_result.targets, mode=desired_mode, commit=commit, mcp=mcp_result.state
                )
            else:
                uninstall_file_item(item, asset, project_root, tool_config.paths)
                result = install_asset(asset, project_root, tool_config.paths, desired_mode)
                next_items[asset_id] = InstalledItem(
                    targets=result.targets, mode=desired_mode, commit=commit, base_dir=result.base_dir
                )

            logger.info(f"Updated {asset_id} for {tool_name}")
            summary.updated += 1
            tool_changed = True

        if tool_changed:
            state.tools[tool_name] = ToolState(items=next_items)
            state_changed = True

    if state_changed:
        save_state(project_root, state)

    return summary
