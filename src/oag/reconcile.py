# Reconciliation engine: move a tool's installed assets to a desired set
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from oag.errors import ConfigurationError
from oag.installers import install_asset, normalize_mode, remove_targets, uninstall_file_item
from oag.mcp import install_mcp, uninstall_mcp
from oag.models import (
    LEGACY_TYPES,
    Asset,
    InstalledItem,
    ReconcileReport,
    ToolConfig,
    ToolState,
    type_from_id,
)
from oag.state import load_state, save_state

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Operation:
    """One step of a reconciliation run.

    ABOUTME: uninstall steps carry the recorded item they undo
    """
    kind: Literal["uninstall", "install"]
    asset_id: str
    item: InstalledItem | None = None


@dataclass
class ReconcilePlan:
    """Everything a run will do, computed before touching the filesystem.

    ABOUTME: operations = uninstall steps (reverse recorded order) then
    ABOUTME: install steps (sorted desired ids)
    """
    tool: str
    managed_enabled: set[str]
    desired: set[str]
    legacy: dict[str, InstalledItem] = field(default_factory=dict)
    operations: list[Operation] = field(default_factory=list)

    @property
    def to_install(self) -> list[str]:
        return sorted(self.desired - self.managed_enabled)

    @property
    def to_remove(self) -> list[str]:
        return sorted(self.managed_enabled - self.desired)

    @property
    def is_noop(self) -> bool:
        return not self.to_install and not self.to_remove


def is_legacy_id(asset_id: str) -> bool:
    return type_from_id(asset_id) in LEGACY_TYPES


def plan_reconcile(tool: str, tool_state: ToolState, desired_ids: Iterable[str]) -> ReconcilePlan:
    """Diff recorded state against the desired ids (pure, no I/O).

    ABOUTME: Legacy-type records are carried through, never uninstalled
    ABOUTME: Once anything changes, every managed record is uninstalled and
    ABOUTME: every desired id reinstalled so the result depends only on desired

    Args:
        tool: Tool name
        tool_state: Recorded state of the tool
        desired_ids: Ids the caller wants enabled

    Returns:
        ReconcilePlan (operations empty when the run is a no-op)
    """
    recorded = list(tool_state.items.items())
    legacy = {aid: item for aid, item in recorded if is_legacy_id(aid)}
    managed_enabled = {aid for aid, _ in recorded if aid not in legacy}
    desired = {aid for aid in desired_ids if not is_legacy_id(aid)}

    plan = ReconcilePlan(tool=tool, managed_enabled=managed_enabled, desired=desired, legacy=legacy)
    if plan.is_noop:
        return plan

    # Reverse order so nested namespaces are emptied before their parents are pruned
    for aid, item in reversed(recorded):
        if aid in legacy:
            continue
        plan.operations.append(Operation(kind="uninstall", asset_id=aid, item=item))

    for aid in sorted(desired):
        plan.operations.append(Operation(kind="install", asset_id=aid))

    return plan


def _uninstall(
    asset_id: str,
    item: InstalledItem,
    asset: Asset | None,
    project_root: Path,
    tool_config: ToolConfig,
) -> None:
    if type_from_id(asset_id) == "mcp":
        if item.mcp is not None:
            uninstall_mcp(item.mcp)
        else:
            # Records from before MCP ledgers existed only know their targets
            remove_targets(item.targets)
    else:
        uninstall_file_item(item, asset, project_root, tool_config.paths)
    logger.info(f"Uninstalled {asset_id} from {tool_config.name}")


def _install(
    asset: Asset,
    project_root: Path,
    tool_config: ToolConfig,
    mode: str,
    commit: str,
) -> InstalledItem:
    if asset.type == "mcp":
        mcp_result = install_mcp(asset, project_root, tool_config)
        item = InstalledItem(targets=mcp_result.targets, mode=mode, commit=commit, mcp=mcp_result.state)
    else:
        result = install_asset(asset, project_root, tool_config.paths, normalize_mode(mode))
        item = InstalledItem(targets=result.targets, mode=mode, commit=commit, base_dir=result.base_dir)
    logger.info(f"Installed {asset.id} for {tool_config.name} ({mode})")
    return item


def _warn_shared_servers(asset_id: str, item: InstalledItem, owners: dict[str, str]) -> None:
    if item.mcp is None:
        return
    for name in item.mcp.servers:
        if name in owners:
            logger.warning(
                f"MCP server '{name}' from {asset_id} overwrites the one installed by "
                f"{owners[name]}; uninstalling them out of order restores the wrong config"
            )
        owners[name] = asset_id


def apply_plan(
    plan: ReconcilePlan,
    project_root: Path,
    tool_config: ToolConfig,
    assets_by_id: dict[str, Asset],
    mode: str,
    commit: str,
) -> tuple[ToolState, ReconcileReport]:
    """Execute a plan's operations in order.

    ABOUTME: Any failure propagates immediately; effects of earlier
    ABOUTME: operations stay on disk (no rollback) and nothing is persisted here
    ABOUTME: A missing path mapping is the only per-asset failure turned into a skip

    Returns:
        (next tool state, report)
    """
    report = ReconcileReport(tool=plan.tool, legacy_preserved=list(plan.legacy))
    next_items: dict[str, InstalledItem] = dict(plan.legacy)
    server_owners: dict[str, str] = {}

    for op in plan.operations:
        asset = assets_by_id.get(op.asset_id)

        if op.kind == "uninstall":
            if op.item is not None:
                _uninstall(op.asset_id, op.item, asset, project_root, tool_config)
            continue

        if asset is None:
            raise ConfigurationError(f"Asset '{op.asset_id}' not found.")

        if not tool_config.paths.get(asset.type):
            reason = f"No path mapping for type '{asset.type}'"
            logger.warning(f"Skipping {asset.id}: {reason}")
            report.add_skipped(asset.id, reason)
            continue

        item = _install(asset, project_root, tool_config, mode, commit)
        _warn_shared_servers(asset.id, item, server_owners)
        next_items[asset.id] = item

    enabled_after = {aid for aid in next_items if aid not in plan.legacy}
    report.installed = sorted(enabled_after - plan.managed_enabled)
    report.removed = sorted(plan.managed_enabled - enabled_after)
    report.changed = True
    return ToolState(items=next_items), report


def reconcile(
    project_root: Path,
    tool_config: ToolConfig,
    assets: Iterable[Asset],
    desired_ids: Iterable[str],
    mode: str | None = "copy",
    commit: str = "unknown",
) -> ReconcileReport:
    """Reconcile one tool of a project to the desired asset ids.

    ABOUTME: Shared entry point of the apply and preset commands
    ABOUTME: No-op runs leave state.json untouched
    ABOUTME: State is written once, after every operation succeeded

    Args:
        project_root: Root of the target project
        tool_config: Tool being reconciled
        assets: Assets known to the registry
        desired_ids: Asset ids that should be enabled afterwards
        mode: "copy" or "symlink" for plain files
        commit: Provenance marker stored on new items

    Returns:
        ReconcileReport with newly installed/removed ids and skips

    Raises:
        ConfigurationError: Unknown asset id or invalid mode
        ConflictError: A directory blocks a destination
        IntegrityError: Malformed native MCP config
        SourceNotFoundError: A source file is missing
    """
    install_mode = normalize_mode(mode)
    project_root = Path(project_root)
    assets_by_id = {asset.id: asset for asset in assets}

    state = load_state(project_root)
    plan = plan_reconcile(tool_config.name, state.tool(tool_config.name), desired_ids)

    if plan.is_noop:
        logger.info(f"No changes to apply for {tool_config.name}")
        return ReconcileReport(tool=tool_config.name, legacy_preserved=list(plan.legacy))

    tool_state, report = apply_plan(plan, project_root, tool_config, assets_by_id, install_mode, commit)

    state.tools[tool_config.name] = tool_state
    save_state(project_root, state)

    logger.info(
        f"Enabled {len(report.installed)}, disabled {len(report.removed)} for {tool_config.name}"
    )
    return report
