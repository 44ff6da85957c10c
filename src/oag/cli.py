# CLI interface for oag
import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from oag import __version__
from oag.config import OagConfig, get_config_path, load_config
from oag.errors import ConfigurationError, OagError
from oag.git import safe_get_commit
from oag.models import ReconcileReport, type_from_id
from oag.presets import (
    get_preset_asset_ids,
    get_preset_by_name,
    load_presets,
    validate_preset_assets,
)
from oag.reconcile import is_legacy_id, reconcile
from oag.registry import assets_by_id, is_tool_supported, load_assets
from oag.state import load_state
from oag.update import update_installed_assets

# ABOUTME: Exit codes
# 0 = success, 1 = partial success, 2 = config error, 3 = fatal
EXIT_SUCCESS = 0
EXIT_PARTIAL = 1
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3

logger = logging.getLogger(__name__)


def _load_config(args: argparse.Namespace) -> OagConfig:
    """Load config from --config or ~/.oag/config.json (defaults if missing)."""
    config_path = Path(args.config) if args.config else get_config_path()
    if not config_path.exists():
        return OagConfig()
    return load_config(config_path)


def _registry_path(args: argparse.Namespace, config: OagConfig) -> Path:
    if args.registry:
        return Path(args.registry).expanduser().resolve()
    if config.registry_path is not None:
        return config.registry_path
    raise ConfigurationError("No registry configured. Pass --registry or set registry.path in the config.")


def _project_root(args: argparse.Namespace) -> Path:
    return Path(args.project or Path.cwd()).resolve()


def _print_report(report: ReconcileReport) -> int:
    """Print a reconcile report and return the matching exit code."""
    if not report.changed:
        print("No changes to apply.")
        return EXIT_SUCCESS

    if report.skipped:
        print(f"Skipped {len(report.skipped)} assets:")
        for entry in report.skipped:
            print(f"- {entry.id}: {entry.reason}")

    if report.legacy_preserved:
        print(
            f"Preserved {len(report.legacy_preserved)} legacy items "
            f"(type is no longer supported)."
        )

    print(f"Enabled {len(report.installed)}, disabled {len(report.removed)} for {report.tool}.")
    return EXIT_PARTIAL if report.skipped else EXIT_SUCCESS


def _run_reconcile(args: argparse.Namespace, desired_from_current: Callable[[set[str]], set[str]]) -> int:
    config = _load_config(args)
    tool_config = config.get_tool(args.tool)
    registry_path = _registry_path(args, config)
    project_root = _project_root(args)

    assets = load_assets(registry_path)
    current = {
        aid for aid in load_state(project_root).tool(args.tool).items if not is_legacy_id(aid)
    }
    desired = desired_from_current(current)

    known = assets_by_id(assets)
    for asset_id in sorted(desired):
        asset = known.get(asset_id)
        if asset is not None and not is_tool_supported(asset, args.tool):
            print(f"Warning: {asset_id} does not list '{args.tool}' as a supported tool")

    report = reconcile(
        project_root,
        tool_config,
        assets,
        desired,
        mode=args.mode,
        commit=safe_get_commit(registry_path),
    )
    return _print_report(report)


def cmd_apply(args: argparse.Namespace) -> int:
    """Make exactly the given ids enabled for a tool."""
    return _run_reconcile(args, lambda current: set(args.ids))


def cmd_enable(args: argparse.Namespace) -> int:
    return _run_reconcile(args, lambda current: current | set(args.ids))


def cmd_disable(args: argparse.Namespace) -> int:
    return _run_reconcile(args, lambda current: current - set(args.ids))


def cmd_preset(args: argparse.Namespace) -> int:
    """Reconcile a tool to the asset set of a named preset.

    ABOUTME: The preset is validated in full before anything is touched
    """
    config = _load_config(args)
    tool_config = config.get_tool(args.tool)
    registry_path = _registry_path(args, config)
    project_root = _project_root(args)

    presets = load_presets(registry_path)
    if not presets:
        raise ConfigurationError("No presets found in registry.")

    preset = get_preset_by_name(presets, args.name)
    if preset is None:
        available = ", ".join(p.name for p in presets) or "(none)"
        raise ConfigurationError(f"Preset '{args.name}' not found. Available presets: {available}.")

    asset_ids = get_preset_asset_ids(preset, args.tool)
    if asset_ids is None:
        raise ConfigurationError(f"Preset '{preset.name}' does not define assets for tool '{args.tool}'.")

    assets = load_assets(registry_path)
    desired = validate_preset_assets(preset, args.tool, asset_ids, assets_by_id(assets), tool_config)

    report = reconcile(
        project_root,
        tool_config,
        assets,
        desired,
        mode=args.mode,
        commit=safe_get_commit(registry_path),
    )
    print(f"Applied preset '{preset.name}' for {args.tool}.")
    return _print_report(report)


def cmd_list_presets(args: argparse.Namespace) -> int:
    config = _load_config(args)
    presets = load_presets(_registry_path(args, config))
    if args.tool:
        presets = [p for p in presets if args.tool in p.tools]

    if not presets:
        print("No presets found.")
        return EXIT_SUCCESS

    for preset in presets:
        if args.tool:
            print(f"{preset.label()} ({len(preset.tools[args.tool])} assets for {args.tool})")
        else:
            summary = ", ".join(f"{tool}:{len(ids)}" for tool, ids in sorted(preset.tools.items()))
            print(f"{preset.label()} [{summary}]")
    return EXIT_SUCCESS


def cmd_update(args: argparse.Namespace) -> int:
    """Reinstall recorded assets from the current registry checkout."""
    config = _load_config(args)
    registry_path = _registry_path(args, config)
    project_root = _project_root(args)

    summary = update_installed_assets(
        project_root,
        config,
        load_assets(registry_path),
        safe_get_commit(registry_path),
        tool=args.tool,
        mode=args.mode,
    )

    if summary.total_items == 0:
        if args.tool:
            print(f"No installed assets for tool '{args.tool}'.")
        else:
            print("No installed assets found.")
        return EXIT_SUCCESS

    for tool_name in summary.skipped_no_tool_config:
        print(f"Skipped tool with no config: {tool_name}")
    for tool_name, asset_id in summary.skipped_missing:
        print(f"Missing asset (skipped): {tool_name}: {asset_id}")
    for tool_name, asset_id, asset_type in summary.skipped_no_mapping:
        print(f"No path mapping (skipped): {tool_name}: {asset_id} (type: {asset_type})")
    if summary.skipped_legacy:
        print(f"Preserved {len(summary.skipped_legacy)} legacy items.")

    print(f"Updated {summary.updated}/{summary.total_items} installed assets.")
    skipped = (
        summary.skipped_missing or summary.skipped_no_mapping or summary.skipped_no_tool_config
    )
    return EXIT_PARTIAL if skipped else EXIT_SUCCESS


def cmd_status(args: argparse.Namespace) -> int:
    """Print what is recorded as installed in the project."""
    project_root = _project_root(args)
    state = load_state(project_root)
    tools = [args.tool] if args.tool else sorted(state.tools)

    total = 0
    for tool_name in tools:
        items = state.tool(tool_name).items
        if not items:
            continue
        print(f"{tool_name}:")
        for asset_id, item in items.items():
            suffix = " (legacy)" if is_legacy_id(asset_id) else ""
            kind = "mcp" if type_from_id(asset_id) == "mcp" else item.mode
            print(f"  {asset_id} [{kind}] @ {item.commit[:12]}{suffix}")
            total += 1

    if total == 0:
        print("No installed assets found.")
    return EXIT_SUCCESS


def _add_target_args(parser: argparse.ArgumentParser, tool_required: bool = True) -> None:
    parser.add_argument("--tool", required=tool_required, help="Tool name (e.g. claude, codex)")
    parser.add_argument("--project", help="Project root path (default: current directory)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oag",
        description="Enable and disable agent assets for AI coding tools"
    )
    parser.add_argument("--version", "-V", action="version", version=f"oag v{__version__}")
    parser.add_argument("--config", help="Path to config.json (default: ~/.oag/config.json)")
    parser.add_argument("--registry", help="Path to a local registry checkout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every file operation")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    apply_parser = subparsers.add_parser("apply", help="Enable exactly the given assets for a tool")
    _add_target_args(apply_parser)
    apply_parser.add_argument("--mode", default="copy", help="Install mode (symlink|copy)")
    apply_parser.add_argument("ids", nargs="*", help="Asset ids (type/name)")

    for name, help_text in (("enable", "Enable assets"), ("disable", "Disable assets")):
        sub = subparsers.add_parser(name, help=help_text)
        _add_target_args(sub)
        sub.add_argument("--mode", default="copy", help="Install mode (symlink|copy)")
        sub.add_argument("ids", nargs="+", help="Asset ids (type/name)")

    preset_parser = subparsers.add_parser("preset", help="Apply a preset and reconcile assets")
    _add_target_args(preset_parser)
    preset_parser.add_argument("--name", required=True, help="Preset name")
    preset_parser.add_argument("--mode", default="copy", help="Install mode (symlink|copy)")

    list_parser = subparsers.add_parser("list-presets", help="List available presets")
    list_parser.add_argument("--tool", help="Filter by tool")

    update_parser = subparsers.add_parser("update", help="Update installed assets")
    _add_target_args(update_parser, tool_required=False)
    update_parser.add_argument("--mode", help="Force install mode (symlink|copy)")

    status_parser = subparsers.add_parser("status", help="Show installed assets")
    _add_target_args(status_parser, tool_required=False)

    return parser


COMMANDS = {
    "apply": cmd_apply,
    "enable": cmd_enable,
    "disable": cmd_disable,
    "preset": cmd_preset,
    "list-presets": cmd_list_presets,
    "update": cmd_update,
    "status": cmd_status,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the oag CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    handler = COMMANDS.get(args.command)
    if handler is None:
        # No command specified, show help
        parser.print_help()
        return EXIT_SUCCESS

    try:
        return handler(args)
    except ConfigurationError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except OagError as e:
        # Earlier operations of the run stay applied; state.json was not updated
        print(f"Error: {e}")
        print("Some files may already have been changed; state was not saved.")
        return EXIT_FATAL
    except FileNotFoundError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        print(f"Fatal error: {e}")
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
