# File installer: materializes and removes an asset's plain files
import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from oag.errors import ConfigurationError, ConflictError, SourceNotFoundError
from oag.models import Asset, InstalledItem, InstallMode
from oag.paths import resolve_target_path
from oag.utils.fs import ensure_dir, path_exists, prune_empty_dirs

logger = logging.getLogger(__name__)

VALID_MODES: tuple[InstallMode, ...] = ("copy", "symlink")


@dataclass
class InstallResult:
    """Destinations in use after installing one asset."""
    targets: list[str] = field(default_factory=list)
    base_dir: str | None = None


def normalize_mode(mode: str | None) -> InstallMode:
    """Validate an install mode, defaulting to copy.

    Raises:
        ConfigurationError: If mode is neither copy nor symlink
    """
    if not mode:
        return "copy"
    normalized = mode.lower()
    if normalized == "copy":
        return "copy"
    if normalized == "symlink":
        return "symlink"
    raise ConfigurationError(f"Invalid mode '{mode}'. Use symlink or copy.")


def _prepare_target(target_path: Path, source_path: Path, mode: InstallMode) -> bool:
    """Clear the destination; return True when it already holds the right symlink."""
    if not path_exists(target_path):
        return False

    if mode == "symlink" and target_path.is_symlink():
        link = os.readlink(target_path)
        resolved = os.path.normpath(os.path.join(target_path.parent, link))
        if resolved == os.path.normpath(source_path):
            return True

    if target_path.is_dir() and not target_path.is_symlink():
        raise ConflictError(f"Target is a directory: {target_path}")

    target_path.unlink()
    return False


def install_asset(asset: Asset, project_root: Path, tool_paths: dict[str, str], mode: InstallMode) -> InstallResult:
    """Copy or symlink every declared file of an asset into the project.

    ABOUTME: Existing directories at a destination are a conflict, never deleted
    ABOUTME: A symlink already pointing at the same source is left untouched

    Args:
        asset: Asset to install
        project_root: Root of the target project
        tool_paths: Asset type -> mapping string for the tool
        mode: "copy" or "symlink"

    Returns:
        InstallResult with destination paths and the namespace dir (if any)

    Raises:
        ConfigurationError: Asset declares no files, or no mapping for its type
        SourceNotFoundError: A declared source file is missing
        ConflictError: A directory occupies a destination
    """
    if not asset.files:
        raise ConfigurationError(f"Asset '{asset.id}' has no files to install.")

    result = InstallResult()
    for asset_file in asset.files:
        source_path = asset.source_path(asset_file)
        if not path_exists(source_path):
            raise SourceNotFoundError(f"Source file not found: {source_path}")

        resolved = resolve_target_path(
            project_root,
            tool_paths,
            asset.type,
            asset.name,
            asset.dir,
            source_path,
        )
        if resolved.is_dir and result.base_dir is None:
            result.base_dir = str(resolved.base_path)

        target_path = resolved.target_path
        already_linked = _prepare_target(target_path, source_path, mode)
        ensure_dir(target_path.parent)

        if already_linked:
            logger.debug(f"Symlink already in place: {target_path}")
        elif mode == "symlink":
            target_path.symlink_to(source_path)
            logger.debug(f"Linked {target_path} -> {source_path}")
        else:
            shutil.copyfile(source_path, target_path)
            logger.debug(f"Copied {source_path} -> {target_path}")

        result.targets.append(str(target_path))

    return result


def remove_targets(targets: list[str]) -> None:
    """Delete recorded destination files.

    Raises:
        ConflictError: A directory sits where a file was recorded
    """
    for target in targets:
        target_path = Path(target)
        if not path_exists(target_path):
            continue
        if target_path.is_dir() and not target_path.is_symlink():
            raise ConflictError(f"Refusing to remove directory target: {target_path}")
        target_path.unlink()
        logger.debug(f"Removed {target_path}")


def infer_base_dir(
    item: InstalledItem | None,
    asset: Asset | None,
    project_root: Path,
    tool_paths: dict[str, str] | None,
) -> Path | None:
    """Find the per-asset namespace dir of an installed item.

    ABOUTME: Recorded baseDir wins; older records fall back to re-resolving
    ABOUTME: the asset's first file against the current mapping
    """
    if item is not None and item.base_dir:
        return Path(item.base_dir)
    if asset is None or not asset.files:
        return None
    if not tool_paths or not tool_paths.get(asset.type):
        return None

    resolved = resolve_target_path(
        project_root,
        tool_paths,
        asset.type,
        asset.name,
        asset.dir,
        asset.source_path(asset.files[0]),
    )
    return resolved.base_path if resolved.is_dir else None


def uninstall_file_item(
    item: InstalledItem,
    asset: Asset | None,
    project_root: Path,
    tool_paths: dict[str, str] | None,
) -> None:
    """Remove an item's files and prune the namespace dirs they leave empty.

    ABOUTME: Pruning stops at the parent of the namespace dir (exclusive)
    """
    remove_targets(item.targets)

    base_dir = infer_base_dir(item, asset, project_root, tool_paths)
    if base_dir is None:
        return

    stop_dir = base_dir.parent
    for target in item.targets:
        prune_empty_dirs(Path(target).parent, stop_dir)
