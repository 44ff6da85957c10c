# Destination path resolution for asset files
import os
import stat
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from oag.errors import ConfigurationError, PathEscapeError

EntryKind = Literal["dir", "file"]

# ABOUTME: Capability used to look at the live filesystem; injectable for tests
KindProbe = Callable[[Path], EntryKind | None]


@dataclass(frozen=True)
class ResolvedTarget:
    """Where one asset file goes.

    ABOUTME: base_path is the per-asset namespace dir when is_dir is True
    ABOUTME: For file-shaped mappings base_path == target_path == the mapping
    """
    target_path: Path
    base_path: Path
    is_dir: bool


def entry_kind(path: Path) -> EntryKind | None:
    """Return "dir", "file" or None for whatever is at path (symlinks not followed)."""
    try:
        st = path.lstat()
    except FileNotFoundError:
        return None
    return "dir" if stat.S_ISDIR(st.st_mode) else "file"


def _has_trailing_separator(mapping: str) -> bool:
    return mapping.endswith("/") or mapping.endswith("\\") or mapping.endswith(os.sep)


def strip_trailing_separators(mapping: str) -> str:
    return mapping.rstrip("/\\") or mapping


def is_directory_mapping(mapping: str, existing_kind: EntryKind | None) -> bool:
    """Decide whether a path mapping is directory-shaped.

    ABOUTME: Pure function - the filesystem lookup is passed in as existing_kind
    ABOUTME: Order: trailing separator, then existing entry, then no extension

    Args:
        mapping: Mapping string from the tool configuration
        existing_kind: Kind of the entry already at the mapped path, if any

    Examples:
        >>> is_directory_mapping(".claude/skills/", "file")
        True
        >>> is_directory_mapping(".mcp.json", None)
        False
        >>> is_directory_mapping(".claude/agents", None)
        True
    """
    if _has_trailing_separator(mapping):
        return True
    if existing_kind is not None:
        return existing_kind == "dir"
    return Path(strip_trailing_separators(mapping)).suffix == ""


def _relative_inside(source_path: Path, asset_dir: Path) -> str:
    rel = os.path.relpath(os.path.abspath(source_path), os.path.abspath(asset_dir))
    if rel == os.pardir or rel.startswith(os.pardir + os.sep) or os.path.isabs(rel):
        raise PathEscapeError(f"Source path is outside asset directory: {source_path}")
    return rel


def resolve_target_path(
    project_root: Path,
    tool_paths: dict[str, str],
    asset_type: str,
    asset_name: str | None,
    asset_dir: Path,
    source_path: Path,
    kind_of: KindProbe = entry_kind,
) -> ResolvedTarget:
    """Resolve the destination of one asset file.

    ABOUTME: Directory mappings are namespaced per asset: mapping/name/relpath
    ABOUTME: File mappings map the file 1:1 onto the mapping itself

    Args:
        project_root: Root of the target project
        tool_paths: Asset type -> mapping string for the tool
        asset_type: Type of the asset being installed
        asset_name: Asset name (required for directory mappings)
        asset_dir: Source directory of the asset
        source_path: Absolute path of the file being installed
        kind_of: Filesystem probe for the mapped path

    Returns:
        ResolvedTarget

    Raises:
        ConfigurationError: No mapping for the type, or no name for a dir mapping
        PathEscapeError: source_path is outside asset_dir
    """
    mapping = tool_paths.get(asset_type)
    if not mapping:
        raise ConfigurationError(f"Missing path mapping for type '{asset_type}'")

    target_base = Path(project_root) / strip_trailing_separators(mapping)
    existing = None if _has_trailing_separator(mapping) else kind_of(target_base)
    is_dir = is_directory_mapping(mapping, existing)

    if not is_dir:
        return ResolvedTarget(target_path=target_base, base_path=target_base, is_dir=False)

    if not asset_name:
        raise ConfigurationError(f"Missing asset name for type '{asset_type}'")

    relative_path = _relative_inside(source_path, asset_dir)
    asset_base = target_base / asset_name
    return ResolvedTarget(target_path=asset_base / relative_path, base_path=asset_base, is_dir=True)
