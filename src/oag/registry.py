# Registry checkout reader: turns asset.json manifests into Assets
import json
import logging
from pathlib import Path
from typing import Any

from oag.errors import ConfigurationError
from oag.models import Asset, AssetFile

logger = logging.getLogger(__name__)

MANIFEST_NAME = "asset.json"

# ABOUTME: (type, directory) pairs scanned in this order
TYPE_DIRS: tuple[tuple[str, str], ...] = (
    ("agent", "agents"),
    ("skill", "skills"),
    ("mcp", "mcp"),
)
_TYPE_ORDER = {asset_type: index for index, (asset_type, _) in enumerate(TYPE_DIRS)}


def _normalize_string(raw: Any, fallback: str) -> str:
    if not isinstance(raw, str):
        return fallback
    return raw.strip() or fallback


def _normalize_tools(raw: Any) -> tuple[str, ...] | None:
    if not isinstance(raw, list):
        return None
    tools = tuple(t.strip() for t in raw if isinstance(t, str) and t.strip())
    return tools or None


def _normalize_files(raw: Any) -> tuple[AssetFile, ...]:
    if not isinstance(raw, list):
        return ()
    files = []
    for entry in raw:
        source = entry.get("source") if isinstance(entry, dict) else None
        if isinstance(source, str) and source.strip():
            files.append(AssetFile(source=source.strip()))
    return tuple(files)


def load_asset(asset_dir: Path, default_type: str) -> Asset | None:
    """Build an Asset from <asset_dir>/asset.json.

    ABOUTME: type defaults to the scanned directory's type
    ABOUTME: name defaults to the directory name

    Raises:
        ConfigurationError: If the manifest isn't a JSON object
    """
    manifest_path = asset_dir / MANIFEST_NAME
    if not manifest_path.is_file():
        return None

    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in asset manifest {manifest_path}: {e}") from e
    if not isinstance(manifest, dict):
        raise ConfigurationError(f"Asset manifest must be a JSON object: {manifest_path}")

    asset_type = _normalize_string(manifest.get("type"), default_type).lower()
    name = _normalize_string(manifest.get("name"), asset_dir.name)

    return Asset(
        id=f"{asset_type}/{name}",
        type=asset_type,
        name=name,
        dir=asset_dir.resolve(),
        files=_normalize_files(manifest.get("files")),
        tools=_normalize_tools(manifest.get("tools")),
        description=_normalize_string(manifest.get("description"), ""),
    )


def load_assets(repo_path: Path) -> list[Asset]:
    """Scan a registry checkout for assets.

    ABOUTME: Looks at agents/, skills/ and mcp/ subdirectories
    ABOUTME: Sorted by type order, then name

    Args:
        repo_path: Root of the registry checkout

    Returns:
        List of assets (possibly empty)
    """
    assets: list[Asset] = []
    for asset_type, dir_name in TYPE_DIRS:
        type_root = Path(repo_path) / dir_name
        if not type_root.is_dir():
            continue
        for entry in sorted(type_root.iterdir()):
            if not entry.is_dir():
                continue
            asset = load_asset(entry, asset_type)
            if asset is not None:
                assets.append(asset)

    assets.sort(key=lambda a: (_TYPE_ORDER.get(a.type, len(_TYPE_ORDER)), a.name))
    logger.debug(f"Loaded {len(assets)} assets from {repo_path}")
    return assets


def assets_by_id(assets: list[Asset]) -> dict[str, Asset]:
    return {asset.id: asset for asset in assets}


def is_tool_supported(asset: Asset, tool: str) -> bool:
    """True if the asset has no tool allow-list or lists this tool."""
    return asset.tools is None or tool in asset.tools
