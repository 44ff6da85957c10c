# oag - enable and disable agent assets for AI coding tools
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export core data models
from oag.models import (
    Asset,
    AssetFile,
    InstalledItem,
    McpServerChange,
    McpState,
    ReconcileReport,
    StateFile,
    ToolConfig,
    ToolState,
)

# ABOUTME: Export the reconcile entry point and the state store
from oag.reconcile import reconcile
from oag.state import load_state, save_state

__all__ = [
    "__version__",
    "Asset",
    "AssetFile",
    "InstalledItem",
    "McpServerChange",
    "McpState",
    "ReconcileReport",
    "StateFile",
    "ToolConfig",
    "ToolState",
    "reconcile",
    "load_state",
    "save_state",
]
