# ABOUTME: Utility modules for oag
# ABOUTME: Exports env reference helpers and filesystem helpers

from oag.utils.env import (
    expand_env_vars,
    extract_bearer_env_var,
    extract_env_var_ref,
)
from oag.utils.fs import ensure_dir, path_exists, prune_empty_dirs

__all__ = [
    "expand_env_vars",
    "extract_env_var_ref",
    "extract_bearer_env_var",
    "ensure_dir",
    "path_exists",
    "prune_empty_dirs",
]
