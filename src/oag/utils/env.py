# Environment variable reference utilities
import os
import re
import warnings

# ABOUTME: Pattern matches ${VAR_NAME} anywhere in a string (for expansion)
ENV_VAR_PATTERN = re.compile(r'\$\{([A-Z_][A-Z0-9_]*)\}')

# ABOUTME: Whole-value references only (used with fullmatch); "prefix-${X}" is not a reference
ENV_VAR_REF_PATTERN = re.compile(r'\$\{([A-Z0-9_]+)\}')
BEARER_ENV_VAR_PATTERN = re.compile(r'Bearer\s+\$\{([A-Z0-9_]+)\}')


def expand_env_vars(value: str) -> str:
    """Expand environment variables in ${VAR} format.

    ABOUTME: Supports ${VAR_NAME} syntax for environment variable expansion
    ABOUTME: Returns original value if variable not found (with warning)

    Args:
        value: String potentially containing ${VAR} references

    Returns:
        String with environment variables expanded

    Examples:
        >>> expand_env_vars("${HOME}/registry")
        '/Users/user/registry'
    """
    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        if var_name in os.environ:
            return os.environ[var_name]
        warnings.warn(
            f"Environment variable '{var_name}' not found, keeping original",
            UserWarning,
            stacklevel=2
        )
        return match.group(0)

    return ENV_VAR_PATTERN.sub(replace_var, value)


def extract_env_var_ref(value: object) -> str | None:
    """Return VAR if value is exactly "${VAR}", else None.

    Examples:
        >>> extract_env_var_ref("${GITHUB_TOKEN}")
        'GITHUB_TOKEN'
        >>> extract_env_var_ref("token-${GITHUB_TOKEN}") is None
        True
    """
    if not isinstance(value, str):
        return None
    match = ENV_VAR_REF_PATTERN.fullmatch(value)
    return match.group(1) if match else None


def extract_bearer_env_var(value: object) -> str | None:
    """Return VAR if value is exactly "Bearer ${VAR}", else None."""
    if not isinstance(value, str):
        return None
    match = BEARER_ENV_VAR_PATTERN.fullmatch(value)
    return match.group(1) if match else None
