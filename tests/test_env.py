# Tests for environment variable reference utilities
import warnings

from oag.utils.env import (
    ENV_VAR_PATTERN,
    expand_env_vars,
    extract_bearer_env_var,
    extract_env_var_ref,
)


def test_expand_single_env_var(monkeypatch):
    """Test expanding a single environment variable."""
    monkeypatch.setenv("HOME", "/home/user")

    result = expand_env_vars("${HOME}/registry")
    assert result == "/home/user/registry"


def test_missing_var_returns_original(monkeypatch):
    """Test that missing variables are preserved with warning."""
    monkeypatch.delenv("MISSING_VAR", raising=False)

    with warnings.catch_warnings(record=True) as w:
        warnings.simplefilter("always")
        result = expand_env_vars("${MISSING_VAR}/registry")

        assert result == "${MISSING_VAR}/registry"
        assert len(w) == 1
        assert "MISSING_VAR" in str(w[0].message)


def test_pattern_matches_valid_vars():
    """Test regex pattern matches valid variable names."""
    for case, name in [("${HOME}", "HOME"), ("${API_KEY_123}", "API_KEY_123")]:
        match = ENV_VAR_PATTERN.search(case)
        assert match is not None
        assert match.group(1) == name


class TestExtractEnvVarRef:
    """Tests for whole-value ${VAR} detection."""

    def test_exact_reference(self):
        assert extract_env_var_ref("${FOO}") == "FOO"

    def test_digits_and_underscores(self):
        assert extract_env_var_ref("${API_KEY_2}") == "API_KEY_2"

    def test_embedded_reference_is_not_a_reference(self):
        """Only values that are exactly ${VAR} count."""
        assert extract_env_var_ref("prefix-${FOO}") is None
        assert extract_env_var_ref("${FOO}-suffix") is None

    def test_trailing_newline_is_not_a_reference(self):
        assert extract_env_var_ref("${FOO}\n") is None

    def test_lowercase_is_not_a_reference(self):
        assert extract_env_var_ref("${foo}") is None

    def test_literal_value(self):
        assert extract_env_var_ref("ghp_xxxx") is None

    def test_non_string(self):
        assert extract_env_var_ref(42) is None
        assert extract_env_var_ref(None) is None


class TestExtractBearerEnvVar:
    """Tests for "Bearer ${VAR}" detection."""

    def test_bearer_reference(self):
        assert extract_bearer_env_var("Bearer ${TOK}") == "TOK"

    def test_extra_whitespace(self):
        assert extract_bearer_env_var("Bearer   ${TOK}") == "TOK"

    def test_trailing_newline_is_not_a_reference(self):
        assert extract_bearer_env_var("Bearer ${TOK}\n") is None

    def test_literal_bearer_token(self):
        assert extract_bearer_env_var("Bearer abc123") is None

    def test_plain_reference_is_not_bearer(self):
        assert extract_bearer_env_var("${TOK}") is None

    def test_non_string(self):
        assert extract_bearer_env_var(["Bearer ${TOK}"]) is None
