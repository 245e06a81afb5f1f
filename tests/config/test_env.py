from __future__ import annotations

import os

import pytest

from tagrecon.config import (
    ConfigurationError,
    MissingConfigurationError,
    optional_env_var,
    require_env_var,
    require_env_vars,
)
from tagrecon.config.env import parse_positive_int


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", " value ")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.delenv("MISSING_A", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert exc.value.names == ("MISSING_A", "MISSING_B")
    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_optional_env_var_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BLANK_VAR", "  ")
    monkeypatch.delenv("UNSET_VAR", raising=False)

    assert optional_env_var("BLANK_VAR") is None
    assert optional_env_var("UNSET_VAR") is None
    assert os.getenv("BLANK_VAR") == "  "


@pytest.mark.parametrize("raw", ["0", "-3", "ten"])
def test_parse_positive_int_rejects_invalid_values(raw: str) -> None:
    with pytest.raises(ConfigurationError, match="PAGE"):
        parse_positive_int("PAGE", raw)


def test_missing_configuration_is_a_configuration_error() -> None:
    assert issubclass(MissingConfigurationError, ConfigurationError)
