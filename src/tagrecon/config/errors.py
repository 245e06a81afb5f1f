"""Errors raised while reading tagrecon settings from the environment."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting is present but cannot be used."""


class MissingConfigurationError(ConfigurationError):
    """One or more required variables are unset or blank."""

    def __init__(self, names: tuple[str, ...]) -> None:
        super().__init__(f"Missing configuration for: {', '.join(names)}")
        self.names = names
