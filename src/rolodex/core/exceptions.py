"""Rolodex exception hierarchy."""

from __future__ import annotations


class RolodexError(Exception):
    """Base exception for all Rolodex errors."""


class ConfigError(RolodexError):
    """Raised when the configuration is invalid or cannot be read."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested configuration file does not exist."""


class StoreError(RolodexError):
    """Raised when the record store cannot be used as requested."""


class StoreOpenError(StoreError):
    """Raised when a store entered as a context manager fails to open."""
