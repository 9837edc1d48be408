"""
XAN Configuration

Loads all sections of xan.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    GovernanceConfig,
    LoggingConfig,
    TokenConfig,
    XanConfig,
    load_config,
)

__all__ = [
    "GovernanceConfig",
    "LoggingConfig",
    "TokenConfig",
    "XanConfig",
    "load_config",
]
