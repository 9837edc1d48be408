"""
XAN TOML Configuration Loader

Loads every section of xan.toml with environment variable overrides.
Each section is a dataclass with from_dict / apply_env / validate / to_dict.

Environment variable mapping:
    [token] initial_supply          → XAN_INITIAL_SUPPLY
    [token] initial_holder          → XAN_INITIAL_HOLDER
    [governance] council            → XAN_COUNCIL
    [governance] delay_duration     → XAN_DELAY_DURATION
    [logging] level                 → XAN_LOG_LEVEL
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import (
    GOVERNANCE_DELAY_DURATION_SECONDS,
    GOVERNANCE_MIN_LOCKED_SUPPLY_DENOMINATOR,
    GOVERNANCE_MIN_LOCKED_SUPPLY_NUMERATOR,
    GOVERNANCE_QUORUM_RATIO_DENOMINATOR,
    GOVERNANCE_QUORUM_RATIO_NUMERATOR,
    VALID_ADDRESS_PATTERN,
    XAN_DECIMALS,
    XAN_INITIAL_SUPPLY,
    XAN_NAME,
    XAN_SYMBOL,
    ZERO_ADDRESS,
)
from ..exceptions import ConfigurationError
from ..governance.state import GovernanceParameters

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _require_address(name: str, value: str):
    if not value or value == ZERO_ADDRESS:
        raise ConfigurationError(f"{name} must be set to a non-zero address")
    if not VALID_ADDRESS_PATTERN.match(value):
        raise ConfigurationError(f"{name} is not a valid address: {value!r}")


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass
class TokenConfig:
    """[token] section."""
    name: str = XAN_NAME
    symbol: str = XAN_SYMBOL
    decimals: int = XAN_DECIMALS
    initial_supply: int = XAN_INITIAL_SUPPLY
    initial_holder: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenConfig":
        return cls(
            name=data.get("name", XAN_NAME),
            symbol=data.get("symbol", XAN_SYMBOL),
            decimals=data.get("decimals", XAN_DECIMALS),
            initial_supply=int(data.get("initial_supply", XAN_INITIAL_SUPPLY)),
            initial_holder=data.get("initial_holder", ""),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("XAN_INITIAL_SUPPLY"):
            self.initial_supply = int(v)
        if v := os.environ.get("XAN_INITIAL_HOLDER"):
            self.initial_holder = v

    def validate(self) -> None:
        if not self.name or not self.symbol:
            raise ConfigurationError("Token name and symbol are required")
        if not 0 <= self.decimals <= 18:
            raise ConfigurationError(f"decimals must be 0-18, got {self.decimals}")
        if self.initial_supply <= 0:
            raise ConfigurationError("initial_supply must be positive")
        _require_address("initial_holder", self.initial_holder)


@dataclass
class GovernanceConfig:
    """[governance] section."""
    council: str = ""
    initial_implementation: str = ""
    delay_duration: int = GOVERNANCE_DELAY_DURATION_SECONDS
    quorum_numerator: int = GOVERNANCE_QUORUM_RATIO_NUMERATOR
    quorum_denominator: int = GOVERNANCE_QUORUM_RATIO_DENOMINATOR
    min_locked_supply_numerator: int = GOVERNANCE_MIN_LOCKED_SUPPLY_NUMERATOR
    min_locked_supply_denominator: int = GOVERNANCE_MIN_LOCKED_SUPPLY_DENOMINATOR

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovernanceConfig":
        return cls(
            council=data.get("council", ""),
            initial_implementation=data.get("initial_implementation", ""),
            delay_duration=data.get("delay_duration", GOVERNANCE_DELAY_DURATION_SECONDS),
            quorum_numerator=data.get("quorum_numerator", GOVERNANCE_QUORUM_RATIO_NUMERATOR),
            quorum_denominator=data.get(
                "quorum_denominator", GOVERNANCE_QUORUM_RATIO_DENOMINATOR
            ),
            min_locked_supply_numerator=data.get(
                "min_locked_supply_numerator", GOVERNANCE_MIN_LOCKED_SUPPLY_NUMERATOR
            ),
            min_locked_supply_denominator=data.get(
                "min_locked_supply_denominator", GOVERNANCE_MIN_LOCKED_SUPPLY_DENOMINATOR
            ),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("XAN_COUNCIL"):
            self.council = v
        if v := os.environ.get("XAN_DELAY_DURATION"):
            self.delay_duration = int(v)

    def validate(self) -> None:
        _require_address("council", self.council)
        _require_address("initial_implementation", self.initial_implementation)
        if self.delay_duration <= 0:
            raise ConfigurationError("delay_duration must be positive")
        if self.quorum_denominator <= 0 or self.min_locked_supply_denominator <= 0:
            raise ConfigurationError("Ratio denominators must be positive")
        if not (
            self.quorum_denominator <= 2 * self.quorum_numerator < 2 * self.quorum_denominator
        ):
            raise ConfigurationError(
                f"Quorum ratio {self.quorum_numerator}/{self.quorum_denominator} "
                f"must lie in [1/2, 1)"
            )
        if not (
            0 < self.min_locked_supply_numerator <= self.min_locked_supply_denominator
        ):
            raise ConfigurationError(
                f"Min locked supply ratio {self.min_locked_supply_numerator}/"
                f"{self.min_locked_supply_denominator} must lie in (0, 1]"
            )

    def parameters(self) -> GovernanceParameters:
        return GovernanceParameters(
            delay_duration=self.delay_duration,
            quorum_numerator=self.quorum_numerator,
            quorum_denominator=self.quorum_denominator,
            min_locked_supply_numerator=self.min_locked_supply_numerator,
            min_locked_supply_denominator=self.min_locked_supply_denominator,
        )


@dataclass
class LoggingConfig:
    """[logging] section."""
    level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        return cls(level=str(data.get("level", "INFO")).upper())

    def apply_env(self) -> None:
        if v := os.environ.get("XAN_LOG_LEVEL"):
            self.level = v.upper()

    def validate(self) -> None:
        if self.level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.level}")


# -----------------------------------------------------------------------
# Top-level config
# -----------------------------------------------------------------------

@dataclass
class XanConfig:
    """
    Unified configuration of a token deployment.

    Loads every section of xan.toml and applies environment variable
    overrides.
    """
    token: TokenConfig = field(default_factory=TokenConfig)
    governance: GovernanceConfig = field(default_factory=GovernanceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "XanConfig":
        return cls(
            token=TokenConfig.from_dict(data.get("token", {})),
            governance=GovernanceConfig.from_dict(data.get("governance", {})),
            logging=LoggingConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "XanConfig":
        """
        Load configuration from a TOML file.

        A missing file yields defaults (plus environment overrides).
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        with open(path, "rb") as f:
            try:
                raw = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.token.apply_env()
        self.governance.apply_env()
        self.logging.apply_env()

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        self.token.validate()
        self.governance.validate()
        self.logging.validate()
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "token": {
                "name": self.token.name,
                "symbol": self.token.symbol,
                "decimals": self.token.decimals,
                "initial_supply": self.token.initial_supply,
                "initial_holder": self.token.initial_holder,
            },
            "governance": {
                "council": self.governance.council,
                "initial_implementation": self.governance.initial_implementation,
                "delay_duration": self.governance.delay_duration,
                "quorum_ratio": [
                    self.governance.quorum_numerator,
                    self.governance.quorum_denominator,
                ],
                "min_locked_supply_ratio": [
                    self.governance.min_locked_supply_numerator,
                    self.governance.min_locked_supply_denominator,
                ],
            },
            "logging": {"level": self.logging.level},
        }


def load_config(path: Optional[str] = None) -> XanConfig:
    """
    Load deployment configuration.

    Resolution order:
        1. Explicit *path* argument
        2. XAN_CONFIG env var
        3. ./xan.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("XAN_CONFIG", "xan.toml")

    return XanConfig.from_file(path)
