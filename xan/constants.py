"""
XAN Constants

Token parameters, governance thresholds and the logger settings read from
``.env``. Governance values are the defaults a deployment starts from;
``xan.toml`` may override them per deployment (see :mod:`xan.config`).
"""
import re

from dotenv import dotenv_values


# ==================================================================================
# IDENTITIES
# ==================================================================================
ZERO_ADDRESS = '0x' + '0' * 40

# 20-byte hex identity used for accounts, the council and implementations
VALID_ADDRESS_PATTERN = re.compile(r'^0x[0-9a-fA-F]{40}$')


# ==================================================================================
# TOKEN
# ==================================================================================
XAN_NAME = 'Anoma'
XAN_SYMBOL = 'XAN'
XAN_DECIMALS = 18
XAN_INITIAL_SUPPLY = 10 ** 10 * 10 ** XAN_DECIMALS  # 10 billion XAN in base units


# ==================================================================================
# GOVERNANCE
# ==================================================================================
# NOTE: these decide when holders or the council may replace the implementation.

# Seconds between scheduling an upgrade and the earliest moment it may execute
GOVERNANCE_DELAY_DURATION_SECONDS = 14 * 24 * 60 * 60

# votes(most voted) > locked_supply * 1 // 2
GOVERNANCE_QUORUM_RATIO_NUMERATOR = 1
GOVERNANCE_QUORUM_RATIO_DENOMINATOR = 2

# locked_supply >= total_supply * 1 // 4
GOVERNANCE_MIN_LOCKED_SUPPLY_NUMERATOR = 1
GOVERNANCE_MIN_LOCKED_SUPPLY_DENOMINATOR = 4


# ==================================================================================
# LOGGER SETTINGS (.env)
# ==================================================================================
LOG_MAX_FILE_SIZE = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                'INFO',
    'LOG_FORMAT':               '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':          '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING': 'True',
    'LOG_FILE_OUTPUT':          'False',
}


class ConfigString(str):
    """A ``.env`` text setting that remembers its built-in default."""

    def __new__(cls, value, default):
        setting = super().__new__(cls, value)
        setting._default = default
        return setting

    def default(self):
        return self._default


class ConfigBool(int):
    """A ``.env`` flag; truthy like ``bool`` and remembers its default."""

    def __new__(cls, value, default):
        setting = super().__new__(cls, 1 if value else 0)
        setting._default = default
        return setting

    def default(self):
        return self._default

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__

    def __str__(self):
        return 'True' if self else 'False'

    __repr__ = __str__


def parse_bool(raw):
    """Return True/False for a "true"/"false" string (any case), else *raw* unchanged."""
    if isinstance(raw, str):
        word = raw.strip().lower()
        if word == 'true':
            return True
        if word == 'false':
            return False
    return raw


def load_logger_settings(env_values):
    """Build one wrapped setting per ``LOGGER_DEFAULTS`` key from *env_values*."""
    settings = {}
    for key, fallback in LOGGER_DEFAULTS.items():
        raw = env_values.get(key)
        if raw is None:
            raw = fallback
        parsed = parse_bool(raw)
        if isinstance(parsed, bool):
            settings[key] = ConfigBool(parsed, parse_bool(fallback))
        else:
            settings[key] = ConfigString(raw, fallback)
    return settings


globals().update(load_logger_settings(dotenv_values('.env')))
