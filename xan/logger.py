"""
XAN Logging
===========

One logging setup shared by every module of the governed token. Records go
through the standard `logging` tree; the root logger gets a `rich` console
handler (coloured identities, epochs and governance event names) and, when
``LOG_FILE_OUTPUT`` is enabled, a size-rotated file under ``logs/``.

Settings come from ``.env`` via :mod:`xan.constants`; a malformed format
string falls back to its default instead of breaking every log call.

Usage:
    >>> from xan.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Locked: 0xabc… +100 (epoch 0)")
"""

import logging
import logging.handlers
import re
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import (
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_DATE_FORMAT,
    LOG_FILE_OUTPUT,
    LOG_FORMAT,
    LOG_LEVEL,
    LOG_MAX_FILE_SIZE,
)


LOG_FILE_PATH = Path(__file__).parent.parent / "logs" / "xan.log"

GOVERNANCE_EVENT_NAMES = (
    "Transfer", "Approval", "Locked", "VoteCast", "VoteRevoked",
    "MostVotedImplementationUpdated",
    "VoterBodyUpgradeScheduled", "VoterBodyUpgradeCancelled",
    "CouncilUpgradeScheduled", "CouncilUpgradeCancelled", "CouncilUpgradeVetoed",
    "Upgraded",
)

XAN_THEME = Theme({
    "xan.address":        "cyan",
    "xan.amount":         "bold white",
    "xan.epoch":          "bold magenta",
    "xan.event":          "bold yellow",
    "xan.arrow":          "bold yellow",
    "xan.logger_name":    "magenta",
    "xan.timestamp":      "bold cyan",
    "xan.level_debug":    "bold dim",
    "xan.level_info":     "bold green",
    "xan.level_warning":  "bold yellow",
    "xan.level_error":    "bold red",
    "xan.level_critical": "bold red reverse",
})


def _warn(message: str):
    # The logging tree may not be usable yet
    print(f"xan.logger: {message}", file=sys.stderr)


# ══════════════════════════════════════════════════════════════════════
#  FORMATTING
# ══════════════════════════════════════════════════════════════════════

class TerminalSafeFormatter(logging.Formatter):
    """
    Formatter that removes terminal control sequences from the output.

    Identities in governance messages are caller-supplied strings; an
    embedded escape sequence must not repaint the operator's terminal or
    forge extra lines in the log file.
    """

    _ANSI = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]|\x1b[@-Z\\-_]")
    _CONTROL = re.compile(r"[\x00-\x08\x0B\x0C\x0D\x0E-\x1F\x7F]")

    @classmethod
    def sanitize(cls, text: str) -> str:
        if not text:
            return text
        return cls._CONTROL.sub("", cls._ANSI.sub("", text))

    def format(self, record: logging.LogRecord) -> str:
        return self.sanitize(super().format(record))


class XanLogHighlighter(RegexHighlighter):
    """Colours addresses, epoch markers, event names and level names."""

    base_style = "xan."
    highlights = [
        r"(?P<timestamp>^(.*?)UTC)",
        r"\-\s+\w+\s+-\s+(?P<logger_name>[\w.]+)(?=\s-\s)",
        r"(?P<arrow>→|✗|-->|<--)",
        r"(?P<address>\b0x[0-9a-fA-F]{6,}\b)",
        r"(?P<epoch>\bepoch[ =#]?\d+\b)",
        r"(?P<event>\b(" + "|".join(GOVERNANCE_EVENT_NAMES) + r")\b)",
        r"(?P<level_debug>\bDEBUG\b)",
        r"(?P<level_info>\bINFO\b)",
        r"(?P<level_warning>\bWARNING\b)",
        r"(?P<level_error>\bERROR\b)",
        r"(?P<level_critical>\bCRITICAL\b)",
    ]


# ══════════════════════════════════════════════════════════════════════
#  SETUP
# ══════════════════════════════════════════════════════════════════════

class LogManager:
    """
    Process-wide owner of the root logger's handlers.

    A single instance exists (``LogManager() is LogManager()``); the first
    ``configure`` call installs handlers and later calls are no-ops until
    ``reconfigure`` is used.
    """

    _instance: Optional["LogManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "LogManager":
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._configured = False
                cls._instance = instance
        return cls._instance

    # ── Setting validation ────────────────────────────────────────────

    @staticmethod
    def validate_log_format(log_format: str) -> str:
        """Return *log_format* if it renders a sample record, else the default."""
        fallback = str(LOG_FORMAT.default())
        if not log_format:
            return fallback

        log_format = str(log_format)
        sample = logging.LogRecord(
            name="xan", level=logging.INFO, pathname="", lineno=0,
            msg="sample", args=(), exc_info=None,
        )
        try:
            rendered = logging.Formatter(fmt=log_format).format(sample)
        except (ValueError, KeyError, TypeError) as e:
            _warn(f"log format {log_format!r} rejected ({e}), using default")
            return fallback

        if re.search(r"%\([A-Za-z_]\w*\)[A-Za-z]", rendered):
            _warn(f"log format {log_format!r} left placeholders unrendered, using default")
            return fallback
        return log_format

    @staticmethod
    def validate_date_format(date_format: str) -> str:
        """Accept strftime directives and plain separators only."""
        fallback = str(LOG_DATE_FORMAT.default())
        if not date_format:
            return fallback

        date_format = str(date_format)
        if not re.fullmatch(r"(?=.*%[A-Za-z])(?:%%|%[A-Za-z]|[0-9 \t:\-/.,TZ+])+", date_format):
            _warn(f"date format {date_format!r} rejected, using default")
            return fallback
        return date_format

    # ── Handlers ──────────────────────────────────────────────────────

    @staticmethod
    def _console_handler(formatter: logging.Formatter) -> logging.Handler:
        if not LOG_CONSOLE_HIGHLIGHTING:
            handler = logging.StreamHandler(sys.stdout)
        else:
            handler = RichHandler(
                console=Console(theme=XAN_THEME, highlight=False),
                highlighter=XanLogHighlighter(),
                keywords=[],
                markup=False,
                rich_tracebacks=True,
                show_time=False,
                show_level=False,
                show_path=False,
            )
        handler.setFormatter(formatter)
        return handler

    @staticmethod
    def _file_handler(formatter: logging.Formatter, path: Path) -> logging.Handler:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            filename=str(path),
            maxBytes=LOG_MAX_FILE_SIZE,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(formatter)
        return handler

    # ── Configuration ─────────────────────────────────────────────────

    def configure(
        self,
        log_level: Optional[str] = None,
        log_file: Optional[Path] = None,
        console_output: bool = True,
        file_output: Optional[bool] = None,
    ) -> None:
        """
        Install handlers on the root logger (once).

        Args:
            log_level:       Level name; defaults to ``LOG_LEVEL`` from .env
            log_file:        Rotating log path; defaults to ``logs/xan.log``
            console_output:  Attach the console handler
            file_output:     Attach the file handler; defaults to ``LOG_FILE_OUTPUT``
        """
        with self._lock:
            if self._configured:
                return

            level = getattr(logging, str(log_level or LOG_LEVEL).upper(), logging.INFO)
            formatter = TerminalSafeFormatter(
                fmt=self.validate_log_format(LOG_FORMAT),
                datefmt=self.validate_date_format(LOG_DATE_FORMAT) + " UTC",
            )
            formatter.converter = time.gmtime

            handlers: List[logging.Handler] = []
            if console_output:
                handlers.append(self._console_handler(formatter))
            if bool(LOG_FILE_OUTPUT) if file_output is None else file_output:
                handlers.append(self._file_handler(formatter, log_file or LOG_FILE_PATH))

            root = logging.getLogger()
            root.handlers.clear()
            root.setLevel(level)
            for handler in handlers:
                handler.setLevel(level)
                root.addHandler(handler)

            self._configured = True

    def reconfigure(self, **kwargs) -> None:
        """Replace the installed handlers using *kwargs* (see ``configure``)."""
        with self._lock:
            self._configured = False
        self.configure(**kwargs)

    def get_logger(self, name: str) -> logging.Logger:
        if not self._configured:
            self.configure()
        return logging.getLogger(name)

    @property
    def is_configured(self) -> bool:
        return self._configured


_manager = LogManager()


def get_logger(name: str) -> logging.Logger:
    """Module-level accessor: ``logger = get_logger(__name__)``."""
    return _manager.get_logger(name)


def configure_logging(**kwargs) -> None:
    """Apply a new logging configuration, e.g. the level from xan.toml."""
    _manager.reconfigure(**kwargs)


_manager.configure()
