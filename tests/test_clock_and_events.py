"""
Clock, Notification and Logging Test Suite

Coverage:
  - ManualClock / SystemClock
  - EventLog stamping, filtering and serialization
  - Governance error payloads
  - Logger: terminal-safe formatting, format validation, highlighter
  - Logger settings loaded from .env values
"""

import dataclasses
import logging
import sys
import os
import time

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from xan.clock import ManualClock, SystemClock
from xan.constants import load_logger_settings, parse_bool
from xan.governance import (
    DelayPeriodNotEnded,
    GovernanceError,
    InsufficientUnlockedBalance,
    Locked,
    QuorumOrMinLockedSupplyNotReached,
    TimingError,
    Transfer,
    UpgradeNotScheduled,
    VoteCast,
)
from xan.governance.events import EventLog
from xan.logger import LogManager, TerminalSafeFormatter, XanLogHighlighter, get_logger
from xan.tokens import XanToken


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
COUNCIL = "0x" + "cc" * 20
IMPL_V1 = "0x" + "01" * 20
IMPL_V2 = "0x" + "02" * 20


def make_token(clock):
    return XanToken.deploy(
        initial_holder=ALICE,
        council=COUNCIL,
        implementation=IMPL_V1,
        initial_supply=1000,
        clock=clock,
    )


# ══════════════════════════════════════════════════════════════════════
#  CLOCK
# ══════════════════════════════════════════════════════════════════════

class TestManualClock:

    def test_start(self):
        assert ManualClock().now() == 0
        assert ManualClock(42).now() == 42

    def test_negative_start_raises(self):
        with pytest.raises(ValueError):
            ManualClock(-1)

    def test_advance(self):
        clock = ManualClock(10)
        assert clock.advance(5) == 15
        assert clock.advance(0) == 15
        assert clock.now() == 15

    def test_advance_negative_raises(self):
        with pytest.raises(ValueError):
            ManualClock(10).advance(-1)

    def test_set(self):
        clock = ManualClock(10)
        clock.set(10)
        clock.set(20)
        assert clock.now() == 20

    def test_set_backwards_raises(self):
        clock = ManualClock(10)
        with pytest.raises(ValueError):
            clock.set(9)
        assert clock.now() == 10


class TestSystemClock:

    def test_whole_seconds(self):
        now = SystemClock().now()
        assert isinstance(now, int)
        assert abs(now - time.time()) < 5


# ══════════════════════════════════════════════════════════════════════
#  EVENT LOG
# ══════════════════════════════════════════════════════════════════════

class TestEventLog:

    def test_emit_stamps_epoch_and_time(self):
        clock = ManualClock(7)
        log = EventLog(clock, lambda: 3)
        ev = log.emit(Locked, account=ALICE, value=5)
        assert ev.epoch == 3
        assert ev.timestamp == 7
        assert len(log) == 1

    def test_default_epoch(self):
        log = EventLog(ManualClock())
        assert log.emit(Locked, account=ALICE, value=1).epoch == 0

    def test_events_are_frozen(self):
        log = EventLog(ManualClock())
        ev = log.emit(Locked, account=ALICE, value=1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            ev.value = 2

    def test_of_type_and_last(self):
        log = EventLog(ManualClock())
        assert log.last() is None
        assert log.last(Locked) is None
        first = log.emit(Locked, account=ALICE, value=1)
        log.emit(Transfer, sender=ALICE, recipient=BOB, value=1)
        second = log.emit(Locked, account=BOB, value=2)
        assert log.of_type(Locked) == [first, second]
        assert log.last(Locked) is second
        assert isinstance(log.last(), Locked)

    def test_iteration_is_a_copy(self):
        log = EventLog(ManualClock())
        log.emit(Locked, account=ALICE, value=1)
        events = log.events
        events.clear()
        assert len(log) == 1
        assert len(list(log)) == 1

    def test_to_dict_camel_case(self):
        log = EventLog(ManualClock(9))
        ev = log.emit(VoteCast, voter=ALICE, implementation=IMPL_V2, delta=3, votum=3)
        d = ev.to_dict()
        assert d["event"] == "VoteCast"
        assert d["implementation"] == IMPL_V2
        assert d["timestamp"] == 9
        assert log.to_list() == [d]

    def test_token_notifications_follow_clock(self):
        clock = ManualClock(100)
        token = make_token(clock)
        clock.advance(50)
        ev = token.lock(ALICE, 10)
        assert ev.timestamp == 150
        assert token.event_log.of_type(Transfer)[0].timestamp == 100


# ══════════════════════════════════════════════════════════════════════
#  ERROR PAYLOADS
# ══════════════════════════════════════════════════════════════════════

class TestErrorPayloads:

    def test_values_exposed(self):
        token = make_token(ManualClock(0))
        token.lock(ALICE, 900)
        with pytest.raises(InsufficientUnlockedBalance) as exc:
            token.transfer(ALICE, BOB, 200)
        d = exc.value.to_dict()
        assert d["error"] == "InsufficientUnlockedBalance"
        assert d["account"] == ALICE
        assert d["unlocked"] == 100
        assert d["requested"] == 200
        assert "100" in d["message"]

    def test_quorum_payload(self):
        token = make_token(ManualClock(0))
        token.lock(ALICE, 100)
        token.cast_vote(ALICE, IMPL_V2)
        with pytest.raises(QuorumOrMinLockedSupplyNotReached) as exc:
            token.schedule_voter_body_upgrade(ALICE)
        err = exc.value
        assert err.implementation == IMPL_V2
        assert err.votes == 100
        assert err.threshold == 50
        assert err.locked_supply == 100
        assert err.min_locked_supply == 250

    def test_categories(self):
        err = DelayPeriodNotEnded(end_time=10, now=4)
        assert isinstance(err, TimingError)
        assert isinstance(err, GovernanceError)
        assert err.to_dict()["now"] == 4
        assert "remaining=6s" in str(err)

    def test_optional_values(self):
        err = UpgradeNotScheduled("council")
        assert err.implementation is None
        assert str(err) == "No council upgrade scheduled"


# ══════════════════════════════════════════════════════════════════════
#  LOGGING
# ══════════════════════════════════════════════════════════════════════

class TestLogging:

    def test_sanitize_strips_escapes(self):
        dirty = "0xabc\x1b[31mRED\x1b[0m\r\x07done"
        assert TerminalSafeFormatter.sanitize(dirty) == "0xabcREDdone"

    def test_sanitize_keeps_tabs_and_newlines(self):
        assert TerminalSafeFormatter.sanitize("a\tb\nc") == "a\tb\nc"

    def test_formatter_sanitizes_records(self):
        formatter = TerminalSafeFormatter(fmt="%(message)s")
        record = logging.LogRecord(
            name="xan", level=logging.INFO, pathname="", lineno=0,
            msg="Locked: \x1b[2J%s", args=(ALICE,), exc_info=None,
        )
        assert formatter.format(record) == f"Locked: {ALICE}"

    def test_invalid_log_format_falls_back(self):
        assert LogManager.validate_log_format("%(nope)s") != "%(nope)s"
        assert LogManager.validate_log_format("%(message)s") == "%(message)s"

    def test_invalid_date_format_falls_back(self):
        assert LogManager.validate_date_format("%Y-%m-%d") == "%Y-%m-%d"
        assert LogManager.validate_date_format("no directives") != "no directives"

    def test_get_logger(self):
        logger = get_logger("xan.tests")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "xan.tests"
        assert LogManager().is_configured

    def test_singleton(self):
        assert LogManager() is LogManager()

    def test_highlighter_marks_events(self):
        from rich.text import Text

        text = Text(f"VoteCast: {ALICE} → {IMPL_V2} (epoch 0)")
        XanLogHighlighter().highlight(text)
        styles = {span.style for span in text.spans}
        assert "xan.event" in styles
        assert "xan.address" in styles
        assert "xan.epoch" in styles


# ══════════════════════════════════════════════════════════════════════
#  LOGGER SETTINGS
# ══════════════════════════════════════════════════════════════════════

class TestLoggerSettings:

    def test_parse_bool(self):
        assert parse_bool(" TRUE ") is True
        assert parse_bool("false") is False
        assert parse_bool("INFO") == "INFO"
        assert parse_bool(None) is None

    def test_defaults_when_env_empty(self):
        settings = load_logger_settings({})
        assert settings["LOG_LEVEL"] == "INFO"
        assert settings["LOG_CONSOLE_HIGHLIGHTING"]
        assert not settings["LOG_FILE_OUTPUT"]

    def test_env_value_keeps_default(self):
        settings = load_logger_settings({"LOG_LEVEL": "DEBUG", "LOG_FILE_OUTPUT": "true"})
        assert settings["LOG_LEVEL"] == "DEBUG"
        assert settings["LOG_LEVEL"].default() == "INFO"
        assert settings["LOG_FILE_OUTPUT"] == True
        assert settings["LOG_FILE_OUTPUT"].default() is False
        assert str(settings["LOG_FILE_OUTPUT"]) == "True"
