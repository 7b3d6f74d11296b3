"""Tests for settings and logging setup."""
import logging

from innermost.infra.clock import SystemClock
from innermost.logging_config import LOG_FORMAT, configure_logging
from innermost.settings import Settings


def test_cycle_rules_follow_settings():
    rules = Settings(reveal_after_days=3, willing_selection_size=2).cycle_rules
    assert rules.reveal_after_days == 3
    assert rules.willing_selection_size == 2
    assert rules.wish_list_size == 12


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("MAX_WRITE_ATTEMPTS", "9")
    monkeypatch.setenv("REVEAL_AFTER_DAYS", "10")
    s = Settings()
    assert s.max_write_attempts == 9
    assert s.cycle_rules.reveal_after_days == 10


def test_configure_logging_does_not_raise():
    configure_logging("debug")
    assert "%(levelname)s" in LOG_FORMAT
    assert logging.getLogger("innermost").getEffectiveLevel() <= logging.WARNING


def test_system_clock_is_timezone_aware():
    now = SystemClock().now()
    assert now.tzinfo is not None
    assert now.utcoffset().total_seconds() == 0
