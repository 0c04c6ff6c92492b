"""Tests for the restart loop around the tray application."""

from itertools import islice

import pytest

from studio_tray import main as entry_point


class TestSupervise:
    def test_returns_when_user_quits(self):
        sleeps = []

        assert entry_point._supervise(lambda: (0, True), sleep=sleeps.append) == 0
        assert sleeps == []

    def test_restarts_after_crash_and_unexpected_exit(self):
        outcomes = iter([RuntimeError("boom"), (3, False), (0, True)])
        sleeps = []

        def run_once():
            outcome = next(outcomes)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        assert entry_point._supervise(run_once, sleep=sleeps.append) == 0
        assert sleeps == [2, 4]

    def test_backoff_is_capped(self):
        assert list(islice(entry_point._backoff_delays(), 6)) == [2, 4, 8, 16, 30, 30]

    def test_keyboard_interrupt_is_not_swallowed(self):
        def run_once():
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            entry_point._supervise(run_once, sleep=lambda _: None)
