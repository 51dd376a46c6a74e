"""Tests for tribunal.core.clock module."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from tribunal.core.clock import ManualClock, TimeoutClock, Window


class TestWindow:
    """Tests for the half-open Window."""

    def test_duration_and_half(self):
        window = Window(start=1_000, end=1_100)
        assert window.duration == 100
        assert window.half == 1_050

    def test_half_rounds_down(self):
        assert Window(start=0, end=5).half == 2

    def test_to_dict(self):
        assert Window(start=3, end=9).to_dict() == {"start": 3, "end": 9}


class TestTimeoutClock:
    """Tests for TimeoutClock."""

    def test_custom_time_source(self):
        clock = TimeoutClock(lambda: 42)
        assert clock.now() == 42

    def test_default_source_is_wall_time(self):
        """Timestamps must survive a restart, so the default is Unix time."""
        with patch("tribunal.core.clock.time.time", return_value=1_700_000_000.7):
            assert TimeoutClock().now() == 1_700_000_000

    def test_window_starts_now(self):
        clock = TimeoutClock(lambda: 500)
        assert clock.window(60) == Window(start=500, end=560)

    def test_has_elapsed_is_strict(self):
        """A period is over only once strictly past start + duration."""
        clock = ManualClock(start=100)
        assert not clock.has_elapsed(0, 100)
        clock.advance(1)
        assert clock.has_elapsed(0, 100)

    def test_before(self):
        clock = ManualClock(start=10)
        assert clock.before(11)
        assert not clock.before(10)


class TestManualClock:
    """Tests for ManualClock."""

    def test_advance(self):
        clock = ManualClock(start=5)
        assert clock.advance(10) == 15
        assert clock.now() == 15

    def test_set(self):
        clock = ManualClock()
        clock.set(99)
        assert clock.now() == 99

    def test_cannot_go_backwards(self):
        clock = ManualClock(start=50)
        with pytest.raises(ValueError):
            clock.advance(-1)
        with pytest.raises(ValueError):
            clock.set(49)
        assert clock.now() == 50
