"""Tests for the injectable clocks."""

from datetime import datetime, timedelta, timezone

import pytest

from inventory_kernel.domain.clock import DEFAULT_EPOCH, DeterministicClock, SystemClock


class TestDeterministicClock:

    def test_frozen_until_moved(self):
        clock = DeterministicClock()
        assert clock.now() == clock.now() == DEFAULT_EPOCH

    def test_advance_by_seconds_and_timedelta(self):
        clock = DeterministicClock()
        clock.advance(60)
        assert clock.advance(timedelta(hours=1)) == DEFAULT_EPOCH + timedelta(minutes=61)

    def test_tick(self):
        clock = DeterministicClock()
        assert clock.tick() == DEFAULT_EPOCH + timedelta(seconds=1)

    def test_set_time(self):
        clock = DeterministicClock()
        target = datetime(2025, 6, 30, tzinfo=timezone.utc)
        clock.set_time(target)
        assert clock.now() == target

    def test_naive_start_rejected(self):
        with pytest.raises(ValueError):
            DeterministicClock(datetime(2025, 1, 1))


def test_system_clock_is_utc():
    assert SystemClock().now().tzinfo == timezone.utc
