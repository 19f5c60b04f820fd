"""
Tests for Timer and timed().
"""

import pytest

from pyprobability.core.compute.timing import Timer, timed


class TestTimer:
    """Section accumulation and lifecycle errors."""

    def test_sections_accumulate(self):
        timer = Timer()
        timer.start()
        with timer.section('draws'):
            pass
        with timer.section('draws'):
            pass
        timer.stop()
        result = timer.result()
        assert set(result) == {'total_seconds', 'draws'}
        assert result['draws'] >= 0.0
        assert result['total_seconds'] >= result['draws']

    def test_stop_before_start(self):
        with pytest.raises(RuntimeError):
            Timer().stop()

    def test_result_before_stop(self):
        timer = Timer()
        timer.start()
        with pytest.raises(RuntimeError):
            timer.result()

    def test_timed_context(self):
        with timed() as timer:
            sum(range(100))
        assert timer.result()['total_seconds'] >= 0.0
