"""Tests for the indicator calculations."""

import pytest

from signal_notifier.metrics import (
    calculate_ema,
    calculate_macd,
    calculate_rate_of_change,
    calculate_rsi,
    calculate_sma,
    ema_series,
)


class TestMovingAverages:

    def test_sma_uses_trailing_window(self):
        assert calculate_sma([1, 2, 3, 4, 5], 3) == pytest.approx(4.0)

    def test_sma_insufficient_data(self):
        assert calculate_sma([1, 2], 3) is None
        assert calculate_sma([1, 2, 3], 0) is None

    def test_ema_series_is_seeded_with_sma(self):
        assert ema_series([1, 2, 3, 4], 2) == pytest.approx([1.5, 2.5, 3.5])

    def test_ema_latest_value(self):
        assert calculate_ema([1, 2, 3, 4], 2) == pytest.approx(3.5)
        assert calculate_ema([1], 2) is None


class TestRsi:

    def test_insufficient_data(self):
        assert calculate_rsi([1.0] * 14, 14) is None

    def test_only_gains(self):
        assert calculate_rsi([float(i) for i in range(1, 20)], 14) == pytest.approx(100.0)

    def test_only_losses(self):
        assert calculate_rsi([float(i) for i in range(20, 1, -1)], 14) == pytest.approx(0.0)

    def test_flat_series_is_midpoint(self):
        assert calculate_rsi([50.0] * 20, 14) == pytest.approx(50.0)

    def test_mixed_series_in_range(self):
        closes = [44.34, 44.09, 44.15, 43.61, 44.33, 44.83, 45.10, 45.42,
                  45.84, 46.08, 45.89, 46.03, 45.61, 46.28, 46.28, 46.00]
        rsi = calculate_rsi(closes, 14)
        assert 0.0 < rsi < 100.0


class TestMomentum:

    def test_macd_requires_fast_below_slow(self):
        with pytest.raises(ValueError):
            calculate_macd([1.0] * 100, fast_period=26, slow_period=12)

    def test_macd_insufficient_data(self):
        assert calculate_macd([float(i) for i in range(30)]) is None

    def test_macd_positive_in_uptrend(self):
        closes = [100.0 * (1.01 ** i) for i in range(120)]
        macd, signal = calculate_macd(closes)
        assert macd > 0
        assert signal > 0

    def test_rate_of_change(self):
        assert calculate_rate_of_change([100.0, 105.0, 110.0], 2) == pytest.approx(10.0)
        assert calculate_rate_of_change([100.0, 90.0], 1) == pytest.approx(-10.0)

    def test_rate_of_change_insufficient_data(self):
        assert calculate_rate_of_change([100.0, 101.0], 2) is None
        assert calculate_rate_of_change([0.0, 1.0], 1) is None
