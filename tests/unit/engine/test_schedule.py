"""next_target のテスト。

ドリフトなし・超過時のスキップ・目標時刻の単調性を検証する。
"""

from __future__ import annotations

import pytest

from hyoshi.engine._schedule import ScheduleStep, next_target


class TestNextTargetOnTime:
    """アクションが間隔内に終わる場合。"""

    def test_advances_one_interval(self) -> None:
        assert next_target(0.0, 1.0, 0, now=0.0) == ScheduleStep(1, 1.0, 0)

    def test_target_equal_to_now_is_not_skipped(self) -> None:
        """目標時刻がちょうど現在時刻の場合は飛ばさない。"""
        assert next_target(0.0, 1.0, 1, now=2.0) == ScheduleStep(2, 2.0, 0)

    def test_always_advances_at_least_once(self) -> None:
        step = next_target(10.0, 0.5, 4, now=0.0)
        assert step.index == 5
        assert step.target == 12.5


class TestNextTargetOverrun:
    """超過したインターバルを飛ばす。"""

    def test_skips_missed_intervals(self) -> None:
        """1.0 の目標から 2.5 秒超過 → 2.0, 3.0 を飛ばして 4.0。"""
        step = next_target(0.0, 1.0, 1, now=3.5)
        assert step == ScheduleStep(index=4, target=4.0, skipped=2)

    @pytest.mark.parametrize("k", [1, 2, 3, 7])
    def test_overrun_of_k_intervals(self, k: int) -> None:
        """k 倍超過した場合、前の目標から少なくとも (k + 1) 倍進む。"""
        interval = 0.25
        previous_target = 5 * interval
        now = previous_target + k * interval + interval / 2
        step = next_target(0.0, interval, 5, now)
        assert step.target >= previous_target + (k + 1) * interval
        assert step.target >= now
        assert step.target - now < interval
        assert step.skipped == k


class TestNextTargetNoDrift:
    """目標時刻は origin + N * interval と厳密に一致する。"""

    def test_no_cumulative_rounding(self) -> None:
        origin = 1000.0
        interval = 0.1
        index = 0
        target = origin
        for _ in range(10_000):
            index, target, _skipped = next_target(origin, interval, index, now=target)
        assert index == 10_000
        assert target == origin + 10_000 * interval

    def test_differs_from_repeated_addition(self) -> None:
        """加算の繰り返しでは誤差が蓄積するが、next_target は蓄積しない。"""
        accumulated = 0.0
        for _ in range(10):
            accumulated += 0.1
        step = next_target(0.0, 0.1, 9, now=0.0)
        assert accumulated != 1.0
        assert step.target == 10 * 0.1
