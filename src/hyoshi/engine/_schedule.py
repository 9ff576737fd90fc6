"""スケジュール計算。

目標時刻は ``origin + index * interval`` で求め、浮動小数点の
加算を繰り返すことによる累積誤差を生じさせない。
"""

from __future__ import annotations

from typing import NamedTuple


class ScheduleStep(NamedTuple):
    """次の目標時刻の計算結果。

    Attributes:
        index: 次の目標時刻のティック番号（origin が 0）。
        target: 次の目標時刻。
        skipped: 追いつくために飛ばしたインターバル数。
    """

    index: int
    target: float
    skipped: int


def next_target(origin: float, interval: float, index: int, now: float) -> ScheduleStep:
    """現在時刻以降となる次の目標時刻を求める。

    index を少なくとも 1 進め、目標時刻が now 以上になるまで進め続ける。
    アクションやスリープが超過した分のインターバルは実行せずに飛ばす。

    Args:
        origin: スケジュール開始時刻。
        interval: インターバル（秒）。
        index: 直前の目標時刻のティック番号。
        now: 現在時刻。

    Returns:
        ScheduleStep: 新しいティック番号、目標時刻、飛ばしたインターバル数。
    """
    skipped = -1
    while True:
        index += 1
        skipped += 1
        target = origin + index * interval
        if target >= now:
            return ScheduleStep(index=index, target=target, skipped=skipped)
