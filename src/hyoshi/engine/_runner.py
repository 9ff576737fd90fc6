"""IntervalRunner — ドリフトのない固定間隔スケジューラ。

アクションを固定間隔で実行し、超過したインターバルは溜め込まずに飛ばす。
スリープは短いスライスに分割し、スライス境界ごとにキャンセル要求を確認する。

ループの手順:
    1. 開始時刻 origin を記録
    2. アクション実行
    3. 現在時刻以降となる次の目標時刻まで追いつく（超過分は実行しない）
    4. 目標時刻までスライス単位でスリープ（スライスごとにキャンセル確認）
    5. キャンセル要求があればクリーンアップして RunResult を返す

プロセス終了はこのモジュールでは行わない。終了コードは RunResult として
呼び出し元（CLI）に返す。
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from hyoshi.engine._action import Action
from hyoshi.engine._schedule import next_target
from hyoshi.engine._signal import CancelSource
from hyoshi.models._base import HyoshiBaseModel
from hyoshi.models.cancellation import Cancellation, determine_exit_code
from hyoshi.models.config import DEFAULT_SLICE_SECONDS, ActionErrorPolicy
from hyoshi.models.exit_code import ExitCode

logger = logging.getLogger(__name__)


class RunResult(HyoshiBaseModel):
    """IntervalRunner の実行結果。

    Attributes:
        exit_code: プロセス終了コード。
        cancellation: ループを終了させたキャンセル要求。アクション失敗による
            終了の場合は None。
        ticks: アクションを呼び出した回数。
        skipped: 超過により飛ばしたインターバルの総数。
    """

    exit_code: int
    cancellation: Cancellation | None
    ticks: int
    skipped: int


class IntervalRunner:
    """アクションを固定間隔で実行し、キャンセル要求で停止するスケジューラ。

    Args:
        interval: 実行間隔（秒、正の値）。
        action: ティックごとに呼び出すアクション。
        cancel_source: キャンセル要求の参照先（通常は SignalGate）。
        slice_seconds: 1 回のスリープの上限（秒）。キャンセル検知の遅延上限になる。
        on_action_error: アクションが例外を送出した場合の方針。
        teardown: クリーンアップ時に呼び出す後処理。
        clock: 単調増加する現在時刻の取得関数。
        sleep: 指定秒数だけ待機する関数。
    """

    def __init__(
        self,
        interval: float,
        action: Action,
        cancel_source: CancelSource,
        *,
        slice_seconds: float = DEFAULT_SLICE_SECONDS,
        on_action_error: ActionErrorPolicy = ActionErrorPolicy.PROPAGATE,
        teardown: Callable[[], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        if slice_seconds <= 0:
            raise ValueError(f"slice_seconds must be positive, got {slice_seconds}")
        self._interval = interval
        self._action = action
        self._cancel_source = cancel_source
        self._slice_seconds = slice_seconds
        self._on_action_error = on_action_error
        self._teardown = teardown
        self._clock = clock
        self._sleep = sleep

    @property
    def interval(self) -> float:
        return self._interval

    def run(self) -> RunResult:
        """キャンセル要求を受けるまでアクションを繰り返し実行する。

        Returns:
            RunResult: 終了コードと実行統計。

        Raises:
            Exception: on_action_error が PROPAGATE のとき、アクションが
                送出した例外をそのまま送出する（クリーンアップは行わない）。
        """
        logger.info("Start.")
        origin = self._clock()
        index = 0
        ticks = 0
        skipped = 0
        cancellation: Cancellation | None = None
        action_failed = False

        while True:
            ticks += 1
            if not self._invoke_action():
                action_failed = True
                break

            step = next_target(origin, self._interval, index, self._clock())
            index = step.index
            if step.skipped:
                skipped += step.skipped
                logger.debug("Overrun: skipped %d interval(s)", step.skipped)

            cancellation = self._sleep_until(step.target)
            if cancellation is not None:
                logger.info(
                    "Cancellation requested: %s (signal %d)",
                    cancellation.reason,
                    cancellation.signum,
                )
                break

        self._cleanup()
        exit_code = (
            ExitCode.ACTION_ERROR if action_failed else determine_exit_code(cancellation)
        )
        return RunResult(
            exit_code=exit_code,
            cancellation=cancellation,
            ticks=ticks,
            skipped=skipped,
        )

    def _invoke_action(self) -> bool:
        """アクションを 1 回実行する。

        Returns:
            スケジュールを継続する場合は True。EXIT 方針でアクションが
            失敗した場合は False。
        """
        if self._on_action_error is ActionErrorPolicy.PROPAGATE:
            self._action()
            return True
        try:
            self._action()
        except Exception as exc:
            logger.error("Action failed: %s", exc)
            return self._on_action_error is ActionErrorPolicy.CONTINUE
        return True

    def _sleep_until(self, target: float) -> Cancellation | None:
        """target までスライス単位でスリープする。

        スライスの前後でキャンセル要求を確認し、要求があれば即座に返す。
        目標時刻を過ぎてから目覚めた場合も正常として扱う。

        Returns:
            キャンセル要求。目標時刻まで要求がなければ None。
        """
        while True:
            cancellation = self._cancel_source.requested_reason()
            if cancellation is not None:
                return cancellation
            now = self._clock()
            sleep_until = min(target, now + self._slice_seconds)
            if sleep_until > now:
                self._sleep(sleep_until - now)
            if sleep_until >= target:
                return self._cancel_source.requested_reason()

    def _cleanup(self) -> None:
        """後処理を実行し、開始と完了をログに記録する。"""
        logger.info("Cleaning up!")
        if self._teardown is not None:
            self._teardown()
        logger.info("Done.")
