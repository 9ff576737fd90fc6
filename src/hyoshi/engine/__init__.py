"""スケジューリングエンジン。

以下の構成で固定間隔のアクション実行を行う:

1. SignalGate: 停止シグナルをキャンセル要求として記録
2. IntervalRunner: ドリフトのない間隔でアクションを実行し、キャンセルで停止
3. Action: ティックごとの処理（LogAction / CommandAction）
"""

from hyoshi.engine._action import Action, ActionError, CommandAction, LogAction
from hyoshi.engine._log import configure_logging
from hyoshi.engine._runner import IntervalRunner, RunResult
from hyoshi.engine._schedule import ScheduleStep, next_target
from hyoshi.engine._signal import CancelSource, SetupError, SignalGate

__all__ = [
    "Action",
    "ActionError",
    "CancelSource",
    "CommandAction",
    "IntervalRunner",
    "LogAction",
    "RunResult",
    "ScheduleStep",
    "SetupError",
    "SignalGate",
    "configure_logging",
    "next_target",
]
