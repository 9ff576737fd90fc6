"""Cancellation — キャンセル要求とその理由。

SignalGate が最初に受信した停止シグナルを記録し、
IntervalRunner がそこから終了コードを導出する。
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

from pydantic import Field

from hyoshi.models._base import HyoshiBaseModel
from hyoshi.models.exit_code import ExitCode

SIGNAL_EXIT_OFFSET: Final[int] = 256
"""SIGQUIT/SIGINT の終了コードに加算するオフセット。"""

EXIT_STATUS_MASK: Final[int] = 0xFF
"""POSIX の終了ステータスとして有効な範囲（0-255）へ切り詰めるマスク。"""


class CancelReason(StrEnum):
    """キャンセル要求の分類。"""

    TERMINATE = "terminate"
    QUIT = "quit"
    INTERRUPT = "interrupt"


class Cancellation(HyoshiBaseModel):
    """最初に受信した停止シグナルの記録。一度記録されたら変化しない。

    Attributes:
        reason: キャンセル要求の分類。
        signum: 受信したシグナル番号。
    """

    reason: CancelReason
    signum: int = Field(ge=1)


def determine_exit_code(cancellation: Cancellation | None) -> int:
    """キャンセル要求から終了コードを決定する。

    - キャンセルなし: ExitCode.SUCCESS
    - terminate: ExitCode.TERMINATED
    - quit / interrupt: (256 + signum) を 0-255 に切り詰めた値

    Args:
        cancellation: 記録済みのキャンセル要求。要求がない場合は None。

    Returns:
        プロセス終了コード。
    """
    if cancellation is None:
        return ExitCode.SUCCESS
    if cancellation.reason is CancelReason.TERMINATE:
        return ExitCode.TERMINATED
    return (SIGNAL_EXIT_OFFSET + cancellation.signum) & EXIT_STATUS_MASK
