"""hyoshi ドメインモデルパッケージ。"""

from hyoshi.models._base import HyoshiBaseModel
from hyoshi.models.cancellation import (
    CancelReason,
    Cancellation,
    determine_exit_code,
)
from hyoshi.models.config import ActionErrorPolicy, HyoshiConfig, LogLevel
from hyoshi.models.exit_code import ExitCode

__all__ = [
    "ActionErrorPolicy",
    "CancelReason",
    "Cancellation",
    "ExitCode",
    "HyoshiBaseModel",
    "HyoshiConfig",
    "LogLevel",
    "determine_exit_code",
]
