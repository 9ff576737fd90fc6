"""設定管理モデル。

実行間隔・スライス幅・アクション失敗時の方針・ログレベルなど
プロセス寿命中に変化しない設定項目を定義する。
"""

from __future__ import annotations

import signal
from enum import StrEnum
from typing import Annotated, Final

from pydantic import Field, StringConstraints, field_validator

from hyoshi.models._base import HyoshiBaseModel, normalize_enum_value

DEFAULT_INTERVAL_SECONDS: Final[float] = 10.0
DEFAULT_SLICE_SECONDS: Final[float] = 0.5

# 停止シグナルとして扱うため observe_signals には指定できない
RESERVED_SIGNAL_NAMES: Final[frozenset[str]] = frozenset(
    {"SIGTERM", "SIGQUIT", "SIGINT", "SIGKILL", "SIGSTOP"}
)


class ActionErrorPolicy(StrEnum):
    """アクションが例外を送出した場合の方針。

    PROPAGATE: 例外をそのまま送出しループを終了する（既定）。
    CONTINUE: エラーをログに記録してスケジュールを継続する。
    EXIT: エラーをログに記録し、クリーンアップ後に終了する。
    """

    PROPAGATE = "propagate"
    CONTINUE = "continue"
    EXIT = "exit"


class LogLevel(StrEnum):
    """ログ出力レベル。"""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class HyoshiConfig(HyoshiBaseModel):
    """全設定項目を統合した不変モデル。

    デフォルト値のみで有効なインスタンスを構築可能。
    """

    # スケジュール設定
    interval: float = Field(default=DEFAULT_INTERVAL_SECONDS, gt=0)
    slice_seconds: float = Field(default=DEFAULT_SLICE_SECONDS, gt=0)

    # アクション設定
    command: tuple[Annotated[str, StringConstraints(min_length=1)], ...] = ()
    command_timeout: float | None = Field(default=None, gt=0)
    on_action_error: ActionErrorPolicy = ActionErrorPolicy.PROPAGATE

    # シグナル設定
    observe_signals: tuple[str, ...] = ()

    # ログ設定
    log_level: LogLevel = LogLevel.INFO

    @field_validator("on_action_error", mode="before")
    @classmethod
    def normalize_policy(cls, v: object) -> object:
        """大文字小文字を区別せずに方針名を受け付ける。"""
        return normalize_enum_value(v, ActionErrorPolicy)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        """大文字小文字を区別せずにログレベル名を受け付ける。"""
        return normalize_enum_value(v, LogLevel)

    @field_validator("observe_signals")
    @classmethod
    def validate_signal_names(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """シグナル名がこのプラットフォームで有効かを検証する。

        別名を含め、同じシグナル番号を二度指定することはできない。
        """
        available = signal.Signals.__members__
        seen: dict[int, str] = {}
        for name in v:
            if name in RESERVED_SIGNAL_NAMES:
                msg = f"Signal '{name}' cannot be observed: it is reserved"
                raise ValueError(msg)
            if name not in available:
                msg = f"Unknown signal name '{name}'"
                raise ValueError(msg)
            signum = int(available[name])
            if signum in seen:
                msg = f"Signal '{name}' is listed more than once (as '{seen[signum]}')"
                raise ValueError(msg)
            seen[signum] = name
        return v
