"""ExitCode — 終了コードの定義。

シグナル由来の終了コード（SIGINT/SIGQUIT）は列挙値ではなく
models.cancellation.determine_exit_code で算出する。
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """プロセス終了コード。

    0 は正常終了、1 はシグナルハンドラ登録失敗などの致命的エラー、
    4 は CLI 層固有の入力・設定エラー、5 はアクション失敗。
    2 と 3 は SIGINT と SIGQUIT の算出値と重なるため使用しない。
    143 は SIGTERM によるグレースフル終了（128 + SIGTERM の慣例値）。
    """

    SUCCESS = 0
    FATAL = 1
    INPUT_ERROR = 4
    ACTION_ERROR = 5
    TERMINATED = 143
