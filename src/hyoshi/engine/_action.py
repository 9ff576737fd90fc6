"""ティックごとに実行するアクション。

LogAction は既定のプレースホルダー、CommandAction は外部コマンドを実行する。
アクションの失敗は ActionError として送出し、扱いは IntervalRunner の
ActionErrorPolicy に委ねる。
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence
from typing import Protocol

logger = logging.getLogger(__name__)


class ActionError(Exception):
    """アクションの実行に失敗したことを示すエラー。"""


class Action(Protocol):
    """引数・戻り値なしで 1 ティックに 1 回呼び出されるアクション。"""

    def __call__(self) -> None: ...


class LogAction:
    """ティックごとに ``Action!`` をログに記録するだけのアクション。"""

    def __call__(self) -> None:
        logger.info("Action!")


class CommandAction:
    """ティックごとに外部コマンドを実行するアクション。

    コマンドの標準出力・標準エラーはプロセスのものを引き継ぐ。
    """

    def __init__(self, argv: Sequence[str], timeout: float | None = None) -> None:
        if not argv:
            raise ValueError("CommandAction requires a non-empty command")
        self._argv: tuple[str, ...] = tuple(argv)
        self._timeout = timeout

    @property
    def argv(self) -> tuple[str, ...]:
        return self._argv

    @property
    def timeout(self) -> float | None:
        return self._timeout

    def __call__(self) -> None:
        """コマンドを実行し、完了まで待機する。

        Raises:
            ActionError: 非ゼロ終了、タイムアウト、または起動失敗の場合。
        """
        command_line = shlex.join(self._argv)
        logger.debug("Running command: %s", command_line)
        try:
            subprocess.run(self._argv, check=True, timeout=self._timeout)
        except subprocess.CalledProcessError as exc:
            raise ActionError(
                f"Command exited with status {exc.returncode}: {command_line}"
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise ActionError(
                f"Command timed out after {exc.timeout}s: {command_line}"
            ) from exc
        except OSError as exc:
            raise ActionError(f"Could not run command {command_line}: {exc}") from exc
