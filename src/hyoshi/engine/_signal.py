"""SignalGate — 停止シグナルをポーリング可能なキャンセル状態に変換する。

SIGTERM（グレースフル終了）、SIGQUIT、SIGINT の 3 種を停止要求として扱う。
最初に受信したシグナルだけが記録され、以降のシグナルは状態を変えない。

シグナルハンドラはメインスレッドの任意のバイトコード境界で実行されるため、
ハンドラ内では待機を伴う処理を行わない。記録は一度だけ取得され解放されない
Lock の非ブロッキング取得（test-and-set）で行う。
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Iterable, Mapping
from types import FrameType, MappingProxyType
from typing import Final, Protocol

from hyoshi.models.cancellation import CancelReason, Cancellation

logger = logging.getLogger(__name__)

RECOGNIZED_SIGNALS: Final[Mapping[str, CancelReason]] = MappingProxyType(
    {
        "SIGTERM": CancelReason.TERMINATE,
        "SIGQUIT": CancelReason.QUIT,
        "SIGINT": CancelReason.INTERRUPT,
    }
)
"""停止要求として扱うシグナル名と分類。"""


class SetupError(Exception):
    """シグナルハンドラを登録できなかったことを示す致命的エラー。"""


class CancelSource(Protocol):
    """IntervalRunner が参照するキャンセル状態のプロトコル。"""

    def requested_reason(self) -> Cancellation | None:
        """キャンセル要求を返す。要求がなければ None。ブロックしない。"""
        ...


def _lookup_signal(name: str) -> int:
    """シグナル名からシグナル番号を取得する。

    Raises:
        SetupError: このプラットフォームに該当シグナルが存在しない場合。
    """
    signum = getattr(signal, name, None)
    if signum is None:
        raise SetupError(f"Signal {name} is not available on this platform")
    return int(signum)


class SignalGate:
    """停止シグナルを受信し、最初の 1 件をキャンセル要求として保持する。"""

    def __init__(self) -> None:
        self._claim = threading.Lock()
        self._cancellation: Cancellation | None = None
        self._reasons: dict[int, CancelReason] = {}
        for name, reason in RECOGNIZED_SIGNALS.items():
            signum = getattr(signal, name, None)
            if signum is not None:
                self._reasons[int(signum)] = reason
        self._previous: dict[int, object] = {}

    def install(self, observed: Iterable[str] = ()) -> None:
        """停止シグナルと観測対象シグナルのハンドラを登録する。

        observed に指定したシグナルは受信時にログへ記録されるだけで、
        キャンセル状態は変化しない。

        Args:
            observed: 観測のみ行うシグナル名（例: "SIGHUP"）。

        Raises:
            SetupError: シグナルが存在しない、メインスレッド以外から呼ばれた、
                またはハンドラ登録が拒否された場合。登録済みのハンドラは元に戻される。
        """
        names = list(dict.fromkeys([*RECOGNIZED_SIGNALS, *observed]))
        try:
            for name in names:
                signum = _lookup_signal(name)
                # 別名 (SIGIOT と SIGABRT など) で登録済みなら元のハンドラを保持する
                if signum in self._previous:
                    continue
                try:
                    previous = signal.signal(signum, self.handle)
                except (ValueError, OSError) as exc:
                    raise SetupError(f"Could not set {name} handler: {exc}") from exc
                self._previous[signum] = previous
        except SetupError:
            self.uninstall()
            raise
        logger.debug("Signal handlers installed: %s", ", ".join(names))

    def uninstall(self) -> None:
        """install() 以前のハンドラを復元する。未登録の場合は何もしない。"""
        for signum, previous in self._previous.items():
            signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        self._previous.clear()

    def requested_reason(self) -> Cancellation | None:
        """記録済みのキャンセル要求を返す。要求がなければ None。"""
        return self._cancellation

    def handle(self, signum: int, frame: FrameType | None) -> None:
        """シグナルハンドラ本体。

        既知の停止シグナルは最初の 1 件だけを記録する。
        未知のシグナルはログに記録し、状態は変えない。
        """
        reason = self._reasons.get(signum)
        if reason is None:
            logger.info("Unknown signal received: %d", signum)
            return
        if not self._claim.acquire(blocking=False):
            logger.debug("Signal %d ignored: cancellation already requested", signum)
            return
        self._cancellation = Cancellation(reason=reason, signum=signum)
