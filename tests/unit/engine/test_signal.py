"""SignalGate のテスト。

install/uninstall、最初のシグナル優先、未知シグナルの無視を検証する。
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Iterator

import pytest

from hyoshi.engine._signal import (
    RECOGNIZED_SIGNALS,
    SetupError,
    SignalGate,
    _lookup_signal,
)
from hyoshi.models.cancellation import CancelReason, determine_exit_code
from hyoshi.models.exit_code import ExitCode


@pytest.fixture
def installed_gate() -> Iterator[SignalGate]:
    """ハンドラを登録済みの SignalGate。テスト後に元のハンドラを復元する。"""
    gate = SignalGate()
    gate.install()
    try:
        yield gate
    finally:
        gate.uninstall()


# =============================================================================
# handle
# =============================================================================


class TestInitialState:
    """初期状態ではキャンセル要求なし。"""

    def test_requested_reason_is_none(self) -> None:
        assert SignalGate().requested_reason() is None


class TestHandleRecognizedSignals:
    """既知の停止シグナルの記録。"""

    @pytest.mark.parametrize(
        ("signum", "reason"),
        [
            (signal.SIGTERM, CancelReason.TERMINATE),
            (signal.SIGQUIT, CancelReason.QUIT),
            (signal.SIGINT, CancelReason.INTERRUPT),
        ],
    )
    def test_records_reason(self, signum: int, reason: CancelReason) -> None:
        gate = SignalGate()
        gate.handle(signum, None)
        cancellation = gate.requested_reason()
        assert cancellation is not None
        assert cancellation.reason is reason
        assert cancellation.signum == signum

    def test_first_signal_wins(self) -> None:
        """SIGTERM の後に SIGINT を受信しても SIGTERM の理由が残る。"""
        gate = SignalGate()
        gate.handle(signal.SIGTERM, None)
        gate.handle(signal.SIGINT, None)
        cancellation = gate.requested_reason()
        assert cancellation is not None
        assert cancellation.reason is CancelReason.TERMINATE
        assert determine_exit_code(cancellation) == ExitCode.TERMINATED

    def test_repeated_signal_is_idempotent(self) -> None:
        gate = SignalGate()
        gate.handle(signal.SIGINT, None)
        first = gate.requested_reason()
        gate.handle(signal.SIGINT, None)
        assert gate.requested_reason() is first


class TestHandleUnknownSignals:
    """未知のシグナルはログに記録され、状態を変えない。"""

    def test_state_unchanged(self) -> None:
        gate = SignalGate()
        gate.handle(signal.SIGUSR1, None)
        assert gate.requested_reason() is None

    def test_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="hyoshi")
        SignalGate().handle(signal.SIGUSR1, None)
        assert f"Unknown signal received: {int(signal.SIGUSR1)}" in caplog.text

    def test_recognized_signal_after_unknown_still_recorded(self) -> None:
        gate = SignalGate()
        gate.handle(signal.SIGUSR1, None)
        gate.handle(signal.SIGQUIT, None)
        cancellation = gate.requested_reason()
        assert cancellation is not None
        assert cancellation.reason is CancelReason.QUIT


# =============================================================================
# install / uninstall
# =============================================================================


class TestInstall:
    """ハンドラ登録。"""

    def test_registers_all_recognized_signals(self, installed_gate: SignalGate) -> None:
        for name in RECOGNIZED_SIGNALS:
            assert signal.getsignal(getattr(signal, name)) == installed_gate.handle

    def test_delivered_signal_is_recorded(self, installed_gate: SignalGate) -> None:
        signal.raise_signal(signal.SIGTERM)
        cancellation = installed_gate.requested_reason()
        assert cancellation is not None
        assert cancellation.reason is CancelReason.TERMINATE

    def test_observed_signal_registered_but_ignored(self) -> None:
        gate = SignalGate()
        gate.install(observed=["SIGUSR2"])
        try:
            assert signal.getsignal(signal.SIGUSR2) == gate.handle
            signal.raise_signal(signal.SIGUSR2)
            assert gate.requested_reason() is None
        finally:
            gate.uninstall()


class TestInstallErrors:
    """登録失敗は SetupError。"""

    def test_unknown_signal_name(self) -> None:
        before = signal.getsignal(signal.SIGTERM)
        gate = SignalGate()
        with pytest.raises(SetupError, match="SIGNOPE"):
            gate.install(observed=["SIGNOPE"])
        assert signal.getsignal(signal.SIGTERM) == before

    def test_outside_main_thread(self) -> None:
        """メインスレッド以外からの登録は SetupError。"""
        errors: list[BaseException] = []

        def target() -> None:
            try:
                SignalGate().install()
            except BaseException as exc:
                errors.append(exc)

        thread = threading.Thread(target=target)
        thread.start()
        thread.join()
        assert len(errors) == 1
        assert isinstance(errors[0], SetupError)

    def test_lookup_missing_signal(self) -> None:
        with pytest.raises(SetupError, match="not available"):
            _lookup_signal("SIGNOPE")


class TestUninstall:
    """ハンドラ解除。"""

    def test_restores_previous_handlers(self) -> None:
        before = {name: signal.getsignal(getattr(signal, name)) for name in RECOGNIZED_SIGNALS}
        gate = SignalGate()
        gate.install()
        gate.uninstall()
        after = {name: signal.getsignal(getattr(signal, name)) for name in RECOGNIZED_SIGNALS}
        assert after == before

    def test_uninstall_without_install_is_noop(self) -> None:
        SignalGate().uninstall()

    def test_duplicate_observed_signal_restored(self) -> None:
        """同じシグナルを二度指定しても元のハンドラが復元される。"""
        before = signal.getsignal(signal.SIGHUP)
        gate = SignalGate()
        gate.install(observed=["SIGHUP", "SIGHUP"])
        assert signal.getsignal(signal.SIGHUP) == gate.handle
        gate.uninstall()
        assert signal.getsignal(signal.SIGHUP) == before

    def test_observed_stop_signal_keeps_original_handler(self) -> None:
        """停止シグナルを observed に重ねても二重登録されない。"""
        before = signal.getsignal(signal.SIGTERM)
        gate = SignalGate()
        gate.install(observed=["SIGTERM"])
        gate.uninstall()
        assert signal.getsignal(signal.SIGTERM) == before
