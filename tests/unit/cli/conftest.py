"""CLI テスト共通フィクスチャ・ヘルパー。"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from hyoshi.engine import RunResult
from hyoshi.models.cancellation import CancelReason, Cancellation
from hyoshi.models.exit_code import ExitCode

PATCH_RESOLVE_CONFIG = "hyoshi.cli._app.resolve_config"
PATCH_SIGNAL_GATE = "hyoshi.cli._app.SignalGate"
PATCH_INTERVAL_RUNNER = "hyoshi.cli._app.IntervalRunner"
PATCH_USER_CONFIG_PATH = "hyoshi.config._resolver.user_config_path"


@pytest.fixture
def isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """カレントディレクトリを空のプロジェクトにし、ユーザー設定を無効化する。"""
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    with patch(PATCH_USER_CONFIG_PATH, return_value=tmp_path / "missing.toml"):
        yield project


def make_run_result(
    exit_code: int = ExitCode.TERMINATED,
    cancellation: Cancellation | None = None,
) -> RunResult:
    """テスト用の最小 RunResult を生成する。"""
    if cancellation is None and exit_code == ExitCode.TERMINATED:
        cancellation = Cancellation(reason=CancelReason.TERMINATE, signum=15)
    return RunResult(exit_code=exit_code, cancellation=cancellation, ticks=1, skipped=0)
