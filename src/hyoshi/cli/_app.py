"""CliApp — Typer アプリケーション定義。

run: 設定を解決し、シグナルハンドラを登録してスケジューラを起動する。
config: 解決済みの設定を表示する。
--version: バージョン番号を表示する。

プロセスの終了コードを決定するのはこのモジュールだけである。
"""

from __future__ import annotations

import importlib.metadata
import logging
import sys
import tomllib
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from hyoshi.config import resolve_config
from hyoshi.engine import (
    Action,
    CommandAction,
    IntervalRunner,
    LogAction,
    SetupError,
    SignalGate,
    configure_logging,
)
from hyoshi.models.config import ActionErrorPolicy, HyoshiConfig, LogLevel
from hyoshi.models.exit_code import ExitCode

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="hyoshi",
    help=(
        "Run an action on a fixed interval shorter than a minute.\n\n"
        "Missed intervals are skipped rather than queued. "
        "SIGTERM, SIGQUIT and SIGINT stop the loop cleanly."
    ),
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    """--version 指定時にバージョン番号を出力して終了する。"""
    if value:
        print(importlib.metadata.version("hyoshi"))
        raise typer.Exit()


def main() -> None:
    """CLI エントリポイント。pyproject.toml の [project.scripts] から呼び出される。"""
    app()


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Run an action on a fixed interval shorter than a minute."""


@app.command()
def run(
    command: Annotated[
        list[str] | None,
        typer.Argument(
            help="Command to execute on each tick. Put it after '--'.",
            show_default=False,
        ),
    ] = None,
    interval: Annotated[
        float | None,
        typer.Option(help="Interval in seconds (positive, fractional allowed)."),
    ] = None,
    slice_seconds: Annotated[
        float | None,
        typer.Option(
            "--slice", help="Upper bound of a single sleep in seconds (positive)."
        ),
    ] = None,
    on_action_error: Annotated[
        ActionErrorPolicy | None,
        typer.Option(
            "--on-action-error",
            help="What to do when the action fails: propagate, continue or exit.",
        ),
    ] = None,
    command_timeout: Annotated[
        float | None,
        typer.Option(
            "--command-timeout", help="Timeout in seconds for each command run."
        ),
    ] = None,
    log_level: Annotated[
        LogLevel | None,
        typer.Option("--log-level", help="Minimum log level."),
    ] = None,
) -> None:
    """Run the action every INTERVAL seconds until a stop signal arrives."""
    config_overrides = _build_config_overrides(
        command=command,
        interval=interval,
        slice_seconds=slice_seconds,
        on_action_error=on_action_error,
        command_timeout=command_timeout,
        log_level=log_level,
    )
    config = _load_config(config_overrides)

    configure_logging(config.log_level)

    # 1. シグナルハンドラ登録（失敗は致命的エラー）
    gate = SignalGate()
    try:
        gate.install(observed=config.observe_signals)
    except SetupError as e:
        logger.critical("%s", e)
        raise typer.Exit(code=ExitCode.FATAL) from None

    # 2. スケジューラ実行
    runner = IntervalRunner(
        config.interval,
        _build_action(config),
        gate,
        slice_seconds=config.slice_seconds,
        on_action_error=config.on_action_error,
    )
    try:
        result = runner.run()
    except (KeyboardInterrupt, SystemExit):
        raise
    except Exception as e:
        logger.critical("Action failed: %s", e)
        raise typer.Exit(code=ExitCode.ACTION_ERROR) from e
    finally:
        gate.uninstall()

    # 3. 終了コード
    raise typer.Exit(code=result.exit_code)


@app.command("config")
def show_config(
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the configuration as JSON.")
    ] = False,
) -> None:
    """Show the resolved configuration."""
    config = _load_config({})
    if as_json:
        print(config.model_dump_json(indent=2))
        return

    table = Table(title="hyoshi configuration")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in config.model_dump(mode="json").items():
        table.add_row(key, _format_value(value))
    Console().print(table)


def _format_value(value: object) -> str:
    """設定値を表示用文字列に変換する。"""
    if value is None:
        return "-"
    if isinstance(value, list):
        return " ".join(str(v) for v in value) if value else "-"
    return str(value)


def _load_config(config_overrides: dict[str, object]) -> HyoshiConfig:
    """設定を解決する。エラー時はメッセージを stderr に出力して終了する。"""
    try:
        return resolve_config(cli_overrides=config_overrides)
    except (ValidationError, tomllib.TOMLDecodeError) as e:
        print(
            f"Error: Invalid configuration: {e}\n"
            "Check .hyoshi/config.toml and [tool.hyoshi] in pyproject.toml "
            "for syntax errors or invalid values.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None
    except PermissionError as e:
        print(
            f"Error: Cannot read configuration file: {e}\n"
            "Check file permissions for .hyoshi/config.toml.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None


def _build_config_overrides(
    *,
    command: list[str] | None,
    interval: float | None,
    slice_seconds: float | None,
    on_action_error: ActionErrorPolicy | None,
    command_timeout: float | None,
    log_level: LogLevel | None,
) -> dict[str, object]:
    """CLI オプションから config_overrides 辞書を構築する。

    None 値と空のコマンドは「未指定」として除外する。
    CLI オプション名 --slice は config キー slice_seconds に対応する。
    """
    raw: dict[str, object] = {
        "command": tuple(command) if command else None,
        "interval": interval,
        "slice_seconds": slice_seconds,
        "on_action_error": on_action_error,
        "command_timeout": command_timeout,
        "log_level": log_level,
    }
    return {k: v for k, v in raw.items() if v is not None}


def _build_action(config: HyoshiConfig) -> Action:
    """設定からティックごとのアクションを構築する。"""
    if config.command:
        return CommandAction(config.command, timeout=config.command_timeout)
    return LogAction()
