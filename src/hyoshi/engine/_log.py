"""ログ出力の整形と設定。

全ての診断情報を単一のテキストストリーム（既定は stdout）へ、
タイムスタンプと重大度プレフィックス付きの 1 行として出力する。

出力形式: ``<prefix><timestamp> <message>``
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType
from typing import Final, TextIO

from hyoshi.models.config import LogLevel

ROOT_LOGGER_NAME: Final[str] = "hyoshi"
_HANDLER_NAME: Final[str] = "hyoshi-stream"

LEVEL_PREFIXES: Final[Mapping[int, str]] = MappingProxyType(
    {
        logging.WARNING: "### WARNING: ",
        logging.ERROR: "### ERROR: ",
        logging.CRITICAL: "### FATAL ERROR: ",
    }
)
"""ログレベルごとの行頭プレフィックス。DEBUG/INFO はプレフィックスなし。"""

_LOG_LEVELS: Final[Mapping[LogLevel, int]] = MappingProxyType(
    {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
    }
)


def _format_utc_offset(offset_seconds: int) -> str:
    """UTC オフセット秒を ``+HH:MM`` 形式に変換する。"""
    sign = "-" if offset_seconds < 0 else "+"
    hours, remainder = divmod(abs(offset_seconds), 3600)
    return f"{sign}{hours:02d}:{remainder // 60:02d}"


def format_timestamp(created: float) -> str:
    """RFC 3339 形式（ミリ秒・UTC オフセット付き）のタイムスタンプを返す。

    ミリ秒付きのローカル時刻を得られない場合は、秒精度の現在時刻に
    固定の ``.000`` を付けた文字列にフォールバックする。

    Args:
        created: エポック秒（``LogRecord.created``）。

    Returns:
        例: ``2026-10-17T12:34:56.789+09:00``
    """
    try:
        return datetime.fromtimestamp(created).astimezone().isoformat(
            timespec="milliseconds"
        )
    except (OverflowError, OSError, ValueError):
        local = time.localtime()
        return time.strftime("%Y-%m-%dT%H:%M:%S", local) + ".000" + _format_utc_offset(
            local.tm_gmtoff
        )


class PrefixFormatter(logging.Formatter):
    """重大度プレフィックスとタイムスタンプを付与するフォーマッタ。"""

    def format(self, record: logging.LogRecord) -> str:
        prefix = LEVEL_PREFIXES.get(record.levelno, "")
        line = f"{prefix}{format_timestamp(record.created)} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def to_logging_level(level: LogLevel) -> int:
    """LogLevel を logging モジュールの数値レベルに変換する。"""
    return _LOG_LEVELS[level]


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    stream: TextIO | None = None,
) -> logging.Handler:
    """hyoshi ロガーにストリームハンドラを 1 つだけ設定する。

    繰り返し呼び出しても以前に設定したハンドラを置き換えるだけで、
    ハンドラは重複しない。

    Args:
        level: 出力する最低ログレベル。
        stream: 出力先ストリーム。None の場合は呼び出し時点の sys.stdout。

    Returns:
        設定したハンドラ。
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for existing in list(logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logger.removeHandler(existing)

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(PrefixFormatter())
    logger.addHandler(handler)
    logger.setLevel(to_logging_level(level))
    return handler
