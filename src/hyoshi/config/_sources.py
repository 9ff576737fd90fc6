"""設定ソースの所在と読み込み。

ユーザー設定・pyproject.toml・.hyoshi/config.toml の 3 ファイルを扱う。
存在しないファイルは None として返し、構文エラーと権限エラーは送出する。
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterator
from pathlib import Path

PROJECT_DIR_NAME = ".hyoshi"
CONFIG_FILE_NAME = "config.toml"
PYPROJECT_FILE_NAME = "pyproject.toml"


def user_config_path() -> Path:
    """~/.config/hyoshi/config.toml のパス。存在は確認しない。"""
    return Path.home() / ".config" / "hyoshi" / CONFIG_FILE_NAME


def _ancestors(start: Path) -> Iterator[Path]:
    resolved = start.resolve()
    yield resolved
    yield from resolved.parents


def find_project_root(start: Path) -> Path | None:
    """.hyoshi/ ディレクトリを持つ最も近い祖先ディレクトリを返す。"""
    for directory in _ancestors(start):
        if (directory / PROJECT_DIR_NAME).is_dir():
            return directory
    return None


def find_pyproject(start: Path) -> Path | None:
    """最も近い祖先の pyproject.toml を返す。同名のディレクトリは無視する。"""
    for directory in _ancestors(start):
        candidate = directory / PYPROJECT_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def read_toml(path: Path) -> dict[str, object] | None:
    """TOML ファイルを辞書として読む。ファイルがなければ None。

    Raises:
        tomllib.TOMLDecodeError: 構文エラー。
        PermissionError: 読み取り権限がない。
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return None


def read_tool_section(path: Path) -> dict[str, object] | None:
    """pyproject.toml の [tool.hyoshi] を返す。テーブルでなければ None。"""
    data = read_toml(path) or {}
    tool = data.get("tool")
    section = tool.get("hyoshi") if isinstance(tool, dict) else None
    return section if isinstance(section, dict) else None


def project_config(start: Path) -> dict[str, object] | None:
    """.hyoshi/config.toml の内容。プロジェクトかファイルがなければ None。"""
    root = find_project_root(start)
    if root is None:
        return None
    return read_toml(root / PROJECT_DIR_NAME / CONFIG_FILE_NAME)
