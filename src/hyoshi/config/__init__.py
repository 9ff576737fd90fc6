"""設定管理モジュール。"""

from hyoshi.config._sources import find_project_root
from hyoshi.config._resolver import resolve_config

__all__ = [
    "find_project_root",
    "resolve_config",
]
