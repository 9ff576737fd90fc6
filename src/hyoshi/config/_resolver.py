"""設定リゾルバー。

5層の設定ソースを項目単位でマージし HyoshiConfig を構築する。
CLI オプションの None は未指定として除外する。
"""

from __future__ import annotations

from pathlib import Path

from hyoshi.config._sources import (
    find_pyproject,
    project_config,
    read_tool_section,
    read_toml,
    user_config_path,
)
from hyoshi.models.config import HyoshiConfig


def merge_config_layers(
    *layers: dict[str, object] | None,
) -> dict[str, object]:
    """複数の設定レイヤーを項目単位でマージする。

    後のレイヤーが先のレイヤーを上書きする。None のレイヤーはスキップされる。

    Args:
        layers: マージ対象の設定辞書。低優先度から高優先度の順。

    Returns:
        マージ済みの設定辞書。
    """
    result: dict[str, object] = {}
    for layer in layers:
        if layer is None:
            continue
        result.update(layer)
    return result


def filter_cli_overrides(cli_options: dict[str, object]) -> dict[str, object]:
    """CLI オプション辞書から None 値を除外する。

    None 値は「未指定」を意味し、マージ対象から除外する。
    """
    return {k: v for k, v in cli_options.items() if v is not None}


def resolve_config(
    start_dir: Path | None = None,
    cli_overrides: dict[str, object] | None = None,
) -> HyoshiConfig:
    """5層の設定ソースを解決し HyoshiConfig を構築する。

    CLI > .hyoshi/config.toml > pyproject.toml [tool.hyoshi]
        > ~/.config/hyoshi/config.toml > デフォルト値

    設定ファイルが存在しない場合は該当レイヤーをスキップし、次のレイヤーに進む。

    Args:
        start_dir: 探索開始ディレクトリ。None の場合はカレントディレクトリ。
        cli_overrides: CLI オプションの辞書。None 値は未指定扱い。

    Returns:
        解決済みの HyoshiConfig インスタンス。

    Raises:
        pydantic.ValidationError: マージ後の設定が不正な場合。
        tomllib.TOMLDecodeError: 設定ファイルの TOML 構文が不正な場合。
        PermissionError: 設定ファイルの読み取り権限がない場合。
    """
    effective_start = start_dir if start_dir is not None else Path.cwd()

    # Layer 1 (最低優先): ユーザーグローバル設定
    user_layer = read_toml(user_config_path())

    # Layer 2: pyproject.toml [tool.hyoshi]
    pyproject_path = find_pyproject(effective_start)
    pyproject_layer = read_tool_section(pyproject_path) if pyproject_path is not None else None

    # Layer 3: .hyoshi/config.toml
    config_layer = project_config(effective_start)

    # Layer 4 (最高優先): CLI overrides
    cli_layer: dict[str, object] | None = None
    if cli_overrides is not None:
        cli_layer = filter_cli_overrides(cli_overrides)

    merged = merge_config_layers(user_layer, pyproject_layer, config_layer, cli_layer)

    # Layer 5 (最低優先): デフォルト値 -- HyoshiConfig のフィールドデフォルトが適用される
    return HyoshiConfig.model_validate(merged)
