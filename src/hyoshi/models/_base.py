"""ドメインモデル共通の基底クラス。"""

from enum import StrEnum
from typing import TypeVar

from pydantic import BaseModel, ConfigDict


class HyoshiBaseModel(BaseModel):
    """未定義フィールドを拒否する不変モデル。"""

    model_config = ConfigDict(extra="forbid", frozen=True)


E = TypeVar("E", bound=StrEnum)


def normalize_enum_value(v: object, enum_cls: type[E]) -> object:
    """設定ファイルや CLI の文字列を enum_cls の正規値に寄せる。

    前後の空白と大文字小文字を無視する。一致しない入力はそのまま返し、
    エラー報告は pydantic に任せる。
    """
    if not isinstance(v, str):
        return v
    canonical = {member.value.casefold(): member.value for member in enum_cls}
    return canonical.get(v.strip().casefold(), v)
