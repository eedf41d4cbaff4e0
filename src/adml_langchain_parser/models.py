# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

CONTENT_ITEM_KEYS = ("type", "value", "mods", "props")


class ContentItem(BaseModel):
    """`[[ ... ]]` 콘텐츠 블록의 한 항목 (heading, paragraph, image, 컴포넌트 ...).

    파서 출력은 plain dict이며, 이 모델은 그 dict의 모양을 정의한다.
    비어 있는 mods/props와 없는(또는 빈 문자열) value는 dict에서 생략된다.
    """
    model_config = ConfigDict(extra="forbid", strict=True)

    type: str
    value: Any = None
    mods: List[Any] = Field(default_factory=list)
    props: Dict[str, Any] = Field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type}
        if self.value is not None and self.value != "":
            out["value"] = self.value
        if self.mods:
            out["mods"] = list(self.mods)
        if self.props:
            out["props"] = self.props
        return out


class InlineItem(BaseModel):
    """인라인 마크업(`[value | #type.mod | key: value]`)의 한 조각."""
    model_config = ConfigDict(extra="forbid", strict=True)

    type: str
    value: str
    mods: List[str] = Field(default_factory=list)
    props: Dict[str, Any] = Field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type, "value": self.value}
        if self.mods:
            out["mods"] = list(self.mods)
        if self.props:
            out["props"] = self.props
        return out


def content_item(
    type: str,
    value: Any = None,
    mods: Optional[List[Any]] = None,
    props: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return ContentItem(type=type, value=value, mods=mods or [], props=props or {}).as_dict()


def is_content_item(obj: Any) -> bool:
    """구조적 판별: `type`(str)이 있고 ContentItem 외의 키가 없는 mapping."""
    if not isinstance(obj, dict) or "type" not in obj:
        return False
    try:
        ContentItem.model_validate(obj)
    except ValidationError:
        return False
    return True


def is_content_block(value: Any) -> bool:
    """리스트를 `[[ ]]`로 써야 하는지. 빈 리스트는 일반 배열로 취급."""
    if not isinstance(value, list) or not value:
        return False
    return all(is_content_item(item) for item in value)
