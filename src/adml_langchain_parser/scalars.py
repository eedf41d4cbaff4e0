# -*- coding: utf-8 -*-
from __future__ import annotations

import re
from decimal import Decimal
from typing import Any, Union

Scalar = Union[str, float, bool]

_NUMBER_RE = re.compile(r"-?[0-9]+(?:\.[0-9]+)?")


def coerce_scalar(raw: str) -> Scalar:
    """트림된 토큰을 bool / float / str 중 하나로 변환.

    - `true` / `false` (정확히 일치할 때만) -> bool
    - `-?digits(.digits)?` 전체 일치 -> float
    - 그 외(`34px`, `v1.2.3`, `trueish` 등) -> 원문 문자열 그대로
    """
    if raw == "true":
        return True
    if raw == "false":
        return False
    if _NUMBER_RE.fullmatch(raw):
        return float(raw)
    return raw


def format_scalar(value: Any) -> str:
    """coerce_scalar의 역변환. 다시 coerce하면 같은 값이 나와야 한다."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return str(value)
        if value.is_integer():
            return str(int(value))
        # repr은 최단 왕복 표현이지만 1e-07 같은 지수 표기를 만들 수 있음
        return format(Decimal(repr(value)), "f")
    return str(value)


def is_plain_scalar_text(text: str) -> bool:
    """한 줄 `key: value` 형태로 써도 같은 문자열로 다시 읽히는지."""
    if text != text.strip():
        return False
    return isinstance(coerce_scalar(text), str)
