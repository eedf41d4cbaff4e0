# -*- coding: utf-8 -*-
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List

from .adml_parser import (
    ADMLEncodeError,
    ARRAY_CLOSE,
    ARRAY_OPEN,
    CONTENT_CLOSE,
    CONTENT_OPEN,
    LINE_COMMENT,
    MULTILINE_MARK,
    OBJECT_CLOSE,
    OBJECT_OPEN,
    PROPS_CLOSE,
    PROPS_OPEN,
    TYPE_SIGIL,
)
from .models import is_content_block
from .scalars import format_scalar, is_plain_scalar_text


@dataclass
class ADMLSerializer:
    """dict 값 트리 -> ADML 텍스트.

    바이트 단위 복원이 아니라 의미 단위 왕복을 보장한다:
    `parse(serialize(parse(x))) == parse(x)`.

    - strict=False: None 값은 건너뛰고, 표현 불가능한 배열 원소는 JSON으로 기록
    - strict=True: 위 경우 ADMLEncodeError
    - 다시 읽으면 달라지는 키나 콘텐츠 헤더는 모드와 관계없이 ADMLEncodeError
    """

    indent: int = 2
    strict: bool = False

    def encode(self, value: Any) -> str:
        if not isinstance(value, dict):
            raise ADMLEncodeError(f"ADML document root must be a mapping, got {type(value).__name__}")
        lines = self._encode_entries(value, level=0)
        return "\n".join(lines) + "\n" if lines else ""

    # ---------------- Mapping ----------------
    def _encode_entries(self, data: Dict[str, Any], level: int, prefix: str = "") -> List[str]:
        """mapping 항목을 기록. `prefix`가 있으면 `parent.child: value` 점 경로로 쓴다.

        `key: value` 줄로 다시 읽히지 않는 키(빈 키, `:` 포함, 앞뒤 공백)는
        문자열이면 `key::` 형식으로, mapping이면 자식들을 점 경로로 풀어 쓴다.
        그 외에는 ADMLEncodeError.
        """
        pad = " " * (self.indent * level)
        out: List[str] = []
        for key, value in data.items():
            key = str(key)
            if "." in key:
                raise ADMLEncodeError(f"Key {key!r} cannot be written as an ADML key (dots are path separators)")
            path = prefix + key

            if value is None:
                if self.strict:
                    raise ADMLEncodeError(f"{path}: null values are not supported")
                continue

            line_key = _is_line_key(path)
            if isinstance(value, str):
                if line_key and not _needs_multiline(value):
                    out.append(f"{pad}{path}: {value}")
                elif _is_multiline_key(path):
                    out.append(f"{pad}{path}{MULTILINE_MARK}")
                    out.extend(value.split("\n"))
                    out.append(MULTILINE_MARK)
                else:
                    raise ADMLEncodeError(f"Key {path!r} cannot be written as an ADML key")
            elif not line_key:
                if isinstance(value, dict) and value:
                    out.extend(self._encode_entries(value, level, prefix=path + "."))
                else:
                    raise ADMLEncodeError(f"Key {path!r} cannot be written as an ADML key")
            elif isinstance(value, (bool, int, float)):
                out.append(f"{pad}{path}: {format_scalar(value)}")
            elif isinstance(value, list):
                if is_content_block(value):
                    out.append(f"{pad}{path}: {CONTENT_OPEN}")
                    out.extend(self._encode_content(value, level + 1))
                    out.append(f"{pad}{CONTENT_CLOSE}")
                else:
                    out.append(f"{pad}{path}: {ARRAY_OPEN}")
                    out.extend(self._encode_array(value, level + 1))
                    out.append(f"{pad}{ARRAY_CLOSE}")
            elif isinstance(value, dict):
                out.append(f"{pad}{path}: {OBJECT_OPEN}")
                out.extend(self._encode_entries(value, level + 1))
                out.append(f"{pad}{OBJECT_CLOSE}")
            else:
                raise ADMLEncodeError(f"{path}: unsupported value type {type(value).__name__}")
        return out

    # ---------------- Array ----------------
    def _encode_array(self, items: List[Any], level: int) -> List[str]:
        pad = " " * (self.indent * level)
        out: List[str] = []
        for item in items:
            if isinstance(item, list):
                if is_content_block(item):
                    out.append(f"{pad}{CONTENT_OPEN}")
                    out.extend(self._encode_content(item, level + 1))
                    out.append(f"{pad}{CONTENT_CLOSE}")
                else:
                    out.append(f"{pad}{ARRAY_OPEN}")
                    out.extend(self._encode_array(item, level + 1))
                    out.append(f"{pad}{ARRAY_CLOSE}")
            elif isinstance(item, (bool, int, float)):
                out.append(f"{pad}{format_scalar(item)}")
            elif isinstance(item, str):
                if self.strict and not _is_array_safe(item):
                    raise ADMLEncodeError(f"Array item {item!r} cannot be written on a single array line")
                out.append(f"{pad}{item}")
            elif item is None and not self.strict:
                continue
            else:
                # 배열 문법에는 mapping 원소가 없음
                if self.strict:
                    raise ADMLEncodeError(f"Array item of type {type(item).__name__} is not representable")
                out.append(f"{pad}{json.dumps(item, ensure_ascii=False)}")
        return out

    # ---------------- Content block ----------------
    def _encode_content(self, items: List[Dict[str, Any]], level: int) -> List[str]:
        pad = " " * (self.indent * level)
        inner = " " * (self.indent * (level + 1))
        out: List[str] = []
        for item in items:
            ctype = item["type"]
            value = item.get("value")
            mods = item.get("mods") or []
            props = item.get("props") or {}

            if not _is_header_path([ctype]):
                raise ADMLEncodeError(f"Content type {ctype!r} cannot be written in a '#type' header")
            header_mods = _is_header_path([ctype] + list(mods))
            type_mods = ".".join([ctype] + list(mods)) if header_mods else ctype
            nested = is_content_block(value)
            has_value = value is not None and value != ""
            inline_value = not has_value or (isinstance(value, str) and _is_header_safe(value))

            if not props and not nested and inline_value and header_mods:
                if ctype == "p" and not mods and has_value and _is_bare_text_safe(value):
                    out.append(f"{pad}{value}")
                elif has_value:
                    out.append(f"{pad}{TYPE_SIGIL}{type_mods}: {value}")
                else:
                    out.append(f"{pad}{TYPE_SIGIL}{type_mods}")
                continue

            # <...> 블록: 헤더에 담지 못하는 value/mods는 예약 키로 props에 기록
            if "value" in props or isinstance(props.get("mods"), list) or ("mods" in props and not header_mods):
                raise ADMLEncodeError(
                    f"Content item {ctype!r}: props collide with the reserved 'value'/'mods' keys"
                )
            body: Dict[str, Any] = {}
            if nested:
                out.append(f"{pad}{PROPS_OPEN}{TYPE_SIGIL}{type_mods}: {CONTENT_OPEN}")
                out.extend(self._encode_content(value, level + 2))
                out.append(f"{inner}{CONTENT_CLOSE}")
            elif has_value and inline_value:
                out.append(f"{pad}{PROPS_OPEN}{TYPE_SIGIL}{type_mods}: {value}")
            else:
                out.append(f"{pad}{PROPS_OPEN}{TYPE_SIGIL}{type_mods}")
                if has_value:
                    body["value"] = value
            if not header_mods:
                body["mods"] = list(mods)
            body.update(props)

            out.extend(self._encode_entries(body, level + 1))
            out.append(f"{pad}{PROPS_CLOSE}")
        return out


def _needs_multiline(text: str) -> bool:
    """한 줄 `key: value`로 쓰면 다시 같은 문자열로 읽히지 않는 경우."""
    if "\n" in text or "/*" in text:
        return True
    if not is_plain_scalar_text(text):
        return True
    return text.endswith((CONTENT_OPEN, ARRAY_OPEN, OBJECT_OPEN, MULTILINE_MARK))


def _is_header_path(parts: List[Any]) -> bool:
    """`#type.mod1.mod2` 헤더가 parse_content_header에서 같은 조각들로 다시 나뉘는지."""
    if not all(isinstance(p, str) for p in parts):
        return False
    text = ".".join(parts)
    return ":" not in text and "/*" not in text and text.strip().split(".") == parts


def _is_line_key(path: str) -> bool:
    """`path: value` 줄의 키로 다시 읽히는지 (키는 첫 콜론 앞, 트림됨)."""
    return (
        bool(path)
        and path == path.strip()
        and ":" not in path
        and "/*" not in path
        and not path.startswith(LINE_COMMENT)
    )


def _is_multiline_key(path: str) -> bool:
    """`path::` 줄의 키로 다시 읽히는지. 콜론과 빈 키도 허용된다."""
    return path == path.strip() and "/*" not in path and not path.startswith(LINE_COMMENT)


def _is_header_safe(value: str) -> bool:
    return (
        "\n" not in value
        and "/*" not in value
        and value == value.strip()
        and not value.endswith(CONTENT_OPEN)
    )


def _is_bare_text_safe(value: str) -> bool:
    return (
        _is_header_safe(value)
        and not value.startswith((TYPE_SIGIL, PROPS_OPEN, LINE_COMMENT))
        and value != CONTENT_CLOSE
    )


def _is_array_safe(item: str) -> bool:
    return (
        item != ""
        and is_plain_scalar_text(item)
        and "\n" not in item
        and "/*" not in item
        and not item.startswith(LINE_COMMENT)
        and item not in (ARRAY_OPEN, ARRAY_CLOSE, CONTENT_OPEN)
    )


def serialize(value: Dict[str, Any], indent: int = 2, strict: bool = False) -> str:
    """dict 값 트리를 ADML 텍스트로 직렬화."""
    return ADMLSerializer(indent=indent, strict=strict).encode(value)
