# -*- coding: utf-8 -*-
"""문자열 값 안에서 쓰는 인라인 마크업.

    A [strong part] of string
    [click here | /about]                  -> a (href 단축형)
    [the value | #em.underlined | id: 1]   -> 명시적 type/mods + props
    []  [/]  [-]                            -> &nbsp;  <br>  &shy;

구조 문법(adml_parser)과는 독립적이며, 호출하는 쪽이 필요한 문자열 값에만 적용한다.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .adml_parser import ADMLDecodeError, TYPE_SIGIL, set_by_path
from .models import InlineItem
from .scalars import coerce_scalar, format_scalar

_LINK_RE = re.compile(r"^(?:/|https?://|@)")

# 괄호 본문 전체가 정확히 일치할 때만
_SPECIAL_FORMS: Dict[str, str] = {
    "": "&nbsp;",
    "/": "<br>",
    "-": "&shy;",
}
_SPECIAL_VALUES: Dict[str, str] = {v: k for k, v in _SPECIAL_FORMS.items()}

RIGHT_DOUBLE_QUOTE = "”"
EN_DASH = "–"

TEXT_TYPE = "text"
HTML_TYPE = "html"
LINK_TYPE = "a"
DEFAULT_TYPE = "strong"


# ============================================================
# Substitutions
# ============================================================
def apply_substitutions(text: str) -> str:
    """`"` -> ”, `--` -> –, `\\"` -> 리터럴 `"` (치환 제외)."""
    out: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        if text.startswith('\\"', i):
            out.append('"')
            i += 2
        elif text[i] == '"':
            out.append(RIGHT_DOUBLE_QUOTE)
            i += 1
        elif text.startswith("--", i):
            out.append(EN_DASH)
            i += 2
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


def reverse_substitutions(text: str) -> str:
    """apply_substitutions의 역변환. 리터럴 `"`는 `\\"`로 이스케이프한다.

    `-`에는 이스케이프가 없으므로 하이픈 바로 뒤의 en dash(`-–`)는 `---`가 되고,
    다시 파싱하면 `–-`로 읽힌다. 이 조합만은 왕복되지 않는다.
    """
    out: List[str] = []
    for ch in text:
        if ch == '"':
            out.append('\\"')
        elif ch == RIGHT_DOUBLE_QUOTE:
            out.append('"')
        elif ch == EN_DASH:
            out.append("--")
        else:
            out.append(ch)
    return "".join(out)


# ============================================================
# Parse
# ============================================================
def _read_bracket(text: str, start: int) -> Tuple[Optional[List[str]], int]:
    """`[` 다음 위치부터 짝이 맞는 `]`까지 읽어 `|`로 나뉜 파라미터 목록을 반환.

    `\\[`, `\\]`, `\\|`는 리터럴 문자로 풀린다. 닫히지 않으면 (None, start).
    """
    params: List[List[str]] = [[]]
    j = start
    n = len(text)
    while j < n:
        ch = text[j]
        if ch == "\\" and j + 1 < n and text[j + 1] in "[]|":
            params[-1].append(text[j + 1])
            j += 2
            continue
        if ch == "]":
            return ["".join(p) for p in params], j + 1
        if ch == "|":
            params.append([])
        else:
            params[-1].append(ch)
        j += 1
    return None, start


def _build_item(params: List[str]) -> Dict[str, Any]:
    if len(params) == 1 and params[0] in _SPECIAL_FORMS:
        return InlineItem(type=HTML_TYPE, value=_SPECIAL_FORMS[params[0]]).as_dict()

    value = params[0].strip()
    explicit_type: Optional[str] = None
    link_shorthand = False
    mods: List[str] = []
    props: Dict[str, Any] = {}

    for idx, raw in enumerate(params[1:], start=1):
        param = raw.strip()
        if param.startswith(TYPE_SIGIL):
            segments = param[len(TYPE_SIGIL):].strip().split(".")
            explicit_type = segments[0]
            mods = segments[1:]
        elif idx == 1 and _LINK_RE.match(param):
            link_shorthand = True
            props["href"] = param
        elif ":" in param:
            key, _, raw_value = param.partition(":")
            set_by_path(props, key.strip(), coerce_scalar(raw_value.strip()))

    if explicit_type is not None:
        item_type = explicit_type
    elif link_shorthand:
        item_type = LINK_TYPE
    else:
        item_type = _sniff_type(value)

    if item_type != HTML_TYPE:
        value = apply_substitutions(value)
    return InlineItem(type=item_type, value=value, mods=mods, props=props).as_dict()


def _sniff_type(value: str) -> str:
    return HTML_TYPE if value.lstrip().startswith("<") else DEFAULT_TYPE


def parse_inline(text: str, strict: bool = False) -> List[Dict[str, Any]]:
    """문자열 값을 InlineItem dict 리스트로 분해.

    닫히지 않은 `[`는 lenient 모드에서 나머지 전체를 텍스트로 취급하고,
    strict=True이면 ADMLDecodeError.
    """
    items: List[Dict[str, Any]] = []
    pending: List[str] = []

    def flush() -> None:
        if pending:
            items.append(InlineItem(type=TEXT_TYPE, value=apply_substitutions("".join(pending))).as_dict())
            pending.clear()

    i = 0
    n = len(text or "")
    while i < n:
        ch = text[i]
        if ch == "\\" and i + 1 < n and text[i + 1] in "[]":
            pending.append(text[i + 1])
            i += 2
            continue
        if ch == "[":
            params, end = _read_bracket(text, i + 1)
            if params is None:
                if strict:
                    raise ADMLDecodeError("Unterminated inline bracket: missing ']'")
                pending.append(text[i:])
                break
            flush()
            items.append(_build_item(params))
            i = end
            continue
        pending.append(ch)
        i += 1

    flush()
    return items


# ============================================================
# Serialize
# ============================================================
def _uses_href_shorthand(item: Mapping[str, Any]) -> bool:
    href = (item.get("props") or {}).get("href")
    return item.get("type") == LINK_TYPE and isinstance(href, str) and bool(_LINK_RE.match(href))


def is_default_type(item: Mapping[str, Any]) -> bool:
    """parse_inline이 `#type` 없이도 같은 type을 추론하는지.

    직렬화 시 `#type` 파라미터를 생략해도 되는지 판단하는 유일한 기준.
    """
    if item.get("mods"):
        return False
    if _uses_href_shorthand(item):
        return True
    return item.get("type") == _sniff_type(str(item.get("value", "")))


def _escape(text: str) -> str:
    escaped = text.replace("[", "\\[").replace("]", "\\]").replace("|", "\\|")
    # 끝의 역슬래시가 닫는 `]`를 이스케이프하지 않도록
    if escaped.endswith("\\"):
        escaped += " "
    return escaped


def _flatten_props(props: Mapping[str, Any], prefix: str = "") -> List[Tuple[str, Any]]:
    out: List[Tuple[str, Any]] = []
    for key, value in props.items():
        path = f"{prefix}{key}"
        if isinstance(value, Mapping):
            out.extend(_flatten_props(value, prefix=f"{path}."))
        elif value is not None:
            out.append((path, value))
    return out


def _serialize_item(item: Mapping[str, Any]) -> str:
    item_type = item.get("type", DEFAULT_TYPE)
    value = str(item.get("value", ""))
    mods = list(item.get("mods") or [])
    props = dict(item.get("props") or {})

    if item_type == TEXT_TYPE and not mods and not props:
        return reverse_substitutions(value).replace("[", "\\[").replace("]", "\\]")

    if item_type == HTML_TYPE and not mods and not props and value in _SPECIAL_VALUES:
        return f"[{_SPECIAL_VALUES[value]}]"

    body = value if item_type == HTML_TYPE else reverse_substitutions(value)
    params = [_escape(body)]

    href_shorthand = _uses_href_shorthand(item)
    if href_shorthand:
        params.append(_escape(props.pop("href")))

    prop_params = [f"{_escape(key)}: {_escape(format_scalar(v))}" for key, v in _flatten_props(props)]
    # 두 번째 자리의 `/...`, `@...`, `http(s)://...` 파라미터는 링크 단축형으로 읽힌다
    first_prop_is_link = not href_shorthand and bool(prop_params) and bool(_LINK_RE.match(prop_params[0]))
    if not is_default_type(item) or first_prop_is_link:
        params.append(TYPE_SIGIL + ".".join([item_type] + mods))
    params.extend(prop_params)

    if len(params) == 1 and params[0].strip() in _SPECIAL_FORMS:
        # `[ ]`, `[ / ]`, `[ - ]`: 특수 형식과 구분되도록 공백을 둔다
        return f"[ {params[0]} ]"
    return "[" + " | ".join(params) + "]"


def serialize_inline(items: List[Mapping[str, Any]]) -> str:
    """parse_inline의 역변환."""
    return "".join(_serialize_item(item) for item in items)
