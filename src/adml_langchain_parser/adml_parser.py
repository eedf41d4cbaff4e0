# -*- coding: utf-8 -*-

from __future__ import annotations

import re
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Type, Union

try:
    from pydantic import BaseModel
except Exception as e:  # pragma: no cover
    raise ImportError("pydantic(v2) is required. Install: pip install pydantic>=2") from e

from .models import content_item
from .scalars import coerce_scalar
from .security import safe_raw_preview


# ============================================================
# Errors
# ============================================================
class ADMLParserError(ValueError):
    pass


class ADMLDecodeError(ADMLParserError):
    pass


class UnterminatedBlockError(ADMLDecodeError):
    """strict 모드에서 닫는 구분자 없이 입력이 끝났을 때 발생."""
    pass


class ADMLEncodeError(ADMLParserError):
    pass


class UnterminatedBlockWarning(UserWarning):
    """lenient 모드에서 닫히지 않은 블록을 입력 끝까지 읽고 복구했을 때."""
    pass


# ============================================================
# Config
# ============================================================
@dataclass(frozen=True)
class ParserConfig:
    strict: bool = False  # True: 닫히지 않은 블록 / 콜론 없는 라인에서 예외
    warn_on_unterminated: bool = True  # lenient 모드 복구 시 UnterminatedBlockWarning
    indent_step: int = 2  # format instructions 예시 문서의 들여쓰기 폭

    # LLM 출력용: ```adml ... ``` 코드펜스 안쪽만 파싱
    extract_code_fence: bool = False

    # Format instructions 스타일: "adaptive" | "minimal"
    instructions_mode: str = "adaptive"


# ============================================================
# Grammar tokens
# ============================================================
CONTENT_OPEN = "[["
CONTENT_CLOSE = "]]"
ARRAY_OPEN = "["
ARRAY_CLOSE = "]"
OBJECT_OPEN = "{"
OBJECT_CLOSE = "}"
PROPS_OPEN = "<"
PROPS_CLOSE = ">"
MULTILINE_MARK = "::"
LINE_COMMENT = "//"
TYPE_SIGIL = "#"


class BlockKind(str, Enum):
    DOCUMENT = "document"
    OBJECT = "object"
    PROPS = "props"
    ARRAY = "array"
    CONTENT = "content"


_CLOSERS: Dict[BlockKind, Optional[str]] = {
    BlockKind.DOCUMENT: None,
    BlockKind.OBJECT: OBJECT_CLOSE,
    BlockKind.PROPS: PROPS_CLOSE,
    BlockKind.ARRAY: ARRAY_CLOSE,
    BlockKind.CONTENT: CONTENT_CLOSE,
}

# `key: [[` 는 `[`로도 끝나므로 순서가 중요
_OPENERS: Tuple[Tuple[str, BlockKind], ...] = (
    (CONTENT_OPEN, BlockKind.CONTENT),
    (ARRAY_OPEN, BlockKind.ARRAY),
    (OBJECT_OPEN, BlockKind.OBJECT),
)


class BlockResult(NamedTuple):
    value: Any
    end: int  # 소비되지 않은 첫 라인 인덱스
    in_comment: bool
    closed: bool  # 닫는 구분자를 만났는지 (False면 입력 끝까지 읽음)


class ContentHeader(NamedTuple):
    type: str
    value: str
    mods: List[str]


# ============================================================
# Line helpers
# ============================================================
def strip_block_comments(line: str, in_comment: bool) -> Tuple[str, bool]:
    """`/* ... */` 구간을 제거. 한 줄 안에서 열고 닫거나 여러 줄에 걸칠 수 있다.

    Returns:
        (주석이 제거된 라인, 라인 끝에서 아직 주석 안인지)
    """
    out: List[str] = []
    i = 0
    n = len(line)
    while i < n:
        if in_comment:
            if line.startswith("*/", i):
                in_comment = False
                i += 2
                continue
            i += 1
        else:
            if line.startswith("/*", i):
                in_comment = True
                i += 2
                continue
            out.append(line[i])
            i += 1
    return "".join(out), in_comment


def set_by_path(target: Dict[str, Any], path: str, value: Any) -> None:
    """`a.b.c` 경로에 값을 기록. 중간 경로는 dict로 강제,
    마지막 키에서 dict끼리는 병합(덮어쓰지 않음)."""
    parts = path.split(".")
    cur = target
    for part in parts[:-1]:
        nxt = cur.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            cur[part] = nxt
        cur = nxt

    last = parts[-1]
    existing = cur.get(last)
    if isinstance(value, dict) and isinstance(existing, dict):
        existing.update(value)
    else:
        cur[last] = value


def parse_content_header(text: str) -> ContentHeader:
    """`#type.mod1.mod2: value` 헤더를 분해. `#`가 없으면 기본 paragraph(`p`)."""
    trimmed = text.strip()
    if not trimmed.startswith(TYPE_SIGIL):
        return ContentHeader("p", trimmed, [])

    body = trimmed[len(TYPE_SIGIL):]
    type_mods, sep, value = body.partition(":")
    parts = type_mods.strip().split(".")
    return ContentHeader(parts[0], value.strip() if sep else "", parts[1:])


# ============================================================
# Core Parser
# ============================================================
class ADMLParser:
    """ADML 텍스트 -> dict 값 트리.

    모든 블록 파서는 (lines, 시작 인덱스, 주석 플래그, BlockKind)의 순수 함수이며
    BlockResult(value, end, in_comment, closed)를 돌려준다. 주석 플래그는 인자로
    전달되고 반환되므로 재귀 호출 사이에 공유되는 가변 상태가 없다.
    """

    _CODE_FENCE_RE = re.compile(r"```(?:adml)?[ \t]*\n(.*?)\n?[ \t]*```", flags=re.DOTALL)

    def __init__(self, cfg: ParserConfig = ParserConfig(), model: Optional[Type[BaseModel]] = None):
        self.cfg = cfg
        self.model = model

    # ---------------- Public ----------------
    def get_format_instructions(self) -> str:
        from .prompting import build_adml_format_prompt

        return build_adml_format_prompt(self.model, self.cfg)

    def decode(self, text: str) -> Dict[str, Any]:
        """ADML 텍스트를 dict로 디코딩 (Pydantic 검증 없이)."""
        lines = self._split_lines(text)
        result = self._parse_block(lines, 0, False, BlockKind.DOCUMENT)
        return result.value

    def parse(self, text: str) -> Union[BaseModel, Dict[str, Any]]:
        obj = self.decode(text)
        if self.model is None:
            return obj
        return self.model.model_validate(obj)

    # ---------------- Normalization ----------------
    def _split_lines(self, text: str) -> List[str]:
        s = text or ""
        if self.cfg.extract_code_fence:
            m = self._CODE_FENCE_RE.search(s)
            if m:
                s = m.group(1)
        return s.split("\n")

    def _read_line(self, line: str, in_comment: bool) -> Tuple[str, bool]:
        stripped, in_comment = strip_block_comments(line, in_comment)
        return stripped.strip(), in_comment

    @staticmethod
    def _is_skippable(trimmed: str) -> bool:
        return not trimmed or trimmed.startswith(LINE_COMMENT)

    # ---------------- Recovery ----------------
    def _unterminated(self, kind: BlockKind, opener: str) -> None:
        closer = _CLOSERS[kind]
        message = (
            f"Unterminated {kind.value} block (expected {closer!r}) "
            f"opened by {safe_raw_preview(opener)}"
        )
        if self.cfg.strict:
            raise UnterminatedBlockError(message)
        if self.cfg.warn_on_unterminated:
            warnings.warn(message + "; parsed to end of input", UnterminatedBlockWarning, stacklevel=2)

    def _skip_line(self, trimmed: str) -> None:
        if self.cfg.strict:
            raise ADMLDecodeError(f"Expected 'key: value', got {safe_raw_preview(trimmed)}")

    # ---------------- Parsers ----------------
    def _parse_block(self, lines: List[str], i: int, in_comment: bool, kind: BlockKind) -> BlockResult:
        if kind is BlockKind.ARRAY:
            result = self._parse_array(lines, i, in_comment)
        elif kind is BlockKind.CONTENT:
            result = self._parse_content(lines, i, in_comment)
        else:
            result = self._parse_mapping(lines, i, in_comment, _CLOSERS[kind])

        if kind is not BlockKind.DOCUMENT and not result.closed:
            opener = lines[i - 1] if i > 0 else ""
            self._unterminated(kind, opener)
        return result

    def _capture_multiline(self, lines: List[str], i: int) -> Tuple[Optional[str], int]:
        """`key::` 다음 줄부터 `::` 한 줄까지 원문 그대로 수집 (주석 처리 없음)."""
        captured: List[str] = []
        while i < len(lines):
            raw = lines[i]
            if raw.strip() == MULTILINE_MARK:
                return "\n".join(captured), i + 1
            captured.append(raw.strip())
            i += 1
        return None, i

    def _parse_mapping(
        self, lines: List[str], i: int, in_comment: bool, closer: Optional[str]
    ) -> BlockResult:
        out: Dict[str, Any] = {}

        while i < len(lines):
            trimmed, in_comment = self._read_line(lines[i], in_comment)

            if closer is not None and trimmed == closer:
                return BlockResult(out, i + 1, in_comment, True)

            if self._is_skippable(trimmed):
                i += 1
                continue

            # multiline string: key::
            if trimmed.endswith(MULTILINE_MARK):
                key = trimmed[: -len(MULTILINE_MARK)].strip()
                text, i = self._capture_multiline(lines, i + 1)
                if text is None:
                    self._unterminated_string(key)
                else:
                    set_by_path(out, key, text)
                continue

            colon = trimmed.find(":")
            if colon <= 0:
                self._skip_line(trimmed)
                i += 1
                continue

            key = trimmed[:colon].strip()
            kind = self._opener_kind(trimmed)
            if kind is not None:
                nested = self._parse_block(lines, i + 1, in_comment, kind)
                set_by_path(out, key, nested.value)
                i, in_comment = nested.end, nested.in_comment
                continue

            # 기본 key: value (dot notation 지원)
            set_by_path(out, key, coerce_scalar(trimmed[colon + 1:].strip()))
            i += 1

        return BlockResult(out, i, in_comment, False)

    def _unterminated_string(self, key: str) -> None:
        message = f"Unterminated multiline string {safe_raw_preview(key)} (expected '::'); value dropped"
        if self.cfg.strict:
            raise UnterminatedBlockError(message)
        if self.cfg.warn_on_unterminated:
            warnings.warn(message, UnterminatedBlockWarning, stacklevel=2)

    @staticmethod
    def _opener_kind(trimmed: str) -> Optional[BlockKind]:
        for token, kind in _OPENERS:
            if trimmed.endswith(token):
                return kind
        return None

    def _parse_array(self, lines: List[str], i: int, in_comment: bool) -> BlockResult:
        out: List[Any] = []

        while i < len(lines):
            trimmed, in_comment = self._read_line(lines[i], in_comment)

            if trimmed == ARRAY_CLOSE:
                return BlockResult(out, i + 1, in_comment, True)

            if self._is_skippable(trimmed):
                i += 1
                continue

            if trimmed == CONTENT_OPEN:
                nested = self._parse_block(lines, i + 1, in_comment, BlockKind.CONTENT)
            elif trimmed == ARRAY_OPEN:
                nested = self._parse_block(lines, i + 1, in_comment, BlockKind.ARRAY)
            else:
                out.append(coerce_scalar(trimmed))
                i += 1
                continue

            out.append(nested.value)
            i, in_comment = nested.end, nested.in_comment

        return BlockResult(out, i, in_comment, False)

    def _parse_content(self, lines: List[str], i: int, in_comment: bool) -> BlockResult:
        out: List[Dict[str, Any]] = []

        while i < len(lines):
            trimmed, in_comment = self._read_line(lines[i], in_comment)

            if trimmed == CONTENT_CLOSE:
                return BlockResult(out, i + 1, in_comment, True)

            if self._is_skippable(trimmed):
                i += 1
                continue

            # props block: <#type.mod: value ... >
            if trimmed.startswith(PROPS_OPEN):
                header = parse_content_header(trimmed[len(PROPS_OPEN):])
                value: Any = header.value
                if header.value.endswith(CONTENT_OPEN):
                    # `<#div.border: [[` -> 중첩 콘텐츠 블록 자체가 value (앞쪽 텍스트는 버림)
                    nested = self._parse_block(lines, i + 1, in_comment, BlockKind.CONTENT)
                    value = nested.value
                    i, in_comment = nested.end, nested.in_comment
                else:
                    i += 1

                props_result = self._parse_block(lines, i, in_comment, BlockKind.PROPS)
                props = props_result.value
                i, in_comment = props_result.end, props_result.in_comment

                mods: List[Any] = header.mods
                if "value" in props:
                    value = props.pop("value")
                if isinstance(props.get("mods"), list):
                    mods = props.pop("mods")

                out.append(content_item(header.type, value, mods, props))
                continue

            if trimmed.startswith(TYPE_SIGIL):
                header = parse_content_header(trimmed)
                out.append(content_item(header.type, header.value, header.mods))
            else:
                out.append(content_item("p", trimmed))
            i += 1

        return BlockResult(out, i, in_comment, False)


def parse(text: str, cfg: Optional[ParserConfig] = None) -> Dict[str, Any]:
    """ADML 문서 전체를 파싱."""
    return ADMLParser(cfg=cfg or ParserConfig()).decode(text)
