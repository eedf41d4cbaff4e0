# -*- coding: utf-8 -*-
"""파서 진단 메시지에 들어가는 ADML 원문 조각의 노출 정책.

경고/예외 메시지에 실리는 원문은 다음 세 가지뿐이다.

- 닫히지 않은 블록을 연 줄 (`author: {`, `<#image.hero: photo.jpg` ...)
- 닫히지 않은 `key::` 문자열의 키
- strict 모드에서 `key: value` 형태가 아닌 줄

기사 원고의 본문 줄과 `author: { ... }` 블록에는 취재원 연락처나 저자 이메일이
그대로 들어 있는 경우가 많고, LLM 파이프라인에서는 이 메시지가 LangChain 콜백과
로그로 흘러간다. 그래서 기본은 미노출이고, 켜더라도 이메일/전화번호는 가린다.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional

_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_PHONE_RE = re.compile(r"\b(?:\+?\d{1,3}[- ]?)?(?:\d{2,4}[- ]?)\d{3,4}[- ]?\d{4}\b")


@dataclass(frozen=True)
class RawLogPolicy:
    """`ADML_PARSER_LOG_RAW=true`일 때만 원문 줄을 보여주고, 앞 `preview_chars`자로 자른다."""
    enabled: bool
    preview_chars: int = 80

    @staticmethod
    def from_env() -> "RawLogPolicy":
        enabled = os.getenv("ADML_PARSER_LOG_RAW", "false").lower() == "true"
        try:
            preview_chars = int(os.getenv("ADML_PARSER_LOG_PREVIEW_CHARS", "80"))
        except ValueError:
            preview_chars = 80
        return RawLogPolicy(enabled=enabled, preview_chars=max(0, preview_chars))


def mask_pii_text(text: str) -> str:
    text = _EMAIL_RE.sub("[REDACTED_EMAIL]", text)
    text = _PHONE_RE.sub("[REDACTED_PHONE]", text)
    return text


def safe_raw_preview(text: str, policy: Optional[RawLogPolicy] = None) -> str:
    """정책에 따라 한 줄 미리보기 문자열을 반환 (repr 형태)."""
    if policy is None:
        policy = RawLogPolicy.from_env()
    if not policy.enabled:
        return "REDACTED"
    preview = text.strip()[: policy.preview_chars]
    return repr(mask_pii_text(preview))
