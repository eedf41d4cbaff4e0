from __future__ import annotations

import warnings

from adml_langchain_parser import ParserConfig, UnterminatedBlockError, parse

broken = '''
title: 닫히지 않은 블록
author: {
  name: 이도윤
tags: [
  a
'''.strip()

# lenient(기본): 입력 끝까지 읽고 경고만 남김
with warnings.catch_warnings(record=True) as caught:
    warnings.simplefilter("always")
    print(parse(broken))
for w in caught:
    print(f"[{w.category.__name__}] {w.message}")

# strict: 예외
try:
    parse(broken, ParserConfig(strict=True))
except UnterminatedBlockError as e:
    print(f"strict 모드 실패: {e}")
