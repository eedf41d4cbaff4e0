from __future__ import annotations

import json

from adml_langchain_parser import parse, serialize

adml_text = '''
// 기사 메타데이터
title: 서울 벚꽃 개화 시기
published: true
meta.readingMinutes: 4
author: {
  name: 김하늘
  role: 기자
}
tags: [
  날씨
  봄
]
summary::
올해 벚꽃은 평년보다 사흘 빠르게 핀다.
/* 이 줄은 주석이 아니라 본문 */
::
body: [[
  #heading.large: 개화 예상일
  여의도 윤중로는 4월 첫 주가 절정이다.
  <#image.hero: cherry.jpg
    alt: 여의도 벚꽃길
    size.width: 1200
  >
]]
'''.strip()

data = parse(adml_text)
print(json.dumps(data, ensure_ascii=False, indent=2))

print("\n--- serialize ---")
print(serialize(data))
