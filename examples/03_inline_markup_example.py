from __future__ import annotations

import json

from adml_langchain_parser import parse, parse_inline, serialize_inline

doc = parse('lead: 자세한 내용은 [여기|/spring/cherry]를 참고하세요. [주의 | #em.red] 2024--2025 "공식" 자료[/]')

items = parse_inline(doc["lead"])
print(json.dumps(items, ensure_ascii=False, indent=2))

print("\n--- serialize_inline ---")
text = serialize_inline(items)
print(text)
assert parse_inline(text) == items
