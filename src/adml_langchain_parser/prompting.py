# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Type

from pydantic import BaseModel

from .serializer import ADMLSerializer

if TYPE_CHECKING:
    from .adml_parser import ParserConfig


_GRAMMAR_GUIDE = """You must output ONLY an ADML document (Article Data Markup Language).

ADML RULES:
- One `key: value` per line. Numbers and true/false are detected automatically.
- Nested objects: `key: {` ... `}` or dot notation `parent.child: value`.
- Arrays: `key: [` then one item per line, then `]`.
- Multiline text: `key::` then the lines, then a line with only `::`.
- Rich content: `key: [[` then one entry per line, then `]]`.
  - `#type.mod: value` for typed entries, plain lines become paragraphs.
  - `<#type.mod: value` + `prop: value` lines + `>` for entries with properties.
- Comments: `// line` and `/* block */` are ignored.
- Do NOT use quotes around values and do NOT output JSON."""

_MINIMAL_GUIDE = """Answer in ADML: `key: value` lines, `key: {` ... `}` objects, `key: [` ... `]` arrays, `key::` ... `::` multiline text. No JSON, no quotes."""


def _dummy_scalar(schema: Dict[str, Any]) -> Any:
    t = schema.get("type")
    if t == "string":
        return "example"
    if t == "integer":
        return 1
    if t == "number":
        return 0.5
    if t == "boolean":
        return True
    return None


def _resolve(schema: Dict[str, Any], defs: Dict[str, Any]) -> Dict[str, Any]:
    ref = schema.get("$ref")
    if isinstance(ref, str) and ref.startswith("#/"):
        name = ref.rsplit("/", 1)[-1]
        target = defs.get(name)
        if isinstance(target, dict):
            return target
    return schema


def _dummy_from_schema(schema: Dict[str, Any], defs: Dict[str, Any], depth: int = 0, max_depth: int = 3) -> Any:
    schema = _resolve(schema, defs)
    if depth >= max_depth:
        return {} if schema.get("type") == "object" else None

    t = schema.get("type")
    if t in ("string", "integer", "number", "boolean"):
        return _dummy_scalar(schema)

    if t == "object" or "properties" in schema:
        props = schema.get("properties") or {}
        out: Dict[str, Any] = {}
        for k, v in list(props.items())[:6]:
            out[k] = _dummy_from_schema(v, defs, depth + 1, max_depth)
        return out

    if t == "array":
        item = schema.get("items") or {}
        return [
            _dummy_from_schema(item, defs, depth + 1, max_depth),
            _dummy_from_schema(item, defs, depth + 1, max_depth),
        ]

    for key in ("anyOf", "oneOf", "allOf"):
        options = [s for s in schema.get(key) or [] if s.get("type") != "null"]
        if options:
            return _dummy_from_schema(options[0], defs, depth, max_depth)

    return None


def build_adml_example(model: Type[BaseModel], cfg: Optional["ParserConfig"] = None) -> str:
    """스키마 구조를 보여주는 작은 ADML 예시를 생성."""
    schema = model.model_json_schema()
    defs = dict(schema.get("$defs") or {})
    example = _dummy_from_schema(schema, defs)
    if not isinstance(example, dict):
        example = {}
    indent = cfg.indent_step if cfg is not None else 2
    body = ADMLSerializer(indent=indent).encode(example).rstrip()
    return "```adml\n" + body + "\n```\n"


def build_adml_format_prompt(model: Optional[Type[BaseModel]] = None, cfg: Optional["ParserConfig"] = None) -> str:
    """LLM용 ADML 출력 지시문. 모델이 있으면 예시 문서를 덧붙인다."""
    mode = cfg.instructions_mode if cfg is not None else "adaptive"
    guide = _MINIMAL_GUIDE if mode == "minimal" else _GRAMMAR_GUIDE
    if model is None:
        return guide

    example = build_adml_example(model, cfg)
    if mode == "minimal":
        return f"{guide}\nExample:\n{example}"
    return f"{guide}\n\nEXAMPLE for this schema:\n{example}"
