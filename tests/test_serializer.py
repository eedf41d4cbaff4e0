"""dict -> ADML 직렬화 및 의미 단위 왕복 테스트"""
from __future__ import annotations

import pytest

from adml_langchain_parser import ADMLEncodeError, ADMLSerializer, parse, serialize


def roundtrip(value):
    return parse(serialize(value))


def test_plain_scalars():
    out = serialize({"title": "Hello", "count": 3.0, "on": True, "off": False})
    assert out == "title: Hello\ncount: 3\non: true\noff: false\n"


def test_empty_document():
    assert serialize({}) == ""


def test_root_must_be_mapping():
    with pytest.raises(ADMLEncodeError):
        serialize([1, 2])


def test_objects_and_arrays():
    data = {"author": {"name": "John", "tags": ["a", "b"]}, "empty": [], "none": {}}
    text = serialize(data)
    assert text == (
        "author: {\n"
        "  name: John\n"
        "  tags: [\n"
        "    a\n"
        "    b\n"
        "  ]\n"
        "}\n"
        "empty: [\n"
        "]\n"
        "none: {\n"
        "}\n"
    )
    assert parse(text) == data


def test_indent_option():
    assert ADMLSerializer(indent=4).encode({"a": {"b": 1}}) == "a: {\n    b: 1\n}\n"


def test_multiline_string():
    text = serialize({"d": "first\nsecond"})
    assert text == "d::\nfirst\nsecond\n::\n"
    assert parse(text) == {"d": "first\nsecond"}


@pytest.mark.parametrize(
    "value",
    ["42", "-3.5", "true", "false", "ends with [", "ends with {", "ends with [[", "ends with ::", "a /* b */ c"],
)
def test_strings_that_would_change_meaning_use_multiline(value):
    text = serialize({"v": value})
    assert text.startswith("v::\n")
    assert parse(text) == {"v": value}


def test_numbers_are_written_without_exponent():
    text = serialize({"big": 1e20, "small": 0.0000001, "int": 5})
    assert text == "big: 100000000000000000000\nsmall: 0.0000001\nint: 5\n"
    assert roundtrip({"big": 1e20, "small": 0.0000001, "int": 5}) == {"big": 1e20, "small": 0.0000001, "int": 5.0}


def test_none_is_skipped_in_lenient_mode_and_rejected_in_strict():
    assert serialize({"a": None, "b": 1}) == "b: 1\n"
    with pytest.raises(ADMLEncodeError):
        serialize({"a": None}, strict=True)


def test_strict_rejects_unwritable_keys_and_array_items():
    for key in ("a.b", "a:b", ""):
        with pytest.raises(ADMLEncodeError):
            serialize({key: 1}, strict=True)
    with pytest.raises(ADMLEncodeError):
        serialize({"items": ["true"]}, strict=True)
    with pytest.raises(ADMLEncodeError):
        serialize({"items": [{"k": "v"}]}, strict=True)


def test_dict_in_plain_array_falls_back_to_json_line():
    assert serialize({"items": [{"k": "v"}]}) == 'items: [\n  {"k": "v"}\n]\n'


def test_content_block_forms():
    data = {
        "content": [
            {"type": "heading", "value": "Title", "mods": ["large", "bold"]},
            {"type": "p", "value": "Some text."},
            {"type": "image", "value": "photo.jpg", "mods": ["hero"], "props": {"alt": "A photo"}},
            {"type": "divider"},
        ]
    }
    text = serialize(data)
    assert text == (
        "content: [[\n"
        "  #heading.large.bold: Title\n"
        "  Some text.\n"
        "  <#image.hero: photo.jpg\n"
        "    alt: A photo\n"
        "  >\n"
        "  #divider\n"
        "]]\n"
    )
    assert "#p" not in text
    assert parse(text) == data


def test_nested_content_value():
    data = {
        "content": [
            {
                "type": "div",
                "value": [{"type": "h3", "value": "Hi"}, {"type": "p", "value": "Body"}],
                "mods": ["border"],
                "props": {"style": {"color": "blue"}},
            }
        ]
    }
    text = serialize(data)
    assert text == (
        "content: [[\n"
        "  <#div.border: [[\n"
        "      #h3: Hi\n"
        "      Body\n"
        "    ]]\n"
        "    style: {\n"
        "      color: blue\n"
        "    }\n"
        "  >\n"
        "]]\n"
    )
    assert parse(text) == data


def test_content_values_that_do_not_fit_the_header_go_to_props_body():
    data = {
        "content": [
            {"type": "counter", "value": 3.0},
            {"type": "quote", "value": "line one\nline two"},
            {"type": "tag", "value": "x", "mods": ["a.b", "c"]},
        ]
    }
    text = serialize(data)
    assert "<#counter\n    value: 3\n  >" in text
    assert "mods: [" in text
    assert parse(text) == data


def test_paragraphs_that_look_like_syntax_keep_explicit_type():
    data = {"c": [{"type": "p", "value": "#hashtag"}, {"type": "p", "value": "<b>"}, {"type": "p", "value": "]]"}]}
    text = serialize(data)
    assert "  #p: #hashtag\n" in text
    assert parse(text) == data


def test_list_of_dicts_without_type_is_not_a_content_block():
    text = serialize({"items": [{"type": "x"}, {"value": "no type"}]})
    assert text.startswith("items: [\n")
    assert "[[" not in text


def test_content_blocks_inside_arrays():
    data = {"items": [[{"type": "p", "value": "x"}], ["plain"]]}
    assert roundtrip(data) == data


def test_empty_list_is_plain_array():
    assert serialize({"c": []}) == "c: [\n]\n"


def test_playground_roundtrip():
    text = """
title: Welcome
author: {
  name: John Doe
}
tags: [
  javascript
  markup
]
port: 3000
meta.status: draft
description::
Line one

Line three
::
content: [[
  #heading.large: Hello
  Plain paragraph.
  <#image.hero: photo.jpg
    alt: A photo
    size.width: 1200
  >
  <#card: [[
    #h3: Inner
  ]]
  >
]]
""".strip()
    first = parse(text)
    assert parse(serialize(first)) == first


@pytest.mark.parametrize(
    "text, expected",
    [
        ("a: b::\nx\n::", {"a: b": "x"}),
        ("a..b: x", {"a": {"": {"b": "x"}}}),
        (".a: x", {"": {"a": "x"}}),
        ("::\nhello\n::", {"": "hello"}),
        ("a . b: x", {"a ": {" b": "x"}}),
    ],
)
def test_keys_produced_by_the_parser_roundtrip(text, expected):
    first = parse(text)
    assert first == expected
    assert parse(serialize(first)) == first


def test_keys_with_colons_use_multiline_form():
    assert serialize({"a: b": "x"}) == "a: b::\nx\n::\n"
    assert serialize({"a": {"": {"b": "x"}}}) == "a: {\n  .b: x\n}\n"


@pytest.mark.parametrize("data", [{"a: b": 1}, {"": {}}, {"": [1]}, {"a.b": "x"}, {" a": True}])
def test_unwritable_keys_raise_instead_of_losing_data(data):
    with pytest.raises(ADMLEncodeError):
        serialize(data)


def test_modifiers_with_spaces_stay_in_header():
    first = parse("c: [[\n#h. a .b: x\n]]")
    assert first["c"][0]["mods"] == [" a ", "b"]
    text = serialize(first)
    assert "  #h. a .b: x\n" in text
    assert parse(text) == first


def test_non_list_mods_prop_roundtrips_next_to_header_mods():
    data = {"c": [{"type": "x", "mods": ["a"], "props": {"mods": "plain"}}]}
    assert parse(serialize(data)) == data


@pytest.mark.parametrize(
    "item",
    [
        {"type": "x", "mods": ["a.b"], "props": {"mods": "plain"}},
        {"type": "x", "props": {"mods": ["a"]}},
        {"type": "x", "props": {"value": "v"}},
        {"type": "a:b"},
    ],
)
def test_content_items_that_cannot_be_written_raise(item):
    with pytest.raises(ADMLEncodeError):
        serialize({"c": [item]})
