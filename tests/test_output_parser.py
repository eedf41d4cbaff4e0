"""LangChain 출력 파서 / LCEL 통합 테스트"""
from __future__ import annotations

from typing import List, Optional

import pytest
from langchain_core.exceptions import OutputParserException
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from adml_langchain_parser import ADMLOutputParser, ParserConfig


class UserInfo(BaseModel):
    name: str
    age: int
    hobbies: List[str]


class Article(BaseModel):
    title: str = Field(..., description="기사 제목")
    summary: Optional[str] = Field(None, description="요약")
    body: List[dict] = Field(default_factory=list)


FENCED_USER = """Here you go:
```adml
name: John
age: 25
hobbies: [
  soccer
  coding
]
```"""


class FakeADMLChatModel(BaseChatModel):
    content: str = FENCED_USER

    def _generate(self, messages, stop=None, run_manager=None, **kwargs):
        return ChatResult(generations=[ChatGeneration(message=AIMessage(content=self.content))])

    @property
    def _llm_type(self) -> str:
        return "fake-adml-chat-model"


def test_parse_with_model():
    parser = ADMLOutputParser(model=UserInfo)
    result = parser.parse("name: John\nage: 25\nhobbies: [\n  soccer\n  coding\n]")
    assert isinstance(result, UserInfo)
    assert result.age == 25
    assert result.hobbies == ["soccer", "coding"]


def test_parse_without_model_returns_dict():
    assert ADMLOutputParser().parse("a.b: 1") == {"a": {"b": 1.0}}


def test_code_fence_is_extracted_by_default():
    parser = ADMLOutputParser(model=UserInfo)
    assert parser.parse(FENCED_USER.split("\n", 1)[1]).name == "John"


def test_decode_skips_validation():
    parser = ADMLOutputParser(model=UserInfo)
    assert parser.decode("name: John") == {"name": "John"}


def test_validation_error_becomes_output_parser_exception():
    parser = ADMLOutputParser(model=UserInfo)
    with pytest.raises(OutputParserException):
        parser.parse("name: John")


def test_strict_config_errors_become_output_parser_exception():
    parser = ADMLOutputParser(cfg=ParserConfig(strict=True))
    with pytest.raises(OutputParserException):
        parser.parse("items: [\n  a")


def test_content_block_validates_into_model():
    parser = ADMLOutputParser(model=Article)
    text = "title: Hello\nbody: [[\n  #h: Hi\n  Some text.\n]]"
    result = parser.parse(text)
    assert result.title == "Hello"
    assert result.summary is None
    assert result.body == [{"type": "h", "value": "Hi"}, {"type": "p", "value": "Some text."}]


def test_format_instructions():
    parser = ADMLOutputParser(model=UserInfo)
    instructions = parser.get_format_instructions()
    assert "ADML RULES" in instructions
    assert "```adml" in instructions
    assert "name: example" in instructions
    assert "age: 1" in instructions
    assert "hobbies: [" in instructions


def test_format_instructions_minimal_and_without_model():
    minimal = ADMLOutputParser(model=UserInfo, cfg=ParserConfig(instructions_mode="minimal"))
    assert "Example:" in minimal.get_format_instructions()
    assert "```adml" not in ADMLOutputParser().get_format_instructions()


def test_format_instructions_example_parses_back():
    parser = ADMLOutputParser(model=UserInfo)
    instructions = parser.get_format_instructions()
    example = instructions[instructions.index("```adml"):]
    assert parser.parse(example.strip()) == UserInfo(name="example", age=1, hobbies=["example", "example"])


def test_parser_type():
    assert ADMLOutputParser()._type == "adml"


def test_lcel_chain():
    parser = ADMLOutputParser(model=UserInfo)
    prompt = ChatPromptTemplate.from_messages([("human", "Describe {input}\n\n{format_instructions}")])
    chain = prompt | FakeADMLChatModel() | parser

    result = chain.invoke(
        {
            "input": "John, 25 years old, likes soccer and coding.",
            "format_instructions": parser.get_format_instructions(),
        }
    )
    assert isinstance(result, UserInfo)
    assert result == UserInfo(name="John", age=25, hobbies=["soccer", "coding"])


def test_format_instructions_example_uses_indent_step():
    parser = ADMLOutputParser(model=UserInfo, cfg=ParserConfig(indent_step=4))
    assert "hobbies: [\n    example\n    example\n]" in parser.get_format_instructions()
    assert "hobbies: [\n  example\n  example\n]" in ADMLOutputParser(model=UserInfo).get_format_instructions()
