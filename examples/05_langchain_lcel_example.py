from __future__ import annotations

from typing import List

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from adml_langchain_parser import ADMLOutputParser


class ArticleDraft(BaseModel):
    """LLM이 작성한 기사 초안."""
    title: str = Field(..., description="기사 제목")
    tags: List[str] = Field(default_factory=list)
    body: List[dict] = Field(default_factory=list, description="콘텐츠 블록")


# OpenAI 키 없이 돌려볼 수 있도록 ADML을 돌려주는 가짜 모델
class FakeADMLChatModel(BaseChatModel):
    def _generate(self, messages, stop=None, run_manager=None, **kwargs):
        content = """```adml
title: 봄철 미세먼지 대처법
tags: [
  건강
  환경
]
body: [[
  #heading: 외출 전 확인할 것
  대기질 앱에서 [PM2.5 | #em] 수치를 확인하세요.
]]
```"""
        return ChatResult(generations=[ChatGeneration(message=AIMessage(content=content))])

    @property
    def _llm_type(self) -> str:
        return "fake-adml-chat-model"


parser = ADMLOutputParser(model=ArticleDraft)
prompt = ChatPromptTemplate.from_messages([
    ("system", "You are a newsroom assistant."),
    ("human", "Write a short article about {topic}\n\n{format_instructions}"),
])

chain = prompt | FakeADMLChatModel() | parser
result = chain.invoke({"topic": "미세먼지", "format_instructions": parser.get_format_instructions()})

print(type(result).__name__)
print(result.model_dump_json(indent=2))
