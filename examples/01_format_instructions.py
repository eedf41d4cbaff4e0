from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field
from adml_langchain_parser import ADMLOutputParser

class Article(BaseModel):
    title: str
    reading_minutes: int = Field(..., ge=1)
    tags: List[str] = Field(default_factory=list)

parser = ADMLOutputParser(model=Article)
print(parser.get_format_instructions())
