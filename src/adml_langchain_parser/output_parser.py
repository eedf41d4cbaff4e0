# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Any, Optional, Type

from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import BaseOutputParser
from pydantic import BaseModel, Field

from .adml_parser import ADMLParser, ParserConfig


DEFAULT_PARSER_CONFIG = ParserConfig(
    strict=False,
    warn_on_unterminated=True,
    indent_step=2,
    extract_code_fence=True,
)


class ADMLOutputParser(BaseOutputParser[Any]):
    """LangChain용 ADML 출력 파서.

    model을 주면 pydantic 검증 결과(BaseModel)를, 없으면 dict를 반환한다.
    """

    pydantic_model: Optional[Type[BaseModel]] = Field(default=None)
    cfg: ParserConfig = Field(default_factory=lambda: DEFAULT_PARSER_CONFIG)
    _parser: Any = None

    def __init__(self, model: Optional[Type[BaseModel]] = None, cfg: Optional[ParserConfig] = None, **kwargs):
        super().__init__(**kwargs)
        object.__setattr__(self, 'pydantic_model', model)
        object.__setattr__(self, 'cfg', cfg or DEFAULT_PARSER_CONFIG)
        object.__setattr__(self, '_parser', ADMLParser(cfg=self.cfg, model=model))

    def get_format_instructions(self) -> str:
        return self._parser.get_format_instructions()

    def parse(self, text: str) -> Any:
        try:
            return self._parser.parse(text)
        except Exception as e:
            raise OutputParserException(str(e)) from e

    def decode(self, text: str) -> dict:
        """ADML 텍스트를 딕셔너리로 디코딩 (Pydantic 검증 없이)."""
        return self._parser.decode(text)

    @property
    def _type(self) -> str:
        return "adml"
