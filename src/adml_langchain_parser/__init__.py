from .output_parser import ADMLOutputParser
from .adml_parser import (
    ADMLParser,
    ParserConfig,
    BlockKind,
    ADMLParserError,
    ADMLDecodeError,
    ADMLEncodeError,
    UnterminatedBlockError,
    UnterminatedBlockWarning,
    parse,
)
from .serializer import ADMLSerializer, serialize
from .inline import parse_inline, serialize_inline, is_default_type
from .models import ContentItem, InlineItem, is_content_block, is_content_item

__all__ = [
    "ADMLOutputParser",
    "ADMLParser",
    "ParserConfig",
    "BlockKind",
    "ADMLParserError",
    "ADMLDecodeError",
    "ADMLEncodeError",
    "UnterminatedBlockError",
    "UnterminatedBlockWarning",
    "parse",
    "ADMLSerializer",
    "serialize",
    "parse_inline",
    "serialize_inline",
    "is_default_type",
    "ContentItem",
    "InlineItem",
    "is_content_block",
    "is_content_item",
]
