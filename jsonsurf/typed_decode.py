"""
把抽出的 JSON 文本解码成 Python 值。

decoder 就是一个 `decoder(text) -> value` 的可调用对象，失败时抛异常。
目标类型交给 pydantic 的 TypeAdapter 校验：BaseModel、dataclass、TypedDict、list[...] 等都可以。
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any, Callable, Optional, get_origin

from pydantic import TypeAdapter

from .errors import DecodeError, ExtractionError
from .json_stream_extractor import JSONStreamExtractor
from .settings import get_extractor_settings

logger = logging.getLogger(__name__)

Decoder = Callable[[str], Any]


def json_decoder(text: str) -> Any:
    return json.loads(text)


@lru_cache(maxsize=128)
def _type_adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def model_decoder(target: Any, *, strict: Optional[bool] = None) -> Decoder:
    try:
        adapter = _type_adapter(target)
    except TypeError:
        # 不可哈希的类型注解无法缓存
        adapter = TypeAdapter(target)

    def decode(text: str) -> Any:
        return adapter.validate_json(text, strict=strict)

    decode.__name__ = f"decode_{getattr(target, '__name__', 'value')}"
    return decode


def _is_type_like(target: Any) -> bool:
    return isinstance(target, type) or get_origin(target) is not None


def resolve_decoder(target: Any = None) -> Decoder:
    """None -> json.loads；类型/类型注解 -> pydantic 校验；其它可调用对象 -> 直接当 decoder 用"""
    if target is None:
        return json_decoder
    if _is_type_like(target):
        return model_decoder(target)
    if callable(target):
        return target
    raise TypeError(f"unsupported_decode_target: {target!r}")


def decode_span(decoder: Decoder, text: str) -> Any:
    try:
        return decoder(text)
    except Exception as e:
        raise DecodeError(str(e)) from e


def from_mixed_text(text: str, target: Any = None) -> Any:
    """
    从混合文本中抽出 JSON 并解码。
    from_mixed_text('Text before {"name":"test","value":42} text after', Item)
    """
    parser = JSONStreamExtractor(get_extractor_settings().closer_policy)
    json_text = parser.feed(text or "")
    if not json_text:
        raise ExtractionError("no JSON found in input")
    return decode_span(resolve_decoder(target), json_text)


def from_mixed_text_with_parser(parser: JSONStreamExtractor, text: str, target: Any = None) -> Any:
    """
    使用调用方持有的 parser 抽取（状态跨调用保留）。
    parser 在本次调用后仍处于片段内时，视为 JSON 不完整。
    """
    json_text = parser.feed(text or "")
    if parser.is_in_json():
        raise ExtractionError("Incomplete JSON: parser is still expecting more input")
    if not json_text:
        raise ExtractionError("no JSON found in input")
    return decode_span(resolve_decoder(target), json_text)
