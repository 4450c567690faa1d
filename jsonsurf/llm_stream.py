"""
把 OpenAI 兼容接口的流式输出（chat.completions.create(stream=True)）接到 JSON 抽取上。
模型一边吐 token，一边拿到完整的对象。
"""
from __future__ import annotations

import logging
from typing import Any, AsyncIterable, AsyncIterator, Dict, Iterable, Iterator, List, Optional

from openai import AsyncOpenAI, OpenAI

from .accumulator import StreamingObjectAccumulator
from .errors import DecodeError
from .settings import ExtractorSettings

logger = logging.getLogger(__name__)


def _delta_texts(chunk: Any) -> Iterator[str]:
    for choice in getattr(chunk, "choices", None) or []:
        delta = getattr(choice, "delta", None)
        content = getattr(delta, "content", None) if delta is not None else None
        if content:
            yield content


def iter_delta_text(stream: Iterable[Any]) -> Iterator[str]:
    for chunk in stream:
        yield from _delta_texts(chunk)


async def aiter_delta_text(stream: AsyncIterable[Any]) -> AsyncIterator[str]:
    async for chunk in stream:
        for text in _delta_texts(chunk):
            yield text


def _finalize_quietly(accumulator: StreamingObjectAccumulator) -> Optional[Any]:
    try:
        return accumulator.finalize()
    except DecodeError as e:
        logger.warning(
            "Stream ended with undecodable JSON tail (in_json=%s): %s",
            accumulator.is_in_json(),
            e,
        )
        return None


def stream_json_objects(
    stream: Iterable[Any],
    target: Any = None,
    *,
    settings: Optional[ExtractorSettings] = None,
) -> Iterator[Any]:
    accumulator = StreamingObjectAccumulator(target, settings=settings)
    for text in iter_delta_text(stream):
        value = accumulator.process_chunk(text)
        if value is not None:
            yield value

    for value in accumulator.drain():
        yield value
    tail = _finalize_quietly(accumulator)
    if tail is not None:
        yield tail


async def astream_json_objects(
    stream: AsyncIterable[Any],
    target: Any = None,
    *,
    settings: Optional[ExtractorSettings] = None,
) -> AsyncIterator[Any]:
    accumulator = StreamingObjectAccumulator(target, settings=settings)
    async for text in aiter_delta_text(stream):
        value = accumulator.process_chunk(text)
        if value is not None:
            yield value

    for value in accumulator.drain():
        yield value
    tail = _finalize_quietly(accumulator)
    if tail is not None:
        yield tail


class StructuredOutputClient:
    """OpenAI 兼容客户端的薄封装：发起流式对话，产出解码好的 JSON 对象"""

    def __init__(self, model: str, api_key: str, base_url: str, settings: Optional[ExtractorSettings] = None):
        self.model = model
        self.client = OpenAI(
            base_url=base_url,
            api_key=api_key
        )
        self.async_client = AsyncOpenAI(
            base_url=base_url,
            api_key=api_key
        )
        self.settings = settings

    def stream_objects(self, messages: List[Dict[str, Any]], target: Any = None, **kwargs: Any) -> Iterator[Any]:
        stream = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            stream=True,
            **kwargs,
        )
        yield from stream_json_objects(stream, target, settings=self.settings)

    async def astream_objects(self, messages: List[Dict[str, Any]], target: Any = None, **kwargs: Any) -> AsyncIterator[Any]:
        stream = await self.async_client.chat.completions.create(
            model=self.model,
            messages=messages,
            stream=True,
            **kwargs,
        )
        async for value in astream_json_objects(stream, target, settings=self.settings):
            yield value
