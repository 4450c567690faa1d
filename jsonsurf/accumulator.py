from __future__ import annotations

import logging
from typing import Any, List, Optional

from .constants import OPEN_MARKERS
from .errors import DecodeError
from .event_logger import bind_stream_context, emit_stream_event
from .json_stream_extractor import JSONStreamExtractor
from .settings import ExtractorSettings, get_extractor_settings
from .typed_decode import Decoder, decode_span, resolve_decoder

logger = logging.getLogger(__name__)


class _CharCapture(list):
    """extract 的 sink：每次 write 一个字符，len() 即已写入的字符数"""

    def write(self, ch: str) -> int:
        self.append(ch)
        return len(ch)


class StreamingObjectAccumulator:
    """
    包装一个 JSONStreamExtractor，把抽出的字符累积起来；
    顶层片段闭合（栈从非空变空）时，把该片段交给 decoder，并从缓冲区切掉。

    - process_chunk: 每次最多解码一个片段，解码失败被吞掉（返回 None，记 warning）
    - finalize: 解码失败抛 DecodeError

    同一个 chunk 里出现两个完整的顶层片段时，只解码第一个；
    第二个留在缓冲区，由下一次 process_chunk（或 drain / finalize）单独解码，不会和后面的片段拼在一起。
    """

    def __init__(
        self,
        target: Any = None,
        *,
        decoder: Optional[Decoder] = None,
        settings: Optional[ExtractorSettings] = None,
        stream_id: Optional[str] = None,
    ):
        self.settings = settings or get_extractor_settings()
        self.decoder = decoder if decoder is not None else resolve_decoder(target)
        self.stream_id = stream_id
        self.parser = JSONStreamExtractor(self.settings.closer_policy)
        self._accumulated = _CharCapture()
        # 缓冲区内每个已闭合顶层片段的结束位置
        self._span_ends: List[int] = []

    def is_in_json(self) -> bool:
        return self.parser.is_in_json()

    def accumulated_json(self) -> str:
        return "".join(self._accumulated)

    def has_complete_span(self) -> bool:
        return bool(self._span_ends)

    def reset(self) -> None:
        self.parser = JSONStreamExtractor(self.settings.closer_policy)
        self._accumulated = _CharCapture()
        self._span_ends = []

    def _mark_span_end(self) -> None:
        self._span_ends.append(len(self._accumulated))

    def _drop_stray_closers(self) -> None:
        # 缓冲区开头总是栈为空的位置，这里出现的非开括号字符只能是孤立的闭合字符
        skip = 0
        while skip < len(self._accumulated) and self._accumulated[skip] not in OPEN_MARKERS:
            skip += 1
        if not skip:
            return
        logger.debug("Dropped %d stray closer(s) outside any JSON span", skip)
        del self._accumulated[:skip]
        self._span_ends = [end - skip for end in self._span_ends]

    def _take_span(self) -> str:
        cut = self._span_ends.pop(0)
        span = "".join(self._accumulated[:cut])
        del self._accumulated[:cut]
        self._span_ends = [end - cut for end in self._span_ends]
        self._drop_stray_closers()
        return span

    def process_chunk(self, chunk: str) -> Optional[Any]:
        self.parser.extract(self._accumulated, chunk or "", on_span_end=self._mark_span_end)
        self._drop_stray_closers()
        if not self._span_ends:
            return None
        return self._decode_swallowed(self._take_span())

    def drain(self) -> List[Any]:
        """解码缓冲区里所有已闭合的片段（失败的被吞掉）；未闭合的尾部留给 finalize"""
        values = []
        while self._span_ends:
            value = self._decode_swallowed(self._take_span())
            if value is not None:
                values.append(value)
        return values

    def _decode_swallowed(self, span: str) -> Optional[Any]:
        with bind_stream_context(stream_id=self.stream_id):
            try:
                value = decode_span(self.decoder, span)
            except DecodeError as e:
                logger.warning("Discarded JSON span that failed to decode: %s", e)
                emit_stream_event(
                    logger,
                    event="span_discarded",
                    level=logging.DEBUG,
                    preview_chars=self.settings.preview_chars,
                    length=len(span),
                    span=span,
                )
                return None

            emit_stream_event(
                logger,
                event="span_decoded",
                level=logging.DEBUG,
                preview_chars=self.settings.preview_chars,
                length=len(span),
                span=span,
            )
            return value

    def finalize(self) -> Optional[Any]:
        """
        解码当前累积的内容（即使片段还没闭合）。
        缓冲区为空返回 None；成功则重置整个状态并返回值；失败抛 DecodeError，状态保持不变。
        缓冲区里有多个片段时先调用 drain。
        """
        if not self._accumulated:
            return None

        span = self.accumulated_json()
        value = decode_span(self.decoder, span)
        with bind_stream_context(stream_id=self.stream_id):
            emit_stream_event(
                logger,
                event="span_finalized",
                level=logging.DEBUG,
                preview_chars=self.settings.preview_chars,
                length=len(span),
                in_json=self.parser.is_in_json(),
            )
        self.reset()
        return value
