from __future__ import annotations

import io
import logging
from typing import TextIO

from .json_stream_extractor import JSONStreamExtractor
from .settings import get_extractor_settings

logger = logging.getLogger(__name__)


def extract_json_to_string(text: str) -> str:
    """
    一次性抽取：返回 text 中所有 JSON 片段按出现顺序拼接后的结果。
    'Start {"a":1}{"b":2} End' -> '{"a":1}{"b":2}'
    """
    parser = JSONStreamExtractor(get_extractor_settings().closer_policy)
    out = io.StringIO()
    parser.extract(out, text or "")
    return out.getvalue()


def copy_json(source: TextIO, sink: TextIO, chunk_size: int | None = None) -> bool:
    """
    按 chunk_size 从 source 读文本，把抽出的 JSON 直接写进 sink（例如 sys.stdout）。
    返回读完后是否仍有未闭合的片段。
    """
    settings = get_extractor_settings()
    size = chunk_size or settings.chunk_size
    parser = JSONStreamExtractor(settings.closer_policy)
    while True:
        chunk = source.read(size)
        if not chunk:
            break
        parser.extract(sink, chunk)

    if parser.is_in_json():
        logger.warning("Input ended inside a JSON span, depth=%s pending=%r",
                       parser.depth, parser.pending[: settings.preview_chars])
    return parser.is_in_json()
