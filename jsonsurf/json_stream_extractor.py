from __future__ import annotations

import io
import logging
from typing import Callable, List, Optional, TextIO

from .constants import PAIRED_MARKERS, CLOSER_POLICY_COMPAT
from .marker import Marker, NestingStack

logger = logging.getLogger(__name__)


class JSONStreamExtractor:
    """
    从任意文本流里抽出 JSON 片段（{...} / [...]），其余文本全部丢弃。

    只识别四个结构字符，不解析字符串/数字/转义，所以字符串里的括号也会被当成结构字符。
    状态（栈、当前片段）跨多次 extract 调用保留：一个片段被切成几个 chunk 送进来，
    与整块送进来的输出完全一致。
    """

    def __init__(self, closer_policy: str = CLOSER_POLICY_COMPAT):
        self.markers = NestingStack(closer_policy)
        self.buffer: List[str] = []

    def is_in_json(self) -> bool:
        return self.markers.is_open()

    is_open = is_in_json

    @property
    def depth(self) -> int:
        return self.markers.depth

    @property
    def pending(self) -> str:
        """当前未闭合片段已收到的文本"""
        return "".join(self.buffer)

    def reset(self) -> None:
        self.markers.clear()
        self.buffer.clear()

    def _update_markers(self, ch: str) -> bool:
        marker = Marker.classify(ch)
        if marker is not None:
            self.markers.push(marker)
            return False

        completed = self.markers.close(ch)
        # 栈已空：片段结束（或是栈外的孤立闭合字符），片段文本已经逐字写进 sink，直接清空
        if not self.markers.is_open():
            self.buffer.clear()
        return completed

    def extract(
        self,
        sink: TextIO,
        chunk: str,
        on_span_end: Optional[Callable[[], None]] = None,
    ) -> None:
        """
        逐字符处理 chunk，把属于 JSON 片段的字符写进 sink。

        sink 只需要有 write(str)。sink.write 抛出的异常原样向上抛，
        此时解析状态停在出错字符之前（先写，再更新状态）。
        on_span_end 在每个顶层片段闭合时调用一次。
        """
        for ch in chunk:
            if not self.markers.is_open() and ch not in PAIRED_MARKERS:
                continue

            sink.write(ch)
            self.buffer.append(ch)
            if self._update_markers(ch):
                logger.debug("JSON span closed")
                if on_span_end is not None:
                    on_span_end()

    def feed(self, chunk: str) -> str:
        """extract 的便捷版本：返回本次 chunk 中被抽出的文本"""
        out = io.StringIO()
        self.extract(out, chunk)
        return out.getvalue()
