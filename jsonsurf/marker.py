from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .constants import COUNTERPARTS, OPEN_MARKERS, CLOSER_POLICY_COMPAT, CLOSER_POLICY_STRICT, CLOSER_POLICIES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Marker:
    """一个尚未闭合的结构字符，以及能与之配对的闭合字符"""
    opener: str
    closer: str

    @classmethod
    def classify(cls, ch: str) -> Optional["Marker"]:
        if ch not in OPEN_MARKERS:
            return None
        return cls(opener=ch, closer=COUNTERPARTS[ch])

    def is_counterpart(self, ch: str) -> bool:
        return self.closer == ch


class NestingStack:
    """
    当前未闭合结构的 LIFO 栈。栈为空 <=> 不在任何 JSON 片段内。

    closer_policy:
      - compat: 从栈顶向下查找任意能配对的 Marker，找到后弹出的是栈顶（不一定是匹配到的那个）。
        严格嵌套时与 LIFO 一致；乱序闭合时深度可能失真。
      - strict: 只有与栈顶配对的闭合字符才会被消费，否则忽略。
    两种策略都不会抛异常。
    """

    def __init__(self, closer_policy: str = CLOSER_POLICY_COMPAT):
        if closer_policy not in CLOSER_POLICIES:
            raise ValueError(f"unknown_closer_policy: {closer_policy}")
        self.closer_policy = closer_policy
        self._markers: List[Marker] = []

    @property
    def depth(self) -> int:
        return len(self._markers)

    @property
    def top(self) -> Optional[Marker]:
        return self._markers[-1] if self._markers else None

    def is_open(self) -> bool:
        return bool(self._markers)

    def push(self, marker: Marker) -> None:
        self._markers.append(marker)

    def clear(self) -> None:
        self._markers.clear()

    def close(self, ch: str) -> bool:
        """
        处理一个闭合候选字符。
        返回 True 表示这次弹栈让栈变空（一个完整片段结束）。
        没有可配对的 Marker 时不做任何状态变更，返回 False。
        """
        if not self._markers:
            return False

        if self.closer_policy == CLOSER_POLICY_STRICT:
            if not self._markers[-1].is_counterpart(ch):
                logger.debug("Ignored closer %r, top of stack expects %r", ch, self._markers[-1].closer)
                return False
        elif not any(marker.is_counterpart(ch) for marker in reversed(self._markers)):
            return False

        self._markers.pop()
        return not self._markers
