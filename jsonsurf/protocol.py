from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel


class ExtractRequest(BaseModel):
    """一次性抽取请求"""
    text: str


class ExtractResponse(BaseModel):
    json_text: str
    found: bool


class DecodeRequest(BaseModel):
    """抽取 + 解码请求"""
    text: str


class DecodeResponse(BaseModel):
    value: Any = None


class EventType(str, Enum):
    """WebSocket 推送的事件类型"""
    OBJECT = "object"   # 解码出一个完整对象
    ERROR = "error"     # finalize 解码失败
    RESET = "reset"     # 流状态已重置


@dataclass
class StreamEvent:
    event_type: EventType = None

    stream_id: str = ""

    data: Optional[Any] = None
    error: Optional[str] = None

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        payload = {
            "event_type": self.event_type.value,
            "stream_id": self.stream_id,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


class GenerateRequest(BaseModel):
    """让模型生成 JSON 的请求"""
    prompt: str


class GenerateResponse(BaseModel):
    objects: List[Any] = []
