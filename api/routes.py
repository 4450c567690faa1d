"""
FastAPI 路由定义
JSON 抽取 REST API 端点
"""
import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends

from jsonsurf.errors import DeserializeError
from jsonsurf.extractor import extract_json_to_string
from jsonsurf.llm_stream import StructuredOutputClient
from jsonsurf.protocol import (
    DecodeRequest, DecodeResponse, ExtractRequest, ExtractResponse, GenerateRequest, GenerateResponse
)
from jsonsurf.typed_decode import from_mixed_text

logger = logging.getLogger(__name__)


# 创建路由
router = APIRouter(prefix="/json", tags=["JSON"])


@router.post("/extract", response_model=ExtractResponse)
async def extract(request: ExtractRequest):
    """从混合文本中抽出所有 JSON 片段（按出现顺序拼接）"""
    json_text = extract_json_to_string(request.text)
    return ExtractResponse(json_text=json_text, found=bool(json_text))


@router.post("/decode", response_model=DecodeResponse)
async def decode(request: DecodeRequest):
    """抽取并解码为 JSON 值"""
    try:
        value = from_mixed_text(request.text)
    except DeserializeError as e:
        logger.info(f"decode failed: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    return DecodeResponse(value=value)


@router.get("/health")
async def health_check():
    """健康检查"""
    return {"status": "healthy", "service": "json"}


def get_llm_client() -> Optional[StructuredOutputClient]:
    from main import app
    return getattr(app.state, "llm_client", None)


@router.post("/generate", response_model=GenerateResponse)
async def generate(
        request: GenerateRequest,
        llm_client: Optional[StructuredOutputClient] = Depends(get_llm_client)
):
    """
    让模型按提示输出 JSON，边流式接收边抽取

    返回流中解码出的全部对象（按出现顺序）
    """
    if llm_client is None:
        raise HTTPException(status_code=503, detail="LLM client is not configured")

    messages = [{"role": "user", "content": request.prompt}]
    objects = []
    async for value in llm_client.astream_objects(messages):
        objects.append(value)
    logger.info(f"generate produced {len(objects)} JSON object(s)")
    return GenerateResponse(objects=objects)
