"""
jsonsurf JSON 抽取服务
入口文件
"""
import os
from pathlib import Path

import logging
import yaml
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from context import request_id_ctx

from jsonsurf.event_logger import current_stream_id, bind_stream_context
from jsonsurf.llm_stream import StructuredOutputClient
from jsonsurf.settings import configure_extractor_settings
from api.routes import router as json_router
from ws.connection_manager import ConnectionManager

PROJECT_ROOT = Path(__file__).resolve().parent

# 客户端发送该帧表示“流结束”，服务端对剩余内容做 finalize
FINALIZE_COMMAND = "\u0004"
# 客户端发送该帧表示丢弃当前流状态
RESET_COMMAND = "\u0018"

with (PROJECT_ROOT / "config.yaml").open("r", encoding="utf-8") as f:
    config = yaml.safe_load(f) or {}

extractor_settings = configure_extractor_settings(
    raw_extractor=config.get("extractor") or {},
    env=os.environ,
    allow_env_override=True,
)


class RequestIdFilter(logging.Filter):
    def filter(self, record):
        # request
        record.request_id = request_id_ctx.get()
        # websocket stream
        record.stream_id = current_stream_id()
        return True


log_config = config.get("log") or {}

logger = logging.getLogger()
logger.setLevel(str(log_config.get("level") or "info").upper())

handler = logging.StreamHandler()
formatter = logging.Formatter(
    "%(asctime)s | req=%(request_id)s | stream=%(stream_id)s | "
    "%(levelname)s | %(filename)s:%(lineno)d | %(name)s | %(message)s"
)
handler.setFormatter(formatter)
handler.addFilter(RequestIdFilter())

default_log_file = PROJECT_ROOT / (log_config.get("file") or "data/logs/jsonsurf.log")
log_file_path = Path(os.getenv("JSONSURF_LOG_FILE", str(default_log_file)))
log_file_path.parent.mkdir(parents=True, exist_ok=True)
file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
file_handler.setFormatter(formatter)
file_handler.addFilter(RequestIdFilter())

logger.handlers.clear()
logger.addHandler(handler)
logger.addHandler(file_handler)


def init_llm_client():
    llm_config = config.get("llm") or {}
    api_key = os.getenv("JSONSURF_LLM_API_KEY") or llm_config.get("api_key")
    if not api_key:
        logger.info("LLM api_key not configured, /json/generate disabled")
        return None
    return StructuredOutputClient(llm_config.get("model"),
                                  api_key,
                                  llm_config.get("base_url"),
                                  settings=extractor_settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ===== startup =====
    app.state.ws_manager = ConnectionManager(settings=extractor_settings)
    app.state.llm_client = init_llm_client()
    logger.info("Extractor settings: closer_policy=%s chunk_size=%s",
                extractor_settings.closer_policy, extractor_settings.chunk_size)
    yield

    # ===== shutdown =====
    pending = list(app.state.ws_manager.active_connections)
    for client_id in pending:
        app.state.ws_manager.disconnect(client_id)
    logger.info("Shutdown completed: dropped_streams=%s", len(pending))


# 创建 FastAPI 应用
app = FastAPI(
    title="jsonsurf",
    description="Extract JSON objects and arrays from mixed text streams.",
    version="0.1.0",
    lifespan=lifespan,
)

# 添加 CORS 中间件
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID", "-")
    token = request_id_ctx.set(request_id)
    try:
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response
    finally:
        request_id_ctx.reset(token)


# 注册路由
app.include_router(json_router)


@app.websocket("/ws/{client_id}")
async def websocket_endpoint(websocket: WebSocket, client_id: str):
    """WebSocket 端点：每个文本帧是该 client 流中的一个 chunk"""
    ws_manager = app.state.ws_manager
    await ws_manager.connect(websocket, client_id)
    with bind_stream_context(stream_id=client_id):
        try:
            while True:
                chunk = await websocket.receive_text()
                if chunk == FINALIZE_COMMAND:
                    await ws_manager.finalize(client_id)
                elif chunk == RESET_COMMAND:
                    await ws_manager.reset(client_id)
                else:
                    await ws_manager.feed(client_id, chunk)
        except WebSocketDisconnect:
            ws_manager.disconnect(client_id)
            logger.info(f"Disconnected from client: {client_id}")


# 根路径
@app.get("/")
async def root():
    """根路径"""
    return {
        "name": "jsonsurf",
        "version": "0.1.0",
        "endpoints": {
            "POST /json/extract": "抽取混合文本中的 JSON",
            "POST /json/decode": "抽取并解码 JSON",
            "POST /json/generate": "流式调用模型并抽取 JSON",
            "WS /ws/{client_id}": "流式抽取",
        }
    }


# 健康检查
@app.get("/health")
async def health():
    """健康检查"""
    return {
        "status": "healthy",
        "service": "jsonsurf healthy",
        "closer_policy": extractor_settings.closer_policy,
    }


if __name__ == "__main__":
    import uvicorn

    app_config = config.get("app") or {}
    port = int(app_config.get("port") or 8080)
    log_level = str(log_config.get("level") or "info").lower()
    # 开发服务器
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        log_level=log_level
    )
