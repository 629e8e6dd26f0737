"""
FastAPI 应用主入口
"""
import json
import logging
import uuid
from contextlib import asynccontextmanager
from threading import Lock
from typing import Optional

from fastapi import FastAPI, Request
from starlette.concurrency import run_in_threadpool

from opsgenie_forwarder.core.config import load_config
from opsgenie_forwarder.core.logging_config import LOGGER_NAME, setup_logging
from opsgenie_forwarder.core.models import OpsGenieConfig
from opsgenie_forwarder.services import AlertService

logger = logging.getLogger(LOGGER_NAME)


def create_app(config: Optional[OpsGenieConfig] = None, service: Optional[AlertService] = None) -> FastAPI:
    """
    创建 FastAPI 应用

    未传入 config 时从 config.yaml 加载，并在此处初始化日志（仅此一处）。

    Args:
        config: OpsGenie 配置
        service: 告警服务（测试可注入）
    """
    if config is None and service is None:
        raw, config = load_config()
        setup_logging(**raw["logging"])
        logger.info(f"配置加载完成，OpsGenie 地址: {config.base_url}")
    if service is None:
        service = AlertService(config)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info("=" * 60)
        logger.info("OpsGenie Forwarder 服务启动")
        logger.info(f"证书校验: {'开启' if service.config.verify_ssl else '关闭'}")
        logger.info("=" * 60)

        yield

        logger.info("=" * 60)
        logger.info("OpsGenie Forwarder 服务已关闭")
        logger.info("=" * 60)

    app = FastAPI(lifespan=lifespan, redirect_slashes=False)
    app.state.service = service

    @app.post("/events")
    async def events(req: Request):
        """接收事件并转发到 OpsGenie（逐条顺序处理）"""
        request_id = str(uuid.uuid4())[:8]
        try:
            payload = await req.json()
            if logger.isEnabledFor(logging.DEBUG):
                raw_preview = json.dumps(payload, ensure_ascii=False, indent=2)
                logger.debug(f"[{request_id}] 接收到的完整事件数据:\n{raw_preview}")

            # 投递含阻塞重试，放到线程池执行，避免阻塞事件循环
            result = await run_in_threadpool(service.process_payload, payload)
            if not result.get("ok"):
                logger.warning(f"[{request_id}] 事件处理结果异常: {result}")
            return result
        except Exception as e:
            logger.error(f"[{request_id}] 处理事件请求失败: {e}", exc_info=True)
            return {"ok": False, "error": f"处理失败: {str(e)}"}

    @app.get("/health")
    async def health():
        return {"ok": True, "stats": service.stats}

    return app


_app: Optional[FastAPI] = None
_app_lock = Lock()


def __getattr__(name: str):
    """模块级 app 在首次访问时才加载配置并创建（支持 uvicorn app:app）"""
    global _app
    if name != "app":
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    with _app_lock:
        if _app is None:
            _app = create_app()
    return _app
