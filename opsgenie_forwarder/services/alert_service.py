"""
告警处理服务层

将业务逻辑从 app.py 中分离出来，使 app.py 只负责 HTTP 路由和请求处理。
事件按顺序逐条处理：构建请求 -> 投递（含重试）-> 记录结果。
"""
from threading import Lock
from typing import Any, Dict, Mapping, Optional

from ..adapters.event_adapter import normalize
from ..core.logging_config import get_logger
from ..core.models import DispatchOutcome, DispatchResult, OpsGenieConfig
from ..routing.request_builder import build_request
from ..senders.dispatcher import Dispatcher

logger = get_logger()


class AlertService:
    """OpsGenie 告警转发服务"""

    def __init__(self, config: OpsGenieConfig, dispatcher: Optional[Dispatcher] = None):
        """
        初始化告警服务

        Args:
            config: OpsGenie 配置
            dispatcher: 投递器，默认按配置创建
        """
        self.config = config
        self.dispatcher = dispatcher or Dispatcher(config)
        self._stats_lock = Lock()
        self._stats: Dict[str, int] = {"discarded": 0}
        for outcome in DispatchOutcome:
            self._stats[outcome.value] = 0

    @property
    def stats(self) -> Dict[str, int]:
        """各结果计数的快照"""
        with self._stats_lock:
            return dict(self._stats)

    def _count(self, key: str):
        with self._stats_lock:
            self._stats[key] = self._stats.get(key, 0) + 1

    def process_event(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        """
        处理单条事件

        Args:
            event: 事件

        Returns:
            处理结果字典
        """
        logger.info(f"处理事件: {event}")
        request = build_request(event, self.config)
        if request is None:
            self._count("discarded")
            return {"status": "skipped", "reason": "未定义或无法识别的 OpsGenie 动作"}

        result: DispatchResult = self.dispatcher.send(request.url, request.payload)
        self._count(result.outcome.value)
        return {
            "status": "processed",
            "action": request.action.value,
            "url": request.url,
            **result.to_dict(),
        }

    def process_payload(self, payload: Any) -> Dict[str, Any]:
        """
        处理 HTTP 入站请求

        Args:
            payload: 请求体

        Returns:
            处理结果字典
        """
        events = normalize(payload)
        if not events:
            logger.warning("无法解析事件数据格式")
            return {"ok": False, "error": "无法解析事件数据格式"}

        logger.info(f"收到事件请求: {len(events)} 条")
        results = [self.process_event(event) for event in events]
        return {"ok": True, "results": results}
