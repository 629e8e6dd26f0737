"""
事件解析入口模块

把入站 HTTP JSON body 统一转换为事件列表，支持三种格式：
- 单条事件:      {"opsgenieAction": "create", "message": "..."}
- 事件数组:      [{...}, {...}]
- 批量包装:      {"events": [{...}, {...}]}
"""
from enum import Enum
from typing import Any, Dict, List

from ..core.logging_config import get_logger

logger = get_logger()


class PayloadFormat(Enum):
    """入站 payload 格式"""
    SINGLE_EVENT = "single_event"
    EVENT_LIST = "event_list"
    WRAPPED_EVENTS = "wrapped_events"
    UNKNOWN = "unknown"


def identify_format(payload: Any) -> PayloadFormat:
    """仅根据 payload 顶层结构判断格式"""
    if isinstance(payload, list):
        return PayloadFormat.EVENT_LIST
    if isinstance(payload, dict):
        if isinstance(payload.get("events"), list):
            return PayloadFormat.WRAPPED_EVENTS
        return PayloadFormat.SINGLE_EVENT
    return PayloadFormat.UNKNOWN


def _only_dicts(items: List[Any]) -> List[Dict[str, Any]]:
    events = []
    for i, item in enumerate(items):
        if isinstance(item, dict):
            events.append(item)
        else:
            logger.warning(f"第 {i} 条事件不是 JSON 对象，已忽略: {item!r}")
    return events


def normalize(payload: Any) -> List[Dict[str, Any]]:
    """
    统一解析入口：先识别格式，再拆成事件列表；无法识别时返回空列表
    """
    format_type = identify_format(payload)

    if format_type == PayloadFormat.WRAPPED_EVENTS:
        return _only_dicts(payload["events"])
    elif format_type == PayloadFormat.EVENT_LIST:
        return _only_dicts(payload)
    elif format_type == PayloadFormat.SINGLE_EVENT:
        return [payload]
    else:
        return []
