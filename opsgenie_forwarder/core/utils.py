"""
工具函数模块
"""
import re
from typing import Any, List, Mapping

_FIELD_REF_PATTERN = re.compile(r"\[([^\[\]]+)\]")


def parse_field_reference(name: str) -> List[str]:
    """
    解析字段引用为路径

    支持格式：
    - message              -> ["message"]
    - [message]            -> ["message"]
    - [fields][alias]      -> ["fields", "alias"]
    """
    if not name:
        return []
    if not name.startswith("["):
        return [name]
    parts = _FIELD_REF_PATTERN.findall(name)
    # 不是完整的 [a][b] 形式时按普通字段名处理
    if "".join(f"[{p}]" for p in parts) != name:
        return [name]
    return parts


def get_field(event: Mapping[str, Any], name: str) -> Any:
    """
    按字段引用读取事件中的值，不存在时返回 None（不会修改事件）
    """
    path = parse_field_reference(name)
    if not path:
        return None
    value: Any = event
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
        if value is None:
            return None
    return value


def is_present(value: Any) -> bool:
    """字段是否视为存在：None 和 False 视为不存在"""
    return value is not None and value is not False
