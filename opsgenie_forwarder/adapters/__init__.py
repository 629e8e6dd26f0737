"""
入站事件解析模块
"""
from .event_adapter import PayloadFormat, identify_format, normalize

__all__ = [
    "PayloadFormat",
    "identify_format",
    "normalize",
]
