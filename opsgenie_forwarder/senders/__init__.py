"""
消息发送模块
"""
from .dispatcher import Dispatcher, backoff_seconds
from .transport import RequestsTransport, classify_exception, clear_session_cache

__all__ = [
    "Dispatcher",
    "backoff_seconds",
    "RequestsTransport",
    "classify_exception",
    "clear_session_cache",
]
