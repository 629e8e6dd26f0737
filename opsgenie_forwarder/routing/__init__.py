"""
请求构建模块
"""
from .request_builder import build_request, parse_action, resolve_identifier

__all__ = [
    "build_request",
    "parse_action",
    "resolve_identifier",
]
