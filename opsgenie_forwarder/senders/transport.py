"""
HTTP 传输模块

负责单次 POST 调用，并把失败归类为封闭的 FailureKind 枚举，
重试策略由 dispatcher 决定，这里不做任何重试。

性能优化：
- 使用 HTTP 连接池复用连接，减少连接建立开销
- 支持会话级别的代理配置
"""
import http.client
import json
import logging
import socket
import ssl
from threading import Lock
from typing import Any, Dict, Iterator, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.exceptions import HeaderParsingError, MaxRetryError, NameResolutionError

from ..core.logging_config import get_logger
from ..core.models import FailureKind, OpsGenieConfig, TransportResult

logger = get_logger()

# 请求参数本身非法，重试无意义
_INVALID_ARGUMENT_ERRORS = (
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidHeader,
    requests.exceptions.URLRequired,
)

_MALFORMED_RESPONSE_ERRORS = (
    http.client.BadStatusLine,
    http.client.LineTooLong,
    HeaderParsingError,
)

# HTTP 连接池，按代理配置缓存
_session_cache: Dict[str, requests.Session] = {}
_session_lock = Lock()


def _get_session(proxy: Optional[Dict[str, str]] = None) -> requests.Session:
    """
    获取或创建 HTTP 会话（带连接池）

    Args:
        proxy: 代理配置

    Returns:
        requests.Session 实例
    """
    cache_key = str(proxy) if proxy else "no_proxy"

    # /events 在线程池中执行，首次创建会话需加锁
    with _session_lock:
        session = _session_cache.get(cache_key)
        if session is None:
            session = requests.Session()

            # 连接池；适配器层不重试，由 Dispatcher 统一重试
            adapter = HTTPAdapter(
                pool_connections=10,
                pool_maxsize=20,
                max_retries=0,
            )
            session.mount("http://", adapter)
            session.mount("https://", adapter)

            if proxy:
                session.proxies.update(proxy)

            _session_cache[cache_key] = session

    return session


def clear_session_cache():
    """
    清理所有缓存的 HTTP 会话（主要用于测试或资源清理）
    """
    with _session_lock:
        for session in _session_cache.values():
            session.close()
        _session_cache.clear()


def _iter_causes(exc: BaseException) -> Iterator[BaseException]:
    """广度优先遍历异常链：MaxRetryError.reason、异常参数、__cause__、__context__"""
    seen = set()
    queue = [exc]
    while queue:
        current = queue.pop(0)
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        if isinstance(current, MaxRetryError):
            queue.append(current.reason)
        queue.extend(arg for arg in current.args if isinstance(arg, BaseException))
        queue.append(current.__cause__)
        queue.append(current.__context__)


def _classify_connection_error(exc: BaseException) -> FailureKind:
    for cause in _iter_causes(exc):
        if isinstance(cause, ConnectionRefusedError):
            return FailureKind.CONNECTION_REFUSED
        if isinstance(cause, ConnectionResetError):
            return FailureKind.CONNECTION_RESET
        if isinstance(cause, (NameResolutionError, socket.gaierror)):
            return FailureKind.DNS_ERROR
        if isinstance(cause, ssl.SSLError):
            return FailureKind.TLS_ERROR
        if isinstance(cause, (http.client.IncompleteRead, EOFError)):
            return FailureKind.UNEXPECTED_EOF
        if isinstance(cause, _MALFORMED_RESPONSE_ERRORS):
            return FailureKind.MALFORMED_RESPONSE
        if isinstance(cause, socket.timeout):
            return FailureKind.TIMEOUT
    return FailureKind.PROTOCOL_ERROR


def classify_exception(exc: BaseException) -> Optional[FailureKind]:
    """
    把 requests 抛出的异常归类为 FailureKind

    Returns:
        FailureKind；无法归类时返回 None（调用方应继续抛出）
    """
    # 顺序有意义：SSLError / ConnectTimeout 同时也是 ConnectionError
    if isinstance(exc, requests.exceptions.SSLError):
        return FailureKind.TLS_ERROR
    if isinstance(exc, requests.exceptions.Timeout):
        return FailureKind.TIMEOUT
    if isinstance(exc, requests.exceptions.ConnectionError):
        return _classify_connection_error(exc)
    if isinstance(exc, requests.exceptions.ChunkedEncodingError):
        return FailureKind.UNEXPECTED_EOF
    if isinstance(exc, requests.exceptions.ContentDecodingError):
        return FailureKind.MALFORMED_RESPONSE
    if isinstance(exc, requests.exceptions.JSONDecodeError):
        return FailureKind.PARSE_ERROR
    if isinstance(exc, requests.exceptions.InvalidJSONError):
        return FailureKind.INVALID_ARGUMENT
    if isinstance(exc, _INVALID_ARGUMENT_ERRORS):
        return FailureKind.INVALID_ARGUMENT
    return None


class RequestsTransport:
    """基于 requests 的 OpsGenie 传输实现"""

    def __init__(self, config: OpsGenieConfig):
        self.config = config

    def post(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> TransportResult:
        """
        发送一次 POST 请求

        Args:
            url: 目标 URL
            payload: 请求体（将编码为 JSON）
            headers: 请求头

        Returns:
            TransportResult: 成功时 failure 为 None
        """
        try:
            body = json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            return TransportResult(failure=FailureKind.INVALID_ARGUMENT, error=f"{type(e).__name__}: {e}")

        session = _get_session(proxy=self.config.proxy)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"发送 OpsGenie 请求的完整 body:\n{json.dumps(payload, ensure_ascii=False, indent=2)}")

        try:
            response = session.post(
                url,
                data=body.encode("utf-8"),
                headers=headers,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
            )
        except requests.exceptions.RequestException as e:
            kind = classify_exception(e)
            if kind is None:
                raise
            return TransportResult(failure=kind, error=f"{type(e).__name__}: {e}")

        # 响应体只用于日志，解析失败也不影响状态码
        try:
            parsed = response.json()
        except requests.exceptions.JSONDecodeError as e:
            return TransportResult(
                failure=FailureKind.PARSE_ERROR,
                status_code=response.status_code,
                body=response.text,
                error=f"{type(e).__name__}: {e}",
            )
        return TransportResult(status_code=response.status_code, body=parsed)
