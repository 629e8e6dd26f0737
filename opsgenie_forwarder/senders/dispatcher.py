"""
请求投递模块

对一次逻辑 POST 做有限次指数退避重试。已归类的失败只记录日志并返回
DispatchResult，不会向事件管道抛出；未归类的异常照常向上抛出。
"""
import time
from typing import Any, Callable, Dict, Optional

from ..core.logging_config import get_logger
from ..core.models import DispatchOutcome, DispatchResult, OpsGenieConfig, TransportResult
from .transport import RequestsTransport

logger = get_logger()


def backoff_seconds(attempt: int) -> float:
    """第 attempt 次重试前的等待秒数：(2^attempt - 1) / 2"""
    return (2 ** attempt - 1) / 2


class Dispatcher:
    """OpsGenie 请求投递器（无状态，可在多线程间共享）"""

    def __init__(
        self,
        config: OpsGenieConfig,
        transport=None,
        sleep: Callable[[float], None] = time.sleep,
        on_result: Optional[Callable[[DispatchResult], None]] = None,
    ):
        """
        Args:
            config: OpsGenie 配置
            transport: 提供 post(url, payload, headers) -> TransportResult 的对象，默认 RequestsTransport
            sleep: 退避等待函数（测试可替换）
            on_result: 每次投递结束时的回调，用于计数等观测
        """
        self.config = config
        self.transport = transport or RequestsTransport(config)
        self._sleep = sleep
        self._on_result = on_result

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"GenieKey {self.config.api_key}",
        }

    def _backoff(self, attempt: int):
        seconds = backoff_seconds(attempt)
        logger.info(f"等待 {seconds:.2f} 秒后重试")
        self._sleep(seconds)

    def _finish(self, result: DispatchResult) -> DispatchResult:
        if self._on_result is not None:
            self._on_result(result)
        return result

    def send(self, url: Optional[str], payload: Dict[str, Any]) -> DispatchResult:
        """
        发送请求，必要时重试

        Args:
            url: 目标 URL，为空时不发送
            payload: 请求体

        Returns:
            DispatchResult: 投递结果
        """
        if not url:
            logger.warning("目标 URL 为空，跳过发送")
            return self._finish(DispatchResult(outcome=DispatchOutcome.SKIPPED))

        logger.info(f"调用 OpsGenie URL: {url}")
        headers = self._headers()
        retries = 0
        attempts = 0

        while True:
            attempts += 1
            result: TransportResult = self.transport.post(url, payload, headers)

            if result.ok:
                logger.warning(f"已调用 [{url}]，状态码: {result.status_code}，响应: [{result.body}]")
                return self._finish(DispatchResult(
                    outcome=DispatchOutcome.SUCCESS,
                    attempts=attempts,
                    status_code=result.status_code,
                    body=result.body,
                ))

            if not result.failure.retryable:
                logger.warning(
                    f"忽略 OpsGenie 发送异常 [{result.failure.value}: {result.error}]"
                )
                return self._finish(DispatchResult(
                    outcome=DispatchOutcome.NON_RETRYABLE_FAILED,
                    attempts=attempts,
                    failure=result.failure,
                    status_code=result.status_code,
                    body=result.body,
                ))

            if retries >= self.config.max_retries:
                logger.warning(
                    f"重试 {self.config.max_retries} 次后仍失败，忽略 OpsGenie 发送异常 "
                    f"[{result.failure.value}: {result.error}]"
                )
                return self._finish(DispatchResult(
                    outcome=DispatchOutcome.RETRIED_THEN_FAILED,
                    attempts=attempts,
                    failure=result.failure,
                ))

            retries += 1
            logger.warning(f"捕获 {result.failure.value}: {result.error} - 重试中...")
            self._backoff(retries)
