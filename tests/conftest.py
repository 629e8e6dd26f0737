"""
测试基础配置

提供只读 OpsGenie 配置、按脚本返回结果的假 transport 以及记录等待时间的 sleep。
所有测试都不访问真实网络。
"""
from typing import List

import pytest

from opsgenie_forwarder.core.models import FailureKind, OpsGenieConfig, TransportResult

BASE_URL = "https://api.opsgenie.com/v2/alerts/"


class ScriptedTransport:
    """按顺序返回预设结果；结果为异常实例时直接抛出"""

    def __init__(self, results):
        self.results = list(results)
        self.calls = []

    def post(self, url, payload, headers):
        self.calls.append({"url": url, "payload": payload, "headers": headers})
        # 脚本用完后重复最后一个结果
        item = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(item, BaseException):
            raise item
        return item


def ok_result(body=None, status_code=202) -> TransportResult:
    return TransportResult(status_code=status_code, body=body or {"result": "Request will be processed"})


def failed(kind: FailureKind) -> TransportResult:
    return TransportResult(failure=kind, error=f"simulated {kind.value}")


@pytest.fixture
def config() -> OpsGenieConfig:
    return OpsGenieConfig(api_key="test-key")


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append


@pytest.fixture(autouse=True)
def _no_env_api_key(monkeypatch):
    monkeypatch.delenv("OPSGENIE_API_KEY", raising=False)
