"""
数据模型定义
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

DEFAULT_BASE_URL = "https://api.opsgenie.com/v2/alerts/"


class Action(Enum):
    """OpsGenie 告警操作"""
    CREATE = "create"
    CLOSE = "close"
    ACKNOWLEDGE = "acknowledge"
    NOTE = "note"


class IdentifierType(Enum):
    """identifierType 查询参数取值"""
    ID = "id"
    ALIAS = "alias"


class FailureKind(Enum):
    """传输层失败类型（封闭枚举，由 transport 判定）"""
    TIMEOUT = "timeout"
    CONNECTION_REFUSED = "connection_refused"
    CONNECTION_RESET = "connection_reset"
    TLS_ERROR = "tls_error"
    PROTOCOL_ERROR = "protocol_error"
    UNEXPECTED_EOF = "unexpected_eof"
    DNS_ERROR = "dns_error"
    INVALID_ARGUMENT = "invalid_argument"
    MALFORMED_RESPONSE = "malformed_response"
    PARSE_ERROR = "parse_error"

    @property
    def retryable(self) -> bool:
        return self in _RETRYABLE_FAILURES


_RETRYABLE_FAILURES = frozenset({
    FailureKind.TIMEOUT,
    FailureKind.CONNECTION_REFUSED,
    FailureKind.CONNECTION_RESET,
    FailureKind.TLS_ERROR,
    FailureKind.PROTOCOL_ERROR,
    FailureKind.UNEXPECTED_EOF,
    FailureKind.DNS_ERROR,
})


class DispatchOutcome(Enum):
    """一次投递的最终结果"""
    SKIPPED = "skipped"
    SUCCESS = "success"
    RETRIED_THEN_FAILED = "retried_then_failed"
    NON_RETRYABLE_FAILED = "non_retryable_failed"


@dataclass(frozen=True)
class AttributeNames:
    """事件中各告警字段对应的属性名（支持 [a][b] 形式的嵌套字段引用）"""
    action: str = "opsgenieAction"
    alert_id: str = "alertId"
    alias: str = "alias"
    message: str = "message"
    teams: str = "teams"
    visible_to: str = "visibleTo"
    description: str = "description"
    actions: str = "actions"
    source: str = "source"
    priority: str = "priority"
    tags: str = "tags"
    details: str = "details"
    entity: str = "entity"
    user: str = "user"
    note: str = "note"


@dataclass(frozen=True)
class OpsGenieConfig:
    """OpsGenie 输出配置（启动时加载一次，之后只读）"""
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    close_action_path: str = "/close"
    acknowledge_action_path: str = "/acknowledge"
    note_action_path: str = "/notes"
    proxy_address: Optional[str] = None
    proxy_port: Optional[int] = None
    verify_ssl: bool = True  # 关闭后不校验服务端证书
    timeout: float = 10
    max_retries: int = 5
    attributes: AttributeNames = field(default_factory=AttributeNames)

    def __post_init__(self):
        if not self.api_key:
            raise ValueError("OpsGenie api_key 不能为空")

    def action_path(self, action: Action) -> str:
        """非 create 操作对应的 URL 后缀"""
        paths = {
            Action.CLOSE: self.close_action_path,
            Action.ACKNOWLEDGE: self.acknowledge_action_path,
            Action.NOTE: self.note_action_path,
        }
        return paths[action]

    @property
    def proxy(self) -> Optional[Dict[str, str]]:
        """转换为 requests 使用的代理字典"""
        if not self.proxy_address:
            return None
        address = self.proxy_address
        if "://" not in address:
            address = f"http://{address}"
        # 地址中已带端口时不再追加 proxy_port
        if self.proxy_port and urlsplit(address).port is None:
            address = f"{address.rstrip('/')}:{self.proxy_port}"
        # socks5 统一改为 socks5h，由代理端解析 DNS
        if address.startswith("socks5://"):
            address = "socks5h://" + address[len("socks5://"):]
        return {"http": address, "https": address}


@dataclass(frozen=True)
class AlertIdentifier:
    """定位已有告警的 (类型, 值)"""
    type: IdentifierType
    value: str


@dataclass
class AlertRequest:
    """由事件构建出的待发送请求"""
    action: Action
    url: str
    payload: Dict[str, Any]
    identifier: Optional[AlertIdentifier] = None


@dataclass
class TransportResult:
    """单次 HTTP 调用结果；failure 为 None 表示成功"""
    failure: Optional[FailureKind] = None
    status_code: Optional[int] = None
    body: Any = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass
class DispatchResult:
    """Dispatcher 返回给调用方的结果，用于观测"""
    outcome: DispatchOutcome
    attempts: int = 0
    failure: Optional[FailureKind] = None
    status_code: Optional[int] = None
    body: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "attempts": self.attempts,
            "failure": self.failure.value if self.failure else None,
            "status_code": self.status_code,
        }
