"""
请求构建模块

把一条事件映射为 OpsGenie 告警操作：决定动作、目标 URL 与请求体。
本模块不做任何网络 I/O，也不修改事件。
"""
from typing import Any, Dict, Mapping, Optional

from ..core.logging_config import get_logger
from ..core.models import (
    Action,
    AlertIdentifier,
    AlertRequest,
    AttributeNames,
    IdentifierType,
    OpsGenieConfig,
)
from ..core.utils import get_field, is_present

logger = get_logger()

# create 请求体字段 -> AttributeNames 属性，按此顺序写入
_CREATE_FIELDS = (
    ("message", "message"),
    ("alias", "alias"),
    ("teams", "teams"),
    ("visibleTo", "visible_to"),
    ("description", "description"),
    ("actions", "actions"),
    ("tags", "tags"),
    ("entity", "entity"),
    ("priority", "priority"),
    ("details", "details"),
)

_COMMON_FIELDS = (
    ("source", "source"),
    ("user", "user"),
    ("note", "note"),
)


def parse_action(value: Any) -> Optional[Action]:
    """大小写不敏感地解析动作，无法识别时返回 None"""
    if not isinstance(value, str):
        return None
    try:
        return Action(value.strip().lower())
    except ValueError:
        return None


def resolve_identifier(event: Mapping[str, Any], attributes: AttributeNames) -> Optional[AlertIdentifier]:
    """
    解析告警标识：优先 alias，其次 alertId，都没有时返回 None
    """
    alias = get_field(event, attributes.alias)
    if is_present(alias) and alias != "":
        return AlertIdentifier(IdentifierType.ALIAS, str(alias))
    alert_id = get_field(event, attributes.alert_id)
    if is_present(alert_id) and alert_id != "":
        return AlertIdentifier(IdentifierType.ID, str(alert_id))
    return None


def _copy_fields(event: Mapping[str, Any], attributes: AttributeNames, fields, payload: Dict[str, Any]) -> Dict[str, Any]:
    for key, attr in fields:
        value = get_field(event, getattr(attributes, attr))
        if is_present(value):
            payload[key] = value
    return payload


def build_common_content(event: Mapping[str, Any], attributes: AttributeNames) -> Dict[str, Any]:
    """所有动作共有的字段：source / user / note（事件中存在才写入）"""
    return _copy_fields(event, attributes, _COMMON_FIELDS, {})


def build_create_content(
    event: Mapping[str, Any],
    attributes: AttributeNames,
    payload: Dict[str, Any],
) -> Dict[str, Any]:
    """在公共字段基础上追加 create 专用字段，缺失的字段直接省略"""
    return _copy_fields(event, attributes, _CREATE_FIELDS, payload)


def build_action_url(config: OpsGenieConfig, action: Action, identifier: Optional[AlertIdentifier]) -> str:
    """
    构建目标 URL

    - create: <base_url>
    - 其他:   <base_url><identifier><suffix>?identifierType=<id|alias>

    未解析到标识时保留空的标识段，由远端 API 拒绝。
    """
    if action is Action.CREATE:
        return config.base_url
    value = identifier.value if identifier else ""
    id_type = identifier.type if identifier else IdentifierType.ID
    return f"{config.base_url}{value}{config.action_path(action)}?identifierType={id_type.value}"


def build_request(event: Mapping[str, Any], config: OpsGenieConfig) -> Optional[AlertRequest]:
    """
    根据事件构建请求

    Args:
        event: 事件（只读）
        config: OpsGenie 配置

    Returns:
        AlertRequest；事件没有动作或动作无法识别时返回 None
    """
    attributes = config.attributes
    raw_action = get_field(event, attributes.action)
    if not is_present(raw_action):
        logger.warning("事件未定义 OpsGenie 动作，跳过")
        return None

    action = parse_action(raw_action)
    if action is None:
        logger.warning(f"动作 {raw_action} 不属于任何可用动作，丢弃该事件")
        return None

    identifier = resolve_identifier(event, attributes)
    payload = build_common_content(event, attributes)
    if action is Action.CREATE:
        payload = build_create_content(event, attributes, payload)

    url = build_action_url(config, action, identifier)
    return AlertRequest(action=action, url=url, payload=payload, identifier=identifier)
