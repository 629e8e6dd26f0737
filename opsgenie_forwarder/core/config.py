"""
配置加载模块（只负责读配置，不初始化日志；日志由 app 在启动时显式初始化）
"""
import dataclasses
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from .models import AttributeNames, OpsGenieConfig, DEFAULT_BASE_URL

API_KEY_ENV = "OPSGENIE_API_KEY"


def _config_path() -> Path:
    """解析 config.yaml 路径：优先环境变量 CONFIG_FILE，否则为项目根目录下的 config.yaml"""
    env_path = os.environ.get("CONFIG_FILE")
    if env_path and os.path.isfile(env_path):
        return Path(env_path)
    # 项目根：当前文件 opsgenie_forwarder/core/config.py -> 上两级目录
    root = Path(__file__).resolve().parent.parent.parent
    return root / "config.yaml"


def _validate_logging_config(raw: Dict) -> None:
    """
    校验 logging 配置必须存在且字段完整，不在代码里兜底默认值。
    """
    logging_cfg = raw.get("logging")
    if not isinstance(logging_cfg, dict):
        raise ValueError("config.yaml 中必须配置 logging 节点")

    required_fields = ["log_dir", "log_file", "level", "max_bytes", "backup_count"]
    missing = [field for field in required_fields if field not in logging_cfg]
    if missing:
        raise ValueError(f"config.yaml 中 logging 缺少必要字段: {', '.join(missing)}")


def _build_attributes(raw_attrs: Optional[Dict[str, Any]]) -> AttributeNames:
    """构建事件属性名映射，未配置的字段使用默认名"""
    if not raw_attrs:
        return AttributeNames()
    if not isinstance(raw_attrs, dict):
        raise ValueError("opsgenie.attributes 必须是字典")
    known = {f.name for f in dataclasses.fields(AttributeNames)}
    unknown = sorted(set(raw_attrs) - known)
    if unknown:
        raise ValueError(f"opsgenie.attributes 存在未知字段: {', '.join(unknown)}")
    return AttributeNames(**{k: str(v) for k, v in raw_attrs.items()})


def build_config(section: Dict[str, Any]) -> OpsGenieConfig:
    """
    根据 opsgenie 配置节构建 OpsGenieConfig

    Args:
        section: config.yaml 中的 opsgenie 节点

    Returns:
        OpsGenieConfig: 只读配置对象

    Raises:
        ValueError: api_key 缺失或字段非法
    """
    section = section or {}
    api_key = os.environ.get(API_KEY_ENV) or section.get("api_key") or ""

    # 代理开关关闭时忽略代理配置
    proxy_enabled = section.get("proxy_enabled", True)
    proxy_address = section.get("proxy_address") if proxy_enabled else None
    proxy_port = section.get("proxy_port") if proxy_enabled else None
    if proxy_port is not None:
        proxy_port = int(proxy_port)

    return OpsGenieConfig(
        api_key=str(api_key),
        base_url=section.get("base_url", DEFAULT_BASE_URL),
        close_action_path=section.get("close_action_path", "/close"),
        acknowledge_action_path=section.get("acknowledge_action_path", "/acknowledge"),
        note_action_path=section.get("note_action_path", "/notes"),
        proxy_address=proxy_address or None,
        proxy_port=proxy_port,
        verify_ssl=bool(section.get("verify_ssl", True)),
        timeout=float(section.get("timeout", 10)),
        max_retries=int(section.get("max_retries", 5)),
        attributes=_build_attributes(section.get("attributes")),
    )


def load_config() -> Tuple[Dict, OpsGenieConfig]:
    """
    加载配置文件

    Returns:
        Tuple[Dict, OpsGenieConfig]: (配置字典, OpsGenie 配置)
    """
    path = _config_path()
    if not path.is_file():
        raise FileNotFoundError(f"配置文件不存在: {path}，可设置环境变量 CONFIG_FILE 指定路径")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raw = {}
    _validate_logging_config(raw)

    if "opsgenie" not in raw or not isinstance(raw["opsgenie"], dict):
        raise ValueError("config.yaml 中必须配置 opsgenie 节点")

    return raw, build_config(raw["opsgenie"])


def server_address(raw: Dict) -> Tuple[str, int]:
    """
    读取 server 节点中的监听地址

    Raises:
        ValueError: 未配置 server 节点或缺少 host / port
    """
    server_cfg = raw.get("server")
    if not isinstance(server_cfg, dict) or not server_cfg:
        raise ValueError("config.yaml 中必须配置 server 节点")
    host = server_cfg.get("host")
    port = server_cfg.get("port")
    if host is None:
        raise ValueError("config.yaml 中必须配置 server.host")
    if port is None:
        raise ValueError("config.yaml 中必须配置 server.port")
    return str(host), int(port)
