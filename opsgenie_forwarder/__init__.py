"""
OpsGenie Forwarder 核心模块

保持统一的导入接口
"""
__version__ = "0.1.0"

# 核心模块
from .core import (
    OpsGenieConfig,
    load_config,
    build_config,
    setup_logging,
    get_logger,
)

# 请求构建
from .routing import build_request

# 发送器
from .senders import Dispatcher, RequestsTransport

# 服务层
from .services import AlertService

__all__ = [
    # 核心模块
    "OpsGenieConfig",
    "load_config",
    "build_config",
    "setup_logging",
    "get_logger",
    # 请求构建
    "build_request",
    # 发送器
    "Dispatcher",
    "RequestsTransport",
    # 服务层
    "AlertService",
]
