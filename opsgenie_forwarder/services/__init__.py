"""
业务服务层模块
"""
from .alert_service import AlertService

__all__ = [
    "AlertService",
]
