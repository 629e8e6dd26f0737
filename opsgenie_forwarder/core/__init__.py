"""
核心功能模块
"""
from .config import load_config, build_config
from .models import (
    Action,
    AlertIdentifier,
    AlertRequest,
    AttributeNames,
    DispatchOutcome,
    DispatchResult,
    FailureKind,
    IdentifierType,
    OpsGenieConfig,
    TransportResult,
)
from .logging_config import setup_logging, get_logger
from .utils import get_field

__all__ = [
    "load_config",
    "build_config",
    "Action",
    "AlertIdentifier",
    "AlertRequest",
    "AttributeNames",
    "DispatchOutcome",
    "DispatchResult",
    "FailureKind",
    "IdentifierType",
    "OpsGenieConfig",
    "TransportResult",
    "setup_logging",
    "get_logger",
    "get_field",
]
