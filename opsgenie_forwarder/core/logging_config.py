"""
日志配置模块

forwarder 的日志统一挂在 opsgenie-forwarder logger 上：
一个按大小轮转的文件 handler + 一个 stderr handler，同一进程只配置一次。
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from threading import Lock
from typing import List

LOGGER_NAME = "opsgenie-forwarder"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_logging_configured = False
_setup_lock = Lock()


def _resolve_level(level) -> int:
    """日志级别名转为数值，未知级别直接报错，避免配置写错时静默降级"""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"未知的日志级别: {level}")
    return resolved


def _build_handlers(log_file_path: Path, level: int, max_bytes: int, backup_count: int) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [
        RotatingFileHandler(log_file_path, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8'),
        logging.StreamHandler(sys.stderr),
    ]
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    log_dir: str = "logs",
    log_file: str = "opsgenie-forwarder.log",
    level: str = "INFO",
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5
) -> logging.Logger:
    """
    按 config.yaml 的 logging 节点配置日志，重复调用直接返回已配置的 logger

    Args:
        log_dir: 日志目录，不存在时自动创建
        log_file: 日志文件名
        level: 日志级别 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        max_bytes: 单个日志文件最大字节数
        backup_count: 轮转保留的文件数

    Raises:
        ValueError: 日志级别无法识别
    """
    global _logging_configured
    logger = logging.getLogger(LOGGER_NAME)
    with _setup_lock:
        if _logging_configured:
            return logger

        log_level = _resolve_level(level)
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        logger.setLevel(log_level)
        logger.propagate = False
        logger.handlers.clear()
        for handler in _build_handlers(log_path / log_file, log_level, max_bytes, backup_count):
            logger.addHandler(handler)

        _logging_configured = True
    return logger


def reset_logging():
    """关闭并移除已安装的 handler，恢复为未配置状态（测试使用）"""
    global _logging_configured
    logger = logging.getLogger(LOGGER_NAME)
    with _setup_lock:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
        _logging_configured = False


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    return logging.getLogger(name)
