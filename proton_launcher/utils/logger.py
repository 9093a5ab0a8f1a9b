"""
日志模块。

提供启动器日志的配置和管理功能。
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

_logger: Optional[logging.Logger] = None

LOGGER_NAME = "proton-launch"
LOG_FILE_NAME = "proton-launch.log"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(module)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 5


def setup_logger(
    level: int = logging.INFO,
    log_to_console: bool = True,
    log_dir: Optional[Path] = None,
    console_level: Optional[int] = None,
    max_bytes: int = MAX_BYTES,
    backup_count: int = BACKUP_COUNT,
) -> logging.Logger:
    """
    配置并初始化日志记录器。

    与桌面程序不同，启动器每次调用都是独立进程，因此允许重复配置：
    再次调用时会替换已有的处理器。

    参数:
        level: 日志级别，默认为 INFO
        log_to_console: 是否输出到标准输出，默认为 True
        log_dir: 日志文件目录，为 None 时不写文件
        console_level: 控制台单独使用的级别，为 None 时与 level 相同
        max_bytes: 单个日志文件最大字节数，默认为 5MB
        backup_count: 保留的备份文件数量，默认为 5

    返回:
        配置好的 Logger 实例
    """
    global _logger

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level if console_level is None else console_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """
    获取日志记录器实例。

    如果尚未初始化，则使用默认配置初始化（仅控制台）。

    返回:
        Logger 实例
    """
    if _logger is None:
        return setup_logger()
    return _logger


def flush_handlers() -> None:
    """刷新所有处理器，进程替换前调用。"""
    for handler in get_logger().handlers:
        handler.flush()
