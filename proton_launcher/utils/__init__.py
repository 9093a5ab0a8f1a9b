"""
proton-launch 工具模块。

提供日志记录和输入验证功能。
"""

from .logger import get_logger, setup_logger, flush_handlers
from .input_validator import InputValidator, InputValidationError

__all__ = [
    "get_logger",
    "setup_logger",
    "flush_handlers",
    "InputValidator",
    "InputValidationError",
]
