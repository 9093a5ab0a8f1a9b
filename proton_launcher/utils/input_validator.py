"""
输入验证模块。

提供环境变量、配置文件行和目录名称的验证与解析功能。
"""

import re
from typing import Optional, Tuple

from proton_launcher.utils.logger import get_logger

logger = get_logger()


class InputValidationError(Exception):
    """输入验证错误异常。"""
    pass


class InputValidator:
    """
    输入验证器类。

    所有外部输入（环境变量、配置文件、命令行）在进入 LaunchConfig 之前
    都经过这里。
    """

    KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')
    PREFIX_NAME_PATTERN = re.compile(r'^[A-Za-z0-9._-]+$')
    VERSION_PATTERN = re.compile(r'^[A-Za-z0-9 ._()-]+$')
    MAX_PATH_LENGTH = 4096
    MAX_VERSION_LENGTH = 100
    MAX_PREFIX_NAME_LENGTH = 128

    TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
    FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})

    @classmethod
    def parse_bool(cls, value: object) -> bool:
        """
        将字符串或布尔值解析为布尔值。

        参数:
            value: 原始值

        返回:
            解析结果，无法识别时抛出 InputValidationError
        """
        if isinstance(value, bool):
            return value
        if value is None:
            return False
        text = str(value).strip().lower()
        if text in cls.TRUE_VALUES:
            return True
        if text in cls.FALSE_VALUES:
            return False
        raise InputValidationError(f"无法识别的布尔值: {value!r}")

    @classmethod
    def validate_path(cls, path: Optional[str]) -> bool:
        """
        验证路径的有效性。

        参数:
            path: 路径字符串

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if path is None:
            return True

        if len(path) > cls.MAX_PATH_LENGTH:
            raise InputValidationError(f"路径不能超过 {cls.MAX_PATH_LENGTH} 个字符")

        if "\x00" in path:
            raise InputValidationError("路径不能包含空字符")

        return True

    @classmethod
    def validate_version_string(cls, version: str) -> bool:
        """
        验证版本覆盖值，例如 "8.0" 或 "Proton - Experimental"。

        参数:
            version: 版本字符串

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not version or not version.strip():
            raise InputValidationError("版本号不能为空")

        if len(version.strip()) > cls.MAX_VERSION_LENGTH:
            raise InputValidationError(f"版本号不能超过 {cls.MAX_VERSION_LENGTH} 个字符")

        if not cls.VERSION_PATTERN.match(version.strip()):
            raise InputValidationError(f"版本号格式无效: {version}")

        return True

    @classmethod
    def validate_prefix_name(cls, name: str) -> bool:
        """
        验证固定前缀目录名称，必须是单个路径组件。

        参数:
            name: 前缀目录名称

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not name or not name.strip():
            raise InputValidationError("前缀名称不能为空")

        if len(name) > cls.MAX_PREFIX_NAME_LENGTH:
            raise InputValidationError(f"前缀名称不能超过 {cls.MAX_PREFIX_NAME_LENGTH} 个字符")

        if name in (".", "..") or not cls.PREFIX_NAME_PATTERN.match(name):
            raise InputValidationError(f"前缀名称只能包含字母、数字、点、下划线和连字符: {name}")

        return True

    @classmethod
    def parse_key_value_line(cls, line: str) -> Optional[Tuple[str, str]]:
        """
        解析受限格式的 KEY=VALUE 配置行。

        不做任何变量展开或命令替换，值两侧成对的引号会被去掉。

        参数:
            line: 配置文件中的一行

        返回:
            (键, 值) 元组；空行和注释行返回 None
        """
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            return None

        if stripped.startswith("export "):
            stripped = stripped[len("export "):].lstrip()

        key, sep, value = stripped.partition("=")
        key = key.strip()
        if not sep:
            raise InputValidationError(f"缺少 '=': {line.rstrip()}")
        if not cls.KEY_PATTERN.match(key):
            raise InputValidationError(f"键名无效: {key!r}")

        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        elif "$" in value or "`" in value:
            raise InputValidationError(f"{key} 的值包含不支持的展开语法: {value}")

        return key, value
