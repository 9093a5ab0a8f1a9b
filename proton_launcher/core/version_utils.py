"""
版本工具模块。

提供 Proton 目录名的分类、版本号解析和排序等工具函数。

排序规则:
    1. 版本号按 (major, minor, patch) 数值比较，缺失的 patch 视为 0；
    2. 稳定版之间版本号高者优先，版本号相同时按搜索顺序先出现者优先；
    3. 允许实验版时，实验版排在所有稳定版之前；实验版之间按解析出的
       版本号（解析不到视为最低）再按名称降序比较。
"""

import re
from typing import Optional, Tuple

STABLE = "stable"
EXPERIMENTAL = "experimental"
# 仅用于显式指定、名称不符合任何模式的目录
CUSTOM = "custom"

DEFAULT_NAME_PREFIX = "Proton"

VersionTuple = Tuple[int, ...]


def stable_pattern(name_prefix: str = DEFAULT_NAME_PREFIX) -> "re.Pattern[str]":
    """返回稳定版目录名的严格匹配模式 `Name MAJOR.MINOR[.PATCH]`。"""
    return re.compile(rf"^{re.escape(name_prefix)} (\d+)\.(\d+)(?:\.(\d+))?$")


def experimental_pattern(name_prefix: str = DEFAULT_NAME_PREFIX) -> "re.Pattern[str]":
    """返回实验版目录名的宽松匹配模式 `Name*Experimental`。"""
    return re.compile(rf"^{re.escape(name_prefix)}.*Experimental$")


def classify_name(name: str, name_prefix: str = DEFAULT_NAME_PREFIX) -> Optional[str]:
    """
    根据目录名判断安装类型。

    参数:
        name: 目录名（basename）
        name_prefix: 名称前缀

    返回:
        STABLE、EXPERIMENTAL，不匹配时返回 None
    """
    if stable_pattern(name_prefix).match(name):
        return STABLE
    if experimental_pattern(name_prefix).match(name):
        return EXPERIMENTAL
    return None


def parse_version(text: str) -> VersionTuple:
    """
    从目录名中提取第一个 `MAJOR[.MINOR[.PATCH]]` 版本号。

    参数:
        text: 目录名或版本字符串

    返回:
        三元版本元组，缺失部分补 0；完全没有数字时返回空元组
    """
    match = re.search(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?", text)
    if not match:
        return ()
    return tuple(int(part) if part is not None else 0 for part in match.groups())


def looks_like_bare_version(text: str) -> bool:
    """判断字符串是否是不带名称的版本号，如 "8.0" 或 "9.0.3"。"""
    return re.fullmatch(r"\d+(?:\.\d+){0,2}", text.strip()) is not None


def selection_key(kind: str, version: VersionTuple, name: str) -> Tuple[int, VersionTuple, str]:
    """
    默认版本选择使用的排序键，值越大越优先。

    搜索顺序上的并列由 sorted 的稳定性保证，因此稳定版的键里不包含名称。
    """
    if kind == EXPERIMENTAL:
        return (1, version, name)
    return (0, version, "")
