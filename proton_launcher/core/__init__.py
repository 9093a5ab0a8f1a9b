"""
proton-launch 核心模块。

提供配置管理、Proton 安装扫描、版本选择和进程替换功能。
"""

from .interfaces import IConfigManager, ILocalManager, IVersionManager
from .config_manager import ConfigManager, LaunchConfig, ConfigError, ConfigLoadError, ConfigValidationError
from .local_manager import LocalManager, ProtonInstall, Classification, LocalManagerError, NoCandidatesError
from .version_manager import VersionManager, VersionManagerError, VersionNotFoundError, BinaryNotExecutableError
from .launcher import LaunchPlan, LauncherError, PrefixError, prepare_prefix, build_plan, exec_plan
from . import version_utils

__all__ = [
    "IConfigManager", "ILocalManager", "IVersionManager",
    "ConfigManager", "LaunchConfig", "ConfigError", "ConfigLoadError", "ConfigValidationError",
    "LocalManager", "ProtonInstall", "Classification", "LocalManagerError", "NoCandidatesError",
    "VersionManager", "VersionManagerError", "VersionNotFoundError", "BinaryNotExecutableError",
    "LaunchPlan", "LauncherError", "PrefixError", "prepare_prefix", "build_plan", "exec_plan",
    "version_utils",
]
