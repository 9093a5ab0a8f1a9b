"""
核心模块抽象接口定义。

定义 ConfigManager、LocalManager、VersionManager 的抽象接口。
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, TYPE_CHECKING

if TYPE_CHECKING:
    from proton_launcher.core.config_manager import LaunchConfig
    from proton_launcher.core.local_manager import Classification, ProtonInstall


class IConfigManager(ABC):
    """配置管理器抽象接口。"""

    @abstractmethod
    def get_config_path(self) -> Path:
        """获取配置文件路径。"""
        pass

    @abstractmethod
    def load_file(self, path: Path) -> Dict[str, Any]:
        """读取并解析配置文件。"""
        pass

    @abstractmethod
    def load(self) -> "LaunchConfig":
        """加载并合并配置。"""
        pass


class ILocalManager(ABC):
    """本地安装扫描器抽象接口。"""

    @abstractmethod
    def find_search_roots(self) -> List[Path]:
        """获取所有 Steam 库的 steamapps/common 目录。"""
        pass

    @abstractmethod
    def scan_candidates(self) -> "Classification":
        """扫描并分类候选安装目录。"""
        pass

    @abstractmethod
    def classify(self, paths: List[Path]) -> "Classification":
        """对给定目录列表进行分类。"""
        pass


class IVersionManager(ABC):
    """版本管理器抽象接口。"""

    @abstractmethod
    def select_default(self, classification: "Classification") -> "ProtonInstall":
        """从分类结果中选择默认版本。"""
        pass

    @abstractmethod
    def resolve_install(self) -> "ProtonInstall":
        """解析要使用的安装目录。"""
        pass

    @abstractmethod
    def resolve_binary(self) -> Path:
        """解析要执行的 Proton 可执行文件。"""
        pass
