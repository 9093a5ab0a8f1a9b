"""
版本管理器模块。

提供默认版本选择、显式版本解析和 Proton 可执行文件定位功能。
"""

import os
from pathlib import Path
from typing import List, Optional

from proton_launcher.core import version_utils
from proton_launcher.core.config_manager import LaunchConfig
from proton_launcher.core.interfaces import IVersionManager
from proton_launcher.core.local_manager import (
    Classification,
    LocalManager,
    NoCandidatesError,
    ProtonInstall,
)
from proton_launcher.utils.logger import get_logger

logger = get_logger()


class VersionManagerError(Exception):
    """版本管理错误异常。"""
    pass


class VersionNotFoundError(VersionManagerError):
    """请求的版本未找到。"""
    pass


class BinaryNotExecutableError(VersionManagerError):
    """解析出的可执行文件不存在或不可执行。"""
    pass


class VersionManager(IVersionManager):
    """
    版本管理器类。

    负责在候选安装中选出要使用的一个，并定位其可执行文件。
    扫描工作委托给 LocalManager。
    实现 IVersionManager 抽象接口。
    """

    def __init__(self, config: LaunchConfig, local_manager: Optional[LocalManager] = None):
        """
        初始化版本管理器。

        参数:
            config: 启动配置
            local_manager: 本地扫描器实例，默认按 config 新建
        """
        self.config = config
        self.local_manager = local_manager or LocalManager(config)

    def select_default(self, classification: Classification) -> ProtonInstall:
        """
        从分类结果中选择默认版本。

        规则见 version_utils 模块说明：最高版本优先，未允许实验版时
        实验版不参与选择，允许时实验版优先于所有稳定版。

        参数:
            classification: 扫描分类结果

        返回:
            选中的 ProtonInstall

        抛出:
            NoCandidatesError: 没有可选的候选
        """
        eligible: List[ProtonInstall] = list(classification.stable)
        if self.config.include_experimental:
            eligible.extend(classification.experimental)

        if not eligible:
            if classification.experimental:
                raise NoCandidatesError(
                    f"只找到实验版 Proton ({', '.join(c.name for c in classification.experimental)})，"
                    f"设置 PROTON_INCLUDE_EXPERIMENTAL=1 以使用"
                )
            raise NoCandidatesError("未找到任何 Proton 安装")

        ranked = sorted(
            eligible,
            key=lambda c: version_utils.selection_key(c.kind, c.version, c.name),
            reverse=True,
        )
        chosen = ranked[0]
        logger.debug(f"候选排序: {[c.name for c in ranked]}")
        logger.info(f"默认选择 {chosen.name}")
        return chosen

    def _override_names(self, requested: str) -> List[str]:
        names = [requested]
        if version_utils.looks_like_bare_version(requested):
            names.append(f"{self.config.name_prefix} {requested}")
        return names

    def _make_install(self, path: Path) -> ProtonInstall:
        kind = version_utils.classify_name(path.name, self.config.name_prefix) or version_utils.CUSTOM
        return ProtonInstall(path=path, kind=kind, version=version_utils.parse_version(path.name))

    def resolve_override(self, requested: str) -> ProtonInstall:
        """
        按显式版本请求定位安装目录。

        只检查具体路径是否存在，不列举目录。

        参数:
            requested: 目录名或纯版本号

        返回:
            对应的 ProtonInstall

        抛出:
            VersionNotFoundError: 所有位置都不存在该版本
        """
        names = self._override_names(requested)

        if self.config.search_path:
            for path in self.config.search_path:
                if path.name in names and path.is_dir():
                    return self._make_install(path)
        else:
            for root in self.local_manager.find_search_roots():
                for name in names:
                    path = root / name
                    if path.is_dir():
                        return self._make_install(path)

        raise VersionNotFoundError(f"未找到请求的 Proton 版本: {requested}")

    def resolve_install(self) -> ProtonInstall:
        """
        解析要使用的安装目录。

        返回:
            ProtonInstall 实例
        """
        if self.config.version:
            install = self.resolve_override(self.config.version)
            logger.info(f"使用指定版本 {install.name}")
            return install
        return self.select_default(self.local_manager.scan_candidates())

    def resolve_binary(self, install: Optional[ProtonInstall] = None) -> Path:
        """
        解析要执行的 Proton 可执行文件。

        设置了 binary_path 时直接使用，不解析安装目录。

        参数:
            install: 已解析的安装目录，为 None 时自动解析

        返回:
            可执行文件路径

        抛出:
            BinaryNotExecutableError: 文件不存在或没有执行权限
        """
        if self.config.binary_path is not None:
            binary = self.config.binary_path
        else:
            if install is None:
                install = self.resolve_install()
            binary = install.path / self.config.binary_name

        if not binary.is_file() or not os.access(binary, os.X_OK):
            raise BinaryNotExecutableError(f"不可执行: {binary}")

        logger.debug(f"Proton 可执行文件: {binary}")
        return binary
