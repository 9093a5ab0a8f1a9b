"""
本地安装扫描模块。

提供 Steam 库目录发现、Proton 安装目录扫描和分类功能。
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from proton_launcher.core import version_utils
from proton_launcher.core.config_manager import LaunchConfig
from proton_launcher.core.interfaces import ILocalManager
from proton_launcher.utils.logger import get_logger

logger = get_logger()


class LocalManagerError(Exception):
    """本地扫描错误异常。"""
    pass


class NoCandidatesError(LocalManagerError):
    """未找到任何候选安装目录。"""
    pass


@dataclass(frozen=True)
class ProtonInstall:
    """一个候选 Proton 安装目录。"""

    path: Path
    kind: str
    version: version_utils.VersionTuple

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_experimental(self) -> bool:
        return self.kind == version_utils.EXPERIMENTAL

    @property
    def version_string(self) -> str:
        return ".".join(str(part) for part in self.version) if self.version else ""


@dataclass
class Classification:
    """扫描结果按稳定版、实验版和排除项划分，均保持搜索顺序。"""

    stable: List[ProtonInstall] = field(default_factory=list)
    experimental: List[ProtonInstall] = field(default_factory=list)
    excluded: List[Path] = field(default_factory=list)

    @property
    def candidates(self) -> List[ProtonInstall]:
        return self.stable + self.experimental

    def is_empty(self) -> bool:
        return not self.stable and not self.experimental

    def as_path_list(self, separator: str = os.pathsep) -> str:
        """将候选目录拼接为路径列表字符串。"""
        return separator.join(str(c.path) for c in self.candidates)


def parse_libraryfolders_vdf(path: Path) -> List[Path]:
    """
    解析 Steam 的 libraryfolders.vdf，返回其中列出的库根目录。

    只关心 "path" 键；旧格式中以数字为键、值为路径的行也会被接受，
    新格式 "apps" 块里的 "<appid>" "<size>" 行则被忽略。

    参数:
        path: libraryfolders.vdf 路径

    返回:
        库根目录列表，读取失败时返回空列表
    """
    libraries: List[Path] = []

    try:
        with path.open("r", encoding="utf-8", errors="ignore") as f:
            for line in f:
                line = line.strip()

                # 形如: "path"    "/mnt/games/SteamLibrary"
                if line.count('"') < 4:
                    continue
                parts = line.split('"')
                key, value = parts[1], parts[3]
                is_legacy = key.isdigit() and ("/" in value or "\\" in value)
                if key == "path" or is_legacy:
                    libraries.append(Path(value.replace("\\\\", "\\")))
    except OSError as e:
        logger.warning(f"无法读取 {path}: {e}")

    return libraries


class LocalManager(ILocalManager):
    """
    本地安装扫描器类。

    只扫描每个 steamapps/common 目录的直接子目录。
    实现 ILocalManager 抽象接口。
    """

    def __init__(self, config: LaunchConfig):
        """
        初始化本地安装扫描器。

        参数:
            config: 启动配置
        """
        self.config = config

    def find_search_roots(self) -> List[Path]:
        """
        获取所有 Steam 库的 steamapps/common 目录。

        默认库排在最前，其后是 libraryfolders.vdf 中列出的其他库，去重并保持顺序。

        返回:
            存在的 common 目录列表
        """
        steamapps = self.config.steam_root / "steamapps"
        roots = [steamapps / "common"]

        vdf = steamapps / "libraryfolders.vdf"
        try:
            has_vdf = vdf.is_file()
        except OSError as e:
            logger.warning(f"无法访问 {vdf}: {e}")
            has_vdf = False
        if has_vdf:
            for library in parse_libraryfolders_vdf(vdf):
                roots.append(library / "steamapps" / "common")

        seen = set()
        unique: List[Path] = []
        for root in roots:
            try:
                key = root.resolve()
            except OSError:
                key = root
            if key in seen:
                continue
            seen.add(key)
            try:
                is_dir = root.is_dir()
            except OSError as e:
                logger.warning(f"无法访问库目录 {root}: {e}")
                continue
            if is_dir:
                unique.append(root)
            else:
                logger.debug(f"库目录不存在，跳过: {root}")

        return unique

    def _classify_path(self, path: Path) -> Optional[ProtonInstall]:
        kind = version_utils.classify_name(path.name, self.config.name_prefix)
        if kind is None:
            return None
        return ProtonInstall(path=path, kind=kind, version=version_utils.parse_version(path.name))

    def classify(self, paths: List[Path]) -> Classification:
        """
        对给定目录列表进行分类。

        参数:
            paths: 目录路径列表

        返回:
            Classification 实例
        """
        result = Classification()
        for path in paths:
            install = self._classify_path(path)
            if install is None:
                logger.debug(f"目录名不匹配，排除: {path.name}")
                result.excluded.append(path)
            elif install.is_experimental:
                result.experimental.append(install)
            else:
                result.stable.append(install)
        return result

    def list_subdirectories(self, root: Path) -> List[Path]:
        """
        列出目录的直接子目录，按名称排序以保证结果可复现。

        参数:
            root: 要扫描的目录

        返回:
            子目录列表，目录不可读时返回空列表
        """
        try:
            entries = sorted(os.listdir(root))
        except OSError as e:
            logger.warning(f"无法扫描目录 {root}: {e}")
            return []

        subdirs = []
        for entry in entries:
            path = root / entry
            try:
                if path.is_dir():
                    subdirs.append(path)
            except OSError as e:
                logger.warning(f"处理目录 {entry} 时出错: {e}")
        return subdirs

    def scan_candidates(self) -> Classification:
        """
        扫描并分类候选安装目录。

        设置了搜索路径覆盖时不扫描文件系统，直接对列出的目录分类。

        返回:
            Classification 实例
        """
        if self.config.search_path:
            logger.debug(f"使用搜索路径覆盖: {self.config.search_path}")
            return self.classify(list(self.config.search_path))

        paths: List[Path] = []
        for root in self.find_search_roots():
            logger.debug(f"扫描目录: {root}")
            paths.extend(self.list_subdirectories(root))

        result = self.classify(paths)
        logger.info(
            f"找到 {len(result.stable)} 个稳定版、{len(result.experimental)} 个实验版 Proton"
        )
        return result
