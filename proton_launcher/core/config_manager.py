"""
配置管理器模块。

提供启动器配置的加载、验证和合并功能。

优先级: 显式环境变量 > 配置文件 > 计算得到的默认值。
配置文件只会被解析，不会被执行。
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from proton_launcher.core.interfaces import IConfigManager
from proton_launcher.utils.input_validator import InputValidator, InputValidationError
from proton_launcher.utils.logger import get_logger

logger = get_logger()

APP_NAME = "proton-launch"
CONFIG_FILE_NAME = "config.json"
ENV_FILE_NAME = "config.env"

ENV_CONFIG = "PROTON_LAUNCH_CONFIG"
ENV_CONFIG_HOME = "PROTON_LAUNCH_CONFIG_HOME"


class ConfigError(Exception):
    """配置错误异常基类。"""
    pass


class ConfigLoadError(ConfigError):
    """配置加载错误异常。"""
    pass


class ConfigValidationError(ConfigError):
    """配置验证错误异常。"""
    pass


@dataclass(frozen=True)
class LaunchConfig:
    """
    一次启动所需的全部配置。

    由 ConfigManager.load 构造后在各个函数之间显式传递，
    启动流程中不再读取环境变量。
    """

    steam_root: Path
    config_home: Path
    data_home: Path
    config_path: Optional[Path] = None
    debug: bool = False
    search_path: Tuple[Path, ...] = ()
    version: Optional[str] = None
    binary_path: Optional[Path] = None
    binary_name: str = "proton"
    include_experimental: bool = False
    prefix: Optional[str] = None
    name_prefix: str = "Proton"
    verb: str = "run"
    log_to_file: bool = False
    sources: Dict[str, str] = field(default_factory=dict, compare=False)

    @property
    def prefixes_dir(self) -> Path:
        """前缀目录的父目录。"""
        return self.data_home / "prefixes"

    @property
    def log_dir(self) -> Path:
        """日志文件目录。"""
        return self.data_home / "logs"


def _to_str(value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigValidationError(f"应为字符串，实际为 {type(value).__name__}")
    return value


def _to_path(value: Any) -> Path:
    text = _to_str(value)
    InputValidator.validate_path(text)
    return Path(os.path.expanduser(text))


def _to_bool(value: Any) -> bool:
    try:
        return InputValidator.parse_bool(value)
    except InputValidationError as e:
        raise ConfigValidationError(str(e)) from e


def _to_path_list(value: Any) -> Tuple[Path, ...]:
    if isinstance(value, str):
        parts = value.split(os.pathsep)
    elif isinstance(value, list):
        parts = [_to_str(item) for item in value]
    else:
        raise ConfigValidationError(f"应为路径列表，实际为 {type(value).__name__}")
    return tuple(_to_path(part) for part in parts if part.strip())


def _to_version(value: Any) -> str:
    text = _to_str(value).strip()
    try:
        InputValidator.validate_version_string(text)
    except InputValidationError as e:
        raise ConfigValidationError(str(e)) from e
    return text


def _to_prefix_name(value: Any) -> str:
    text = _to_str(value).strip()
    try:
        InputValidator.validate_prefix_name(text)
    except InputValidationError as e:
        raise ConfigValidationError(str(e)) from e
    return text


def _to_name(value: Any) -> str:
    text = _to_str(value).strip()
    if not text:
        raise ConfigValidationError("不能为空")
    return text


class ConfigManager(IConfigManager):
    """
    配置管理器类。

    负责定位配置文件、解析 JSON 或 KEY=VALUE 格式、验证字段类型，
    并与环境变量和默认值合并为 LaunchConfig。
    实现 IConfigManager 抽象接口。
    """

    # 设置名 -> (环境变量名, 转换函数)
    SETTINGS_FIELDS: Dict[str, Tuple[str, Callable[[Any], Any]]] = {
        "debug": ("PROTON_LAUNCH_DEBUG", _to_bool),
        "steam_root": ("STEAM_ROOT", _to_path),
        "search_path": ("PROTON_SEARCH_PATH", _to_path_list),
        "version": ("PROTON_VERSION", _to_version),
        "binary_path": ("PROTON_BIN", _to_path),
        "binary_name": ("PROTON_BIN_NAME", _to_name),
        "include_experimental": ("PROTON_INCLUDE_EXPERIMENTAL", _to_bool),
        "data_home": ("PROTON_LAUNCH_DATA_HOME", _to_path),
        "prefix": ("PROTON_PREFIX", _to_prefix_name),
        "name_prefix": ("PROTON_NAME_PREFIX", _to_name),
        "verb": ("PROTON_VERB", _to_name),
        "log_to_file": ("PROTON_LAUNCH_LOG_TO_FILE", _to_bool),
    }

    STEAM_ROOT_CANDIDATES = (
        Path(".local") / "share" / "Steam",
        Path(".steam") / "steam",
        Path(".steam") / "root",
    )

    def __init__(self, environ: Optional[Mapping[str, str]] = None, config_path: Optional[str] = None):
        """
        初始化配置管理器。

        参数:
            environ: 环境变量映射，默认为 os.environ
            config_path: 命令行显式指定的配置文件路径
        """
        self._environ = dict(os.environ if environ is None else environ)
        self._explicit_config_path = config_path
        self._env_keys = {env: name for name, (env, _) in self.SETTINGS_FIELDS.items()}

    def _env(self, key: str) -> Optional[str]:
        """读取环境变量，空字符串视为未设置。"""
        value = self._environ.get(key)
        if value is None or value == "":
            return None
        return value

    def _home(self) -> Path:
        home = self._env("HOME")
        return Path(home) if home else Path.home()

    def get_config_home(self) -> Path:
        """
        获取配置目录。

        返回:
            PROTON_LAUNCH_CONFIG_HOME，或 $XDG_CONFIG_HOME/proton-launch，
            或 ~/.config/proton-launch
        """
        explicit = self._env(ENV_CONFIG_HOME)
        if explicit:
            return Path(os.path.expanduser(explicit))
        xdg = self._env("XDG_CONFIG_HOME")
        base = Path(xdg) if xdg else self._home() / ".config"
        return base / APP_NAME

    def get_default_data_home(self) -> Path:
        """获取默认数据目录 $XDG_DATA_HOME/proton-launch。"""
        xdg = self._env("XDG_DATA_HOME")
        base = Path(xdg) if xdg else self._home() / ".local" / "share"
        return base / APP_NAME

    def get_default_steam_root(self) -> Path:
        """
        获取默认 Steam 安装根目录。

        依次检查常见位置，返回第一个存在的目录；都不存在时返回第一个候选。
        """
        home = self._home()
        for candidate in self.STEAM_ROOT_CANDIDATES:
            path = home / candidate
            if path.is_dir():
                return path
        return home / self.STEAM_ROOT_CANDIDATES[0]

    def get_config_path(self) -> Path:
        """
        获取配置文件路径。

        返回:
            命令行参数 > PROTON_LAUNCH_CONFIG > <config_home>/config.json
            > <config_home>/config.env；默认位置都不存在时返回 config.json
        """
        if self._explicit_config_path:
            return Path(os.path.expanduser(self._explicit_config_path))
        explicit = self._env(ENV_CONFIG)
        if explicit:
            return Path(os.path.expanduser(explicit))
        config_home = self.get_config_home()
        for name in (CONFIG_FILE_NAME, ENV_FILE_NAME):
            if (config_home / name).exists():
                return config_home / name
        return config_home / CONFIG_FILE_NAME

    def load_file(self, path: Path) -> Dict[str, Any]:
        """
        读取并解析配置文件。

        `.json` 后缀或以 `{` 开头的文件按 JSON 解析，其余（包括默认的
        config.env）按 KEY=VALUE 行解析。

        参数:
            path: 配置文件路径

        返回:
            设置名到原始值的字典；文件不存在时返回空字典
        """
        if not path.exists():
            if self._explicit_config_path or self._env(ENV_CONFIG):
                raise ConfigLoadError(f"配置文件不存在: {path}")
            logger.debug(f"未找到配置文件，跳过: {path}")
            return {}

        try:
            text = path.read_text(encoding="utf-8")
        except (IOError, OSError) as e:
            raise ConfigLoadError(f"无法读取配置文件 {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise ConfigLoadError(f"配置文件 {path} 不是有效的 UTF-8 文本: {e}") from e

        if path.suffix == ".json" or text.lstrip().startswith("{"):
            data = self._parse_json(path, text)
        else:
            data = self._parse_key_values(path, text)

        logger.debug(f"从文件加载配置: {path} ({len(data)} 项)")
        return data

    def _parse_json(self, path: Path, text: str) -> Dict[str, Any]:
        try:
            data = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as e:
            raise ConfigLoadError(f"配置文件 {path} 不是有效的 JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError(f"配置文件 {path} 顶层必须是对象")

        result = {}
        for key, value in data.items():
            if key not in self.SETTINGS_FIELDS:
                logger.warning(f"忽略未知配置项: {key}")
                continue
            result[key] = value
        return result

    def _parse_key_values(self, path: Path, text: str) -> Dict[str, Any]:
        result = {}
        for lineno, line in enumerate(text.splitlines(), start=1):
            try:
                parsed = InputValidator.parse_key_value_line(line)
            except InputValidationError as e:
                raise ConfigValidationError(f"{path}:{lineno}: {e}") from e
            if parsed is None:
                continue
            key, value = parsed
            if value == "":
                continue
            name = self._env_keys.get(key)
            if name is None:
                logger.warning(f"{path}:{lineno}: 忽略未知配置项 {key}")
                continue
            result[name] = value
        return result

    def validate_config(self, raw: Mapping[str, Any], source: str) -> Dict[str, Any]:
        """
        验证并转换原始配置值。

        参数:
            raw: 设置名到原始值的映射
            source: 来源描述，用于错误信息

        返回:
            转换后的设置字典
        """
        converted = {}
        for name, value in raw.items():
            _, convert = self.SETTINGS_FIELDS[name]
            try:
                converted[name] = convert(value)
            except (ConfigValidationError, InputValidationError) as e:
                raise ConfigValidationError(f"{source} 中的 {name} 无效: {e}") from e
        return converted

    def _env_settings(self) -> Dict[str, str]:
        return {
            name: self._env(env)
            for name, (env, _) in self.SETTINGS_FIELDS.items()
            if self._env(env) is not None
        }

    def load(self) -> LaunchConfig:
        """
        加载并合并配置。

        返回:
            LaunchConfig 实例
        """
        config_path = self.get_config_path()
        file_settings = self.validate_config(self.load_file(config_path), str(config_path))
        env_settings = self.validate_config(self._env_settings(), "环境变量")

        merged: Dict[str, Any] = {}
        sources: Dict[str, str] = {}
        for name in self.SETTINGS_FIELDS:
            if name in env_settings:
                merged[name] = env_settings[name]
                sources[name] = "env"
            elif name in file_settings:
                merged[name] = file_settings[name]
                sources[name] = "file"

        if "steam_root" not in merged:
            merged["steam_root"] = self.get_default_steam_root()
            sources["steam_root"] = "default"
        if "data_home" not in merged:
            merged["data_home"] = self.get_default_data_home()
            sources["data_home"] = "default"

        config = LaunchConfig(
            config_home=self.get_config_home(),
            config_path=config_path if config_path.exists() else None,
            sources=sources,
            **merged,
        )
        logger.debug(f"配置来源: {sources}")
        return config
