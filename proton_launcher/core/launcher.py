"""
启动模块。

提供前缀目录准备、启动计划构建和进程替换功能。
进程替换是终止操作：成功时不会返回。
"""

import os
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Mapping, NoReturn, Optional, Sequence

from proton_launcher.core.config_manager import LaunchConfig
from proton_launcher.utils.input_validator import InputValidator, InputValidationError
from proton_launcher.utils.logger import flush_handlers, get_logger

logger = get_logger()

PREFIX_NAME_PREFIX = "pfx-"
MAX_PREFIX_ATTEMPTS = 100

ENV_COMPAT_DATA = "STEAM_COMPAT_DATA_PATH"
ENV_COMPAT_CLIENT = "STEAM_COMPAT_CLIENT_INSTALL_PATH"


class LauncherError(Exception):
    """启动错误异常。"""
    pass


class PrefixError(LauncherError):
    """前缀目录准备失败。"""
    pass


@dataclass(frozen=True)
class LaunchPlan:
    """替换进程所需的全部信息。"""

    binary: Path
    argv: List[str]
    env: Dict[str, str]
    prefix_dir: Path

    def describe(self) -> str:
        """返回可读的命令行描述。"""
        return " ".join(_quote(arg) for arg in self.argv)


def _quote(arg: str) -> str:
    if arg and all(c.isalnum() or c in "-_./:=+@%," for c in arg):
        return arg
    return "'" + arg.replace("'", "'\\''") + "'"


def generate_prefix_name() -> str:
    """生成随机前缀目录名。"""
    return PREFIX_NAME_PREFIX + secrets.token_hex(6)


def create_random_prefix(
    parent: Path,
    name_factory: Callable[[], str] = generate_prefix_name,
    max_attempts: int = MAX_PREFIX_ATTEMPTS,
) -> Path:
    """
    在 parent 下创建一个名称随机且未被占用的目录。

    已存在的名称会被跳过；创建时使用 exist_ok=False，
    并发创建同名目录也按冲突处理。

    参数:
        parent: 父目录
        name_factory: 名称生成函数
        max_attempts: 最大尝试次数

    返回:
        新建目录的路径

    抛出:
        PrefixError: 超过尝试次数或无法创建
    """
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PrefixError(f"无法创建目录 {parent}: {e}") from e

    for _ in range(max_attempts):
        candidate = parent / name_factory()
        if candidate.exists():
            logger.debug(f"前缀名称冲突，重新生成: {candidate.name}")
            continue
        try:
            candidate.mkdir(exist_ok=False)
        except FileExistsError:
            logger.debug(f"前缀名称冲突，重新生成: {candidate.name}")
            continue
        except OSError as e:
            raise PrefixError(f"无法创建前缀目录 {candidate}: {e}") from e
        return candidate

    raise PrefixError(f"尝试 {max_attempts} 次后仍未找到可用的前缀名称")


def prepare_prefix(config: LaunchConfig, create: bool = True) -> Path:
    """
    准备本次启动使用的前缀目录。

    设置了固定前缀名时创建或复用该目录，否则新建随机目录。

    参数:
        config: 启动配置
        create: 为 False 时只计算路径，不创建目录（用于预演）

    返回:
        前缀目录路径
    """
    parent = config.prefixes_dir

    if config.prefix:
        try:
            InputValidator.validate_prefix_name(config.prefix)
        except InputValidationError as e:
            raise PrefixError(str(e)) from e
        prefix_dir = parent / config.prefix
        if not create:
            return prefix_dir
        try:
            prefix_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PrefixError(f"无法创建前缀目录 {prefix_dir}: {e}") from e
        logger.info(f"使用固定前缀: {prefix_dir}")
        return prefix_dir

    if not create:
        return parent / generate_prefix_name()

    prefix_dir = create_random_prefix(parent)
    logger.info(f"创建前缀: {prefix_dir}")
    return prefix_dir


def build_plan(
    config: LaunchConfig,
    binary: Path,
    target: str,
    args: Sequence[str],
    prefix_dir: Path,
    environ: Optional[Mapping[str, str]] = None,
) -> LaunchPlan:
    """
    构建启动计划。

    目标路径和参数原样传递。STEAM_COMPAT_DATA_PATH 总是指向本次的前缀目录，
    环境中已有的 STEAM_COMPAT_CLIENT_INSTALL_PATH 保持不变。

    参数:
        config: 启动配置
        binary: Proton 可执行文件
        target: 目标程序路径
        args: 透传参数
        prefix_dir: 前缀目录
        environ: 基础环境，默认为 os.environ

    返回:
        LaunchPlan 实例
    """
    env = dict(os.environ if environ is None else environ)
    env[ENV_COMPAT_DATA] = str(prefix_dir)
    env.setdefault(ENV_COMPAT_CLIENT, str(config.steam_root))

    argv = [str(binary), config.verb, target, *args]
    return LaunchPlan(binary=binary, argv=argv, env=env, prefix_dir=prefix_dir)


def exec_plan(plan: LaunchPlan) -> NoReturn:
    """
    用 Proton 替换当前进程。

    参数:
        plan: 启动计划

    抛出:
        LauncherError: execve 失败
    """
    logger.info(f"启动: {plan.describe()}")
    flush_handlers()
    try:
        os.execve(str(plan.binary), plan.argv, plan.env)
    except OSError as e:
        raise LauncherError(f"无法执行 {plan.binary}: {e}") from e
    raise LauncherError(f"execve 意外返回: {plan.binary}")
