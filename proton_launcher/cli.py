"""
proton-launch 命令行接口模块。
"""

import argparse
import json
import logging
from typing import Optional

from proton_launcher import __version__
from proton_launcher.core.config_manager import ConfigError, ConfigManager, LaunchConfig
from proton_launcher.core.launcher import (
    LauncherError,
    PrefixError,
    build_plan,
    exec_plan,
    prepare_prefix,
)
from proton_launcher.core.local_manager import LocalManager, LocalManagerError, NoCandidatesError
from proton_launcher.core.version_manager import (
    BinaryNotExecutableError,
    VersionManager,
    VersionNotFoundError,
)
from proton_launcher.utils.logger import get_logger, setup_logger

logger = get_logger()

EXIT_OK = 0
# argparse 自身的用法错误使用 2
EXIT_NO_TARGET = 64
EXIT_NO_CANDIDATES = 3
EXIT_NOT_EXECUTABLE = 4
EXIT_CONFIG = 5
EXIT_PREFIX = 6
EXIT_EXEC_FAILED = 7


def create_parser() -> argparse.ArgumentParser:
    """
    创建并配置命令行参数解析器。

    返回:
        配置好的 ArgumentParser 实例
    """
    parser = argparse.ArgumentParser(
        prog="proton-launch",
        description="使用本地 Steam 中安装的 Proton 启动 Windows 程序",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  proton-launch game.exe                 使用默认 Proton 版本启动
  proton-launch game.exe -windowed       参数原样传递给目标程序
  PROTON_VERSION=8.0 proton-launch a.exe 使用 Proton 8.0 启动
  proton-launch --list                   列出已安装的 Proton 版本
  proton-launch --dry-run game.exe       只显示将要执行的命令
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="启用详细输出",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="配置文件路径",
    )

    parser.add_argument(
        "--list",
        "-l",
        action="store_true",
        help="列出找到的 Proton 版本后退出",
    )

    parser.add_argument(
        "--format",
        "-f",
        choices=["simple", "path", "json"],
        default="simple",
        help="--list 的输出格式",
    )

    parser.add_argument(
        "--dry-run",
        "-n",
        action="store_true",
        help="只显示启动命令，不执行",
    )

    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="要启动的程序路径",
    )

    parser.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="传递给目标程序的参数",
    )

    return parser


def _configure_logging(args: argparse.Namespace, config: Optional[LaunchConfig] = None) -> None:
    """
    按命令行参数和配置设置日志。

    --list 的 path/json 输出供程序读取，此时控制台只显示警告及以上级别。
    日志目录不可用时退回到仅控制台输出。
    """
    debug = args.verbose or (config is not None and config.debug)
    level = logging.DEBUG if debug else logging.INFO
    console_level = logging.WARNING if args.list and args.format != "simple" else None
    log_dir = config.log_dir if config is not None and config.log_to_file else None

    try:
        setup_logger(level=level, log_dir=log_dir, console_level=console_level)
    except OSError as e:
        setup_logger(level=level, console_level=console_level)
        logger.warning(f"无法写入日志目录 {log_dir}，仅输出到控制台: {e}")


def handle_list(args: argparse.Namespace, config: LaunchConfig) -> int:
    """
    处理 --list：列出分类后的候选安装和默认选择。

    参数:
        args: 解析后的命令行参数
        config: 启动配置

    返回:
        退出码
    """
    local_manager = LocalManager(config)
    classification = local_manager.scan_candidates()

    if classification.is_empty():
        logger.error("未找到任何 Proton 安装")
        return EXIT_NO_CANDIDATES

    version_manager = VersionManager(config, local_manager)
    try:
        default = version_manager.select_default(classification)
    except NoCandidatesError:
        default = None

    if args.format == "path":
        print(classification.as_path_list())
    elif args.format == "json":
        result = {
            "default": str(default.path) if default else None,
            "stable": [str(c.path) for c in classification.stable],
            "experimental": [str(c.path) for c in classification.experimental],
            "excluded": [str(p) for p in classification.excluded],
        }
        print(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        for candidate in classification.candidates:
            marker = " *" if candidate == default else "  "
            print(f"{marker} {candidate.name:<28} [{candidate.kind}] {candidate.path}")
            if args.verbose:
                print(f"     版本: {candidate.version_string or '未知'}")
        print(f"\n默认版本: {default.name if default else '未设置'}")

    return EXIT_OK


def handle_launch(args: argparse.Namespace, config: LaunchConfig) -> int:
    """
    处理启动：解析版本和可执行文件，准备前缀并替换进程。

    参数:
        args: 解析后的命令行参数
        config: 启动配置

    返回:
        退出码；真正启动时不会返回
    """
    version_manager = VersionManager(config)

    install = None if config.binary_path is not None else version_manager.resolve_install()
    binary = version_manager.resolve_binary(install)

    prefix_dir = prepare_prefix(config, create=not args.dry_run)
    plan = build_plan(config, binary, args.target, args.args, prefix_dir)

    if args.dry_run:
        print(plan.describe())
        print(f"STEAM_COMPAT_DATA_PATH={plan.env['STEAM_COMPAT_DATA_PATH']}")
        print(f"STEAM_COMPAT_CLIENT_INSTALL_PATH={plan.env['STEAM_COMPAT_CLIENT_INSTALL_PATH']}")
        return EXIT_OK

    exec_plan(plan)


def run_cli(args: argparse.Namespace) -> int:
    """
    运行命令行接口。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码（0 表示成功）
    """
    _configure_logging(args)

    if args.target is None and not args.list:
        logger.error("缺少目标程序参数。使用 --help 查看帮助信息。")
        return EXIT_NO_TARGET

    try:
        config = ConfigManager(config_path=args.config).load()
    except ConfigError as e:
        logger.error(f"配置无效: {e}")
        return EXIT_CONFIG

    _configure_logging(args, config)

    try:
        if args.list:
            return handle_list(args, config)
        return handle_launch(args, config)
    except (LocalManagerError, VersionNotFoundError) as e:
        logger.error(f"未找到可用的 Proton: {e}")
        return EXIT_NO_CANDIDATES
    except BinaryNotExecutableError as e:
        logger.error(f"Proton 可执行文件无效: {e}")
        return EXIT_NOT_EXECUTABLE
    except PrefixError as e:
        logger.error(f"无法准备前缀目录: {e}")
        return EXIT_PREFIX
    except LauncherError as e:
        logger.error(f"启动失败: {e}")
        return EXIT_EXEC_FAILED
