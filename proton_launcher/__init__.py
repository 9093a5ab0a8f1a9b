"""
proton-launch: 使用本地 Steam 中的 Proton 启动 Windows 程序。
"""

__version__ = "0.1.0"
