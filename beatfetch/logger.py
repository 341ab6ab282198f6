"""
日志模块

使用 loguru 提供统一的日志记录功能。
"""

import sys
from typing import Optional

from loguru import logger


def setup_logger(
    level: Optional[str] = None,
    debug: bool = False,
    sink=sys.stdout,
    enqueue: bool = True,
    colorize: bool = True,
) -> None:
    """
    设置日志记录器

    Args:
        level: 日志级别 (DEBUG, INFO, WARNING, ERROR)
        debug: 未指定 level 时是否使用 DEBUG 级别
        sink: 输出目标
        enqueue: 是否启用队列（线程安全）
        colorize: 是否启用颜色
    """
    if level is None:
        level = "DEBUG" if debug else "INFO"

    logger.remove()

    logger.add(
        sink=sink,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}",
        enqueue=enqueue,
        level=level,
        colorize=colorize,
        backtrace=(level == "DEBUG"),
        diagnose=(level == "DEBUG"),
    )

    if level == "DEBUG":
        logger.debug("Debug logging enabled")


__all__ = ["logger", "setup_logger"]
