import logging
import sys
from pathlib import Path
from typing import Optional

from katago_bridge.settings import get_settings

# 定义日志格式
DEFAULT_LOG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
)
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# 定义日志级别
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logger(
    name: str,
    level: str = "INFO",
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    log_file: Optional[str] = None,
    console_output: bool = True,
) -> logging.Logger:
    """
    设置并返回一个配置好的logger实例

    Args:
        name: logger名称
        level: 日志级别 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: 日志格式
        date_format: 日期格式
        log_file: 日志文件路径，如果为None则只输出到控制台
        console_output: 是否输出到控制台

    Returns:
        logging.Logger: 配置好的logger实例
    """
    logger = logging.getLogger(name)

    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)
    logger.setLevel(log_level)

    # 清除已有的handlers, 各 logger 自带 handler, 不再向上传播避免重复输出
    logger.handlers.clear()
    logger.propagate = not console_output and not log_file

    formatter = logging.Formatter(log_format, date_format)

    # 控制台输出走 stderr，stdout 留给用户可见的提示
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        # 确保日志目录存在
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(
    name: str = "katago_bridge",
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    获取一个配置好的logger实例的便捷函数

    Args:
        name: logger名称
        level: 日志级别，为None时使用配置中的 log_level
        log_file: 日志文件路径

    Returns:
        logging.Logger: 配置好的logger实例
    """
    settings = get_settings()
    actual_level = level if level is not None else settings.log_level

    return setup_logger(
        name=name,
        level=actual_level,
        log_file=log_file,
    )


def set_level(level: str) -> None:
    """调整所有 katago_bridge.* logger 的日志级别"""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)
    for name, logger in list(logging.root.manager.loggerDict.items()):
        if name.startswith("katago_bridge") and isinstance(logger, logging.Logger):
            logger.setLevel(log_level)


DEFAULT_LOGGER = get_logger()
