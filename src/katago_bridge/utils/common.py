import os
import stat
import sys
from pathlib import Path
from typing import BinaryIO, Union

from katago_bridge.utils.loggers import get_logger

logger = get_logger(__name__)

PathLike = Union[str, os.PathLike]


def safe_join(parent: PathLike, child: str) -> Path:
    child_path = Path(child)

    # 1. 如果是绝对路径，去掉开头的所有 '/' 后拼接
    if child_path.is_absolute() or child.startswith(("/", "\\")):
        child_path = Path(child.lstrip("/\\"))

    # 2. 禁止路径中包含 '..'（防止路径遍历攻击）
    parts = child_path.parts
    if ".." in parts:
        raise ValueError("child path cannot contain '..'")

    # 3. 拼接并验证最终路径在父目录内
    result_path = Path(parent) / child_path
    parent_path = Path(parent).resolve()
    result_resolved = result_path.resolve()

    try:
        result_resolved.relative_to(parent_path)
    except ValueError:
        raise ValueError("child path would escape parent directory")

    return result_path


def create_file(file_path: PathLike) -> BinaryIO:
    """Open ``file_path`` for binary writing, creating parent directories."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return open(path, "wb")


def set_exe_permission(file_path: PathLike) -> None:
    """Add the owner-execute bit to ``file_path``."""
    if sys.platform.startswith("win"):
        logger.info(
            "Can't set exe permission on non unix platform. It probably is already set"
        )
        return
    mode = os.stat(file_path).st_mode
    os.chmod(file_path, mode | stat.S_IXUSR)
