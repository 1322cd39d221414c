"""
Zip 归档解压
"""

import shutil
import zipfile
from pathlib import Path

from katago_bridge.utils.common import PathLike, create_file, safe_join
from katago_bridge.utils.loggers import get_logger

logger = get_logger(__name__)


def unzip(zip_path: PathLike, target_dir: PathLike) -> list[Path]:
    """
    将 zip 归档解压到目标目录, 保留条目的相对路径

    Args:
        zip_path: 归档文件路径
        target_dir: 解压目标目录, 不存在时自动创建

    Returns:
        解压出的文件路径列表

    Raises:
        zipfile.BadZipFile: 归档损坏
        ValueError: 条目路径试图逃逸出目标目录
        OSError: 读写失败
    """
    target = Path(target_dir)
    target.mkdir(parents=True, exist_ok=True)

    extracted = []
    with zipfile.ZipFile(zip_path) as archive:
        for info in archive.infolist():
            destination = safe_join(target, info.filename)
            if info.is_dir():
                destination.mkdir(parents=True, exist_ok=True)
                continue
            with archive.open(info) as src, create_file(destination) as dst:
                shutil.copyfileobj(src, dst)
            extracted.append(destination)

    logger.debug(f"Unpacked {len(extracted)} files from {zip_path} into {target}")
    return extracted
