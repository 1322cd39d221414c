"""
资源准备: 检查本地文件, 缺失时下载安装

``ensure`` 永远不会因为下载失败而抛出异常, 失败只记录日志并通过
``ProvisionResult`` 返回; 真正的致命错误发生在之后启动引擎时。
"""

import asyncio
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

import aiohttp

from katago_bridge.errors import FetchError, LocalIOFetchError, NetworkFetchError
from katago_bridge.utils.loggers import get_logger

logger = get_logger(__name__)

Fetch = Callable[[Path], Awaitable[None]]


class AssetStatus(str, Enum):
    FOUND = "found"
    FETCHED = "fetched"
    MISSING = "missing"


@dataclass(frozen=True)
class Asset:
    name: str
    path: Path

    def exists(self) -> bool:
        return os.path.exists(self.path)


@dataclass(frozen=True)
class ProvisionResult:
    asset: Asset
    status: AssetStatus
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.status is not AssetStatus.MISSING


def _classify(asset: Asset, exc: BaseException) -> FetchError:
    if isinstance(exc, FetchError):
        return exc
    if isinstance(exc, (aiohttp.ClientError, asyncio.TimeoutError)):
        return NetworkFetchError(url="", message=f"Fetching {asset.name} failed", detail=str(exc))
    return LocalIOFetchError(
        path=str(asset.path), message=f"Installing {asset.name} failed", detail=str(exc)
    )


async def ensure_asset(asset: Asset, fetch: Fetch) -> ProvisionResult:
    """
    确保资源存在

    Args:
        asset: 资源名称与本地路径
        fetch: 下载安装函数, 以目标路径为参数; 通过抛出 FetchError 报告失败

    Returns:
        ProvisionResult: FOUND (本来就存在), FETCHED (下载后存在) 或 MISSING
    """
    if asset.exists():
        logger.info(f"{asset.name} found")
        return ProvisionResult(asset, AssetStatus.FOUND)

    logger.info(f"{asset.name} not found at {asset.path}, fetching")
    error: Optional[FetchError] = None
    try:
        await fetch(asset.path)
    except (FetchError, aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
        error = _classify(asset, e)

    # 不管 fetch 报告什么, 都以文件是否存在为准
    if error is None and not asset.exists():
        error = LocalIOFetchError(
            path=str(asset.path),
            message=f"Fetch of {asset.name} completed but the file is still missing",
        )

    if error is not None:
        kind = "network" if isinstance(error, NetworkFetchError) else "local I/O"
        logger.error(f"{asset.name} unavailable ({kind} failure): {error.to_json()}")
        return ProvisionResult(asset, AssetStatus.MISSING, error)

    logger.info(f"{asset.name} found")
    return ProvisionResult(asset, AssetStatus.FETCHED)


async def ensure(
    name: str, path: Union[str, os.PathLike], fetch: Fetch
) -> ProvisionResult:
    """``ensure_asset`` for a bare name and path."""
    return await ensure_asset(Asset(name=name, path=Path(path)), fetch)
