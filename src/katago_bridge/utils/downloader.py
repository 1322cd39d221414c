"""
HTTP 文件下载
"""

import asyncio
from typing import Callable, Optional

import aiohttp

from katago_bridge.errors import LocalIOFetchError, NetworkFetchError
from katago_bridge.utils.common import PathLike, create_file
from katago_bridge.utils.loggers import get_logger

logger = get_logger(__name__)


async def download_file(
    url: str,
    file_path: PathLike,
    timeout: Optional[int] = None,
    chunk_size: int = 8192,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> int:
    """异步下载文件

    Args:
        url: 下载地址
        file_path: 保存路径, 父目录不存在时自动创建
        timeout: 总超时时间 (秒), None 表示不限制
        chunk_size: 每次写入的块大小
        progress_callback: 进度回调函数，参数为 (已下载字节数, 总字节数)

    Returns:
        下载的字节数

    Raises:
        NetworkFetchError: 连接失败, HTTP 错误状态或超时
        LocalIOFetchError: 写入本地文件失败
    """
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    downloaded = 0
    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.get(url) as response:
                response.raise_for_status()

                total_size = int(response.headers.get("content-length", 0))
                logger.info(f"Downloading {url} ({total_size} bytes)")

                with create_file(file_path) as f:
                    async for chunk in response.content.iter_chunked(chunk_size):
                        f.write(chunk)
                        downloaded += len(chunk)

                        if progress_callback:
                            progress_callback(downloaded, total_size)
    except aiohttp.ClientResponseError as e:
        raise NetworkFetchError(
            url=url,
            message="Download failed",
            detail=e.message,
            status=e.status,
        ) from e
    except aiohttp.ClientError as e:
        raise NetworkFetchError(url=url, detail=str(e)) from e
    except asyncio.TimeoutError as e:
        raise NetworkFetchError(
            url=url, message="Download timed out", detail=f"timeout={timeout}s"
        ) from e
    except OSError as e:
        raise LocalIOFetchError(
            path=str(file_path), message="Failed to write download", detail=str(e)
        ) from e

    logger.info(f"Saved {downloaded} bytes to {file_path}")
    return downloaded
