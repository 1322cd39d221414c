"""
Fetch capabilities for the engine binary and the model file.

Each fetcher is an awaitable callable taking the target path. Sub-steps run in
order and the first failure is raised as a ``FetchError``; nothing already
written is rolled back.
"""

import asyncio
import os
import zipfile
from pathlib import Path
from typing import Callable
from urllib.parse import urljoin

from katago_bridge.errors import LocalIOFetchError
from katago_bridge.platforms import PlatformProfile, Variant
from katago_bridge.settings import Settings
from katago_bridge.utils.archive import unzip
from katago_bridge.utils.common import set_exe_permission
from katago_bridge.utils.downloader import download_file
from katago_bridge.utils.loggers import get_logger

logger = get_logger(__name__)


def _url(base: str, name: str) -> str:
    return urljoin(base.rstrip("/") + "/", name)


class BinaryFetcher:
    """Download the release archive, unpack it and mark the binary executable."""

    def __init__(
        self,
        profile: PlatformProfile,
        settings: Settings,
        choose_variant: Callable[[], Variant],
        download=None,
    ):
        self.profile = profile
        self.settings = settings
        self.choose_variant = choose_variant
        self.download = download or download_file

    def staging_path(self, archive_name: str) -> Path:
        return Path(self.settings.STAGING_DIR) / archive_name

    async def __call__(self, path: Path) -> None:
        # 交互式选择会阻塞, 放到线程中执行
        variant = await asyncio.to_thread(self.choose_variant)
        archive_name = self.profile.archive_for(variant)
        staging = self.staging_path(archive_name)

        logger.info(f"Downloading KataGo {variant.label}")
        await self.download(
            _url(self.settings.BINARIES_URL, archive_name),
            staging,
            timeout=self.settings.DOWNLOAD_TIMEOUT,
            chunk_size=self.settings.DOWNLOAD_CHUNK_SIZE,
        )

        logger.info("Unpacking KataGo")
        try:
            unzip(staging, self.settings.BINARY_DIR)
        except (
            zipfile.BadZipFile,
            zipfile.LargeZipFile,
            NotImplementedError,
            RuntimeError,
            ValueError,
            OSError,
        ) as e:
            # NotImplementedError: 不支持的压缩方法; RuntimeError: 加密条目
            raise LocalIOFetchError(
                path=str(staging), message="Failed to unpack archive", detail=str(e)
            ) from e

        logger.info("Removing zip")
        try:
            os.remove(staging)
        except OSError as e:
            raise LocalIOFetchError(
                path=str(staging), message="Failed to remove archive", detail=str(e)
            ) from e

        logger.info("Setting execution permission")
        try:
            set_exe_permission(path)
        except OSError as e:
            raise LocalIOFetchError(
                path=str(path), message="Failed to set execute permission", detail=str(e)
            ) from e


class ModelFetcher:
    """Download the network weights straight to the target path."""

    def __init__(self, settings: Settings, download=None):
        self.settings = settings
        self.download = download or download_file

    async def __call__(self, path: Path) -> None:
        logger.info(f"Downloading model {self.settings.MODEL}")
        await self.download(
            _url(self.settings.MODELS_URL, self.settings.MODEL),
            path,
            timeout=self.settings.DOWNLOAD_TIMEOUT,
            chunk_size=self.settings.DOWNLOAD_CHUNK_SIZE,
        )
