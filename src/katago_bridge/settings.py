# -*- coding: utf-8 -*-

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # 日志配置
    log_level: str = "INFO"

    # KataGo release
    ENGINE_VERSION: str = "v1.13.0"
    BINARIES_URL: str = "https://github.com/lightvector/KataGo/releases/download/v1.13.0/"
    BINARY_DIR: str = "KataGo"
    ENGINE_CONFIG: str = "analysis_example.cfg"

    # Neural network model
    MODELS_URL: str = "https://media.katagotraining.org/uploaded/networks/models/kata1/"
    MODEL: str = "kata1-b18c384nbt-s8341979392-d3881113763.bin.gz"
    MODEL_DIR: str = "."

    # "gpu" / "cpu"; prompt interactively when unset
    VARIANT: Optional[str] = None

    # Where release archives are staged before unpacking
    STAGING_DIR: str = "."

    # Downloader; None waits indefinitely
    DOWNLOAD_TIMEOUT: Optional[int] = None
    DOWNLOAD_CHUNK_SIZE: int = Field(default=8192, gt=0)

    # Engine process
    STREAM_LIMIT: int = Field(default=16 * 1024 * 1024, gt=0)
    TERMINATE_GRACE: float = 5.0


_SETTINGS = Settings()


def get_settings() -> Settings:
    return _SETTINGS
