"""
Startup sequence for one bridge session
"""

import os
from pathlib import Path
from typing import Callable, List, Optional

from katago_bridge.bridge.connection import connect, split
from katago_bridge.bridge.session import BridgeSession, Direction
from katago_bridge.cli.prompt import choose_variant, fixed_variant
from katago_bridge.engine.command import build_analysis_command
from katago_bridge.engine.supervisor import EngineProcess, launch
from katago_bridge.errors import EngineLaunchError
from katago_bridge.platforms import PlatformProfile, Variant, resolve_profile
from katago_bridge.provision.assets import Asset, ProvisionResult, ensure_asset
from katago_bridge.provision.fetchers import BinaryFetcher, ModelFetcher
from katago_bridge.settings import Settings, get_settings
from katago_bridge.utils.loggers import get_logger


class BridgeRunner:
    """
    Provision assets, start the engine and relay one client connection
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        profile: Optional[PlatformProfile] = None,
        chooser: Optional[Callable[[], Variant]] = None,
        connector=connect,
        launcher=launch,
    ):
        self.logger = get_logger(__name__)
        self.settings = settings or get_settings()
        self.profile = profile or resolve_profile(self.settings.ENGINE_VERSION)
        if chooser is None:
            if self.settings.VARIANT:
                chooser = fixed_variant(Variant.parse(self.settings.VARIANT))
            else:
                chooser = choose_variant
        self.chooser = chooser
        self.connector = connector
        self.launcher = launcher
        self.engine: Optional[EngineProcess] = None

    @property
    def binary_asset(self) -> Asset:
        return Asset(
            name="KataGo binary",
            path=Path(self.settings.BINARY_DIR) / self.profile.binary_name,
        )

    @property
    def model_asset(self) -> Asset:
        return Asset(
            name=f"Model {self.settings.MODEL}",
            path=Path(self.settings.MODEL_DIR) / self.settings.MODEL,
        )

    @property
    def config_path(self) -> Path:
        return Path(self.settings.BINARY_DIR) / self.settings.ENGINE_CONFIG

    async def provision(self) -> List[ProvisionResult]:
        """Make sure the binary and the model are present; failures are logged only."""
        binary = await ensure_asset(
            self.binary_asset, BinaryFetcher(self.profile, self.settings, self.chooser)
        )
        model = await ensure_asset(self.model_asset, ModelFetcher(self.settings))
        return [binary, model]

    def engine_command(self) -> List[str]:
        binary = self.binary_asset.path
        # 相对路径需要显式 ./ 前缀, 否则会在 PATH 中查找
        if not binary.is_absolute():
            binary = os.path.join(os.curdir, binary)
        return build_analysis_command(binary, self.model_asset.path, self.config_path)

    async def start_engine(self) -> EngineProcess:
        missing = [
            a.name
            for a in (self.binary_asset, self.model_asset)
            if not a.exists()
        ]
        if missing:
            raise EngineLaunchError(
                f"Cannot start engine, missing: {', '.join(missing)}",
                detail="provisioning failed, see log above",
            )
        if not self.config_path.exists():
            raise EngineLaunchError(
                f"Engine config not found: {self.config_path}",
                detail="it ships with the KataGo archive; remove the binary directory to re-download it",
            )

        command = self.engine_command()
        self.logger.info(f"Starting engine: {' '.join(command)}")
        self.engine = await self.launcher(
            command[0], command[1:], stream_limit=self.settings.STREAM_LIMIT
        )
        return self.engine

    async def execute(self, url: str) -> Direction:
        """
        Run the whole startup sequence and one relay session

        Returns:
            The direction that ended the session

        Raises:
            EngineLaunchError: assets missing or spawn failed
            ConnectionEstablishError: could not connect to ``url``
            BridgeError: fatal relay fault
        """
        await self.provision()
        engine = await self.start_engine()

        async with self.connector(url) as ws:
            sink, source = split(ws)
            session = BridgeSession(
                stdout=engine.take_stdout(),
                stdin=engine.take_stdin(),
                sink=sink,
                source=source,
            )
            return await session.run()

    async def cleanup(self):
        """Stop the engine process if it is still running"""
        if self.engine is not None:
            await self.engine.terminate(grace=self.settings.TERMINATE_GRACE)
        self.engine = None
