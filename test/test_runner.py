import asyncio
import contextlib
import os
import sys
from pathlib import Path

import aiohttp
import pytest
from unittest.mock import AsyncMock, MagicMock

from katago_bridge.bridge.session import Direction
from katago_bridge.cli.runner import BridgeRunner
from katago_bridge.engine.supervisor import launch
from katago_bridge.errors import EngineLaunchError, NetworkFetchError
from katago_bridge.platforms import Variant, resolve_profile
from katago_bridge.provision.assets import AssetStatus

from fakes import FakeWebSocket, ws_message


def _install_assets(settings, profile):
    binary = Path(settings.BINARY_DIR) / profile.binary_name
    binary.parent.mkdir(parents=True, exist_ok=True)
    binary.write_bytes(b"bin")
    (Path(settings.BINARY_DIR) / settings.ENGINE_CONFIG).write_text("cfg")
    (Path(settings.MODEL_DIR) / settings.MODEL).write_bytes(b"weights")


def _fake_connector(ws):
    @contextlib.asynccontextmanager
    async def connector(url):
        connector.url = url
        yield ws
        await ws.close()

    return connector


@pytest.fixture
def profile():
    return resolve_profile("v1.13.0", system="Linux")


class TestBridgeRunnerAssets:
    def test_asset_paths(self, settings, profile):
        runner = BridgeRunner(settings=settings, profile=profile)

        assert runner.binary_asset.path == Path(settings.BINARY_DIR) / "katago"
        assert runner.model_asset.path == Path(settings.MODEL_DIR) / "model.bin.gz"
        assert runner.config_path == Path(settings.BINARY_DIR) / "analysis_example.cfg"

    def test_variant_setting_skips_prompt(self, settings, profile):
        runner = BridgeRunner(settings=settings, profile=profile)

        assert runner.chooser() is Variant.CPU

    def test_invalid_variant_setting(self, settings, profile):
        with pytest.raises(ValueError):
            BridgeRunner(settings=settings.model_copy(update={"VARIANT": "tpu"}), profile=profile)

    def test_engine_command(self, settings, profile):
        runner = BridgeRunner(settings=settings, profile=profile)

        cmd = runner.engine_command()

        assert cmd[1:] == [
            "analysis",
            "-model",
            str(Path(settings.MODEL_DIR) / settings.MODEL),
            "-config",
            str(Path(settings.BINARY_DIR) / settings.ENGINE_CONFIG),
        ]

    def test_relative_binary_gets_dot_prefix(self, settings, profile):
        runner = BridgeRunner(
            settings=settings.model_copy(update={"BINARY_DIR": "KataGo"}), profile=profile
        )

        assert runner.engine_command()[0] == os.path.join(os.curdir, "KataGo", "katago")

    @pytest.mark.asyncio
    async def test_provision_skips_present_assets(self, settings, profile):
        _install_assets(settings, profile)
        runner = BridgeRunner(settings=settings, profile=profile)

        results = await runner.provision()

        assert [r.status for r in results] == [AssetStatus.FOUND, AssetStatus.FOUND]

    @pytest.mark.asyncio
    async def test_provision_failures_are_not_raised(self, settings, profile, monkeypatch):
        download = AsyncMock(side_effect=NetworkFetchError(url="https://example.com", status=503))
        monkeypatch.setattr("katago_bridge.provision.fetchers.download_file", download)
        runner = BridgeRunner(settings=settings, profile=profile)

        results = await runner.provision()

        assert [r.status for r in results] == [AssetStatus.MISSING, AssetStatus.MISSING]
        assert download.await_count == 2


class TestBridgeRunnerStartEngine:
    @pytest.mark.asyncio
    async def test_missing_assets_are_fatal(self, settings, profile):
        launcher = AsyncMock()
        runner = BridgeRunner(settings=settings, profile=profile, launcher=launcher)

        with pytest.raises(EngineLaunchError) as exc_info:
            await runner.start_engine()

        assert "KataGo binary" in exc_info.value.message
        launcher.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_config_is_fatal(self, settings, profile):
        _install_assets(settings, profile)
        os.remove(Path(settings.BINARY_DIR) / settings.ENGINE_CONFIG)
        runner = BridgeRunner(settings=settings, profile=profile, launcher=AsyncMock())

        with pytest.raises(EngineLaunchError) as exc_info:
            await runner.start_engine()

        assert "config" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_launches_with_engine_command(self, settings, profile):
        _install_assets(settings, profile)
        launcher = AsyncMock(return_value=MagicMock())
        runner = BridgeRunner(settings=settings, profile=profile, launcher=launcher)

        await runner.start_engine()

        command = runner.engine_command()
        launcher.assert_awaited_once_with(
            command[0], command[1:], stream_limit=settings.STREAM_LIMIT
        )


class TestBridgeRunnerExecute:
    """端到端: 用 python 进程扮演引擎, 用假 WebSocket 扮演客户端"""

    @pytest.mark.asyncio
    async def test_relays_until_client_closes(self, settings, profile, echo_engine_args):
        _install_assets(settings, profile)
        ws = FakeWebSocket()
        connector = _fake_connector(ws)

        async def launcher(executable, args, stream_limit):
            return await launch(echo_engine_args[0], echo_engine_args[1:], stream_limit=stream_limit)

        runner = BridgeRunner(settings=settings, profile=profile, connector=connector, launcher=launcher)

        async def client():
            ws.incoming.put_nowait(ws_message(aiohttp.WSMsgType.TEXT, '{"id":"a"}\n'))
            while not ws.sent:
                await asyncio.sleep(0.01)
            ws.incoming.put_nowait(ws_message(aiohttp.WSMsgType.CLOSE, 1000))

        client_task = asyncio.create_task(client())
        try:
            direction = await asyncio.wait_for(runner.execute("ws://example.com/engine"), timeout=10)
        finally:
            await runner.cleanup()
            await client_task

        assert direction is Direction.CONNECTION_TO_PROCESS
        assert ws.sent == ['{"ID":"A"}\n']
        assert ws.closed
        assert connector.url == "ws://example.com/engine"

    @pytest.mark.asyncio
    async def test_engine_exit_ends_session(self, settings, profile):
        _install_assets(settings, profile)
        ws = FakeWebSocket()

        async def launcher(executable, args, stream_limit):
            return await launch(sys.executable, ["-c", "print('ready')"], stream_limit=stream_limit)

        runner = BridgeRunner(
            settings=settings, profile=profile, connector=_fake_connector(ws), launcher=launcher
        )

        try:
            direction = await asyncio.wait_for(runner.execute("ws://example.com/engine"), timeout=10)
        finally:
            await runner.cleanup()

        assert direction is Direction.PROCESS_TO_CONNECTION
        assert [line.strip() for line in ws.sent] == ["ready"]

    @pytest.mark.asyncio
    async def test_cleanup_without_engine(self, settings, profile):
        runner = BridgeRunner(settings=settings, profile=profile)

        await runner.cleanup()

        assert runner.engine is None
