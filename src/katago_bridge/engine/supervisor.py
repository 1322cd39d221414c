"""
引擎子进程管理
"""

import asyncio
from typing import Optional, Sequence

import psutil

from katago_bridge.errors import EngineLaunchError, StreamAlreadyTakenError
from katago_bridge.utils.loggers import get_logger

logger = get_logger(__name__)

DEFAULT_STREAM_LIMIT = 16 * 1024 * 1024


class EngineProcess:
    """
    引擎进程句柄

    stdin / stdout 各自只能被取出一次, 取出后归调用方独占。
    """

    def __init__(self, process: asyncio.subprocess.Process):
        self.process = process
        self._stdin: Optional[asyncio.StreamWriter] = process.stdin
        self._stdout: Optional[asyncio.StreamReader] = process.stdout

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self.process.returncode

    def take_stdin(self) -> asyncio.StreamWriter:
        if self._stdin is None:
            raise StreamAlreadyTakenError("engine stdin already taken")
        stdin, self._stdin = self._stdin, None
        return stdin

    def take_stdout(self) -> asyncio.StreamReader:
        if self._stdout is None:
            raise StreamAlreadyTakenError("engine stdout already taken")
        stdout, self._stdout = self._stdout, None
        return stdout

    async def wait(self) -> int:
        return await self.process.wait()

    async def terminate(self, grace: float = 5.0) -> Optional[int]:
        """
        终止引擎及其子进程

        先发送 SIGTERM, 等待 ``grace`` 秒后对仍存活的进程发送 SIGKILL。
        进程已退出时直接返回退出码。
        """
        stdin = self.process.stdin
        if stdin is not None and not stdin.is_closing():
            stdin.close()

        if self.process.returncode is not None:
            return self.process.returncode

        # 引擎派生的子进程不归 asyncio 管理, 交给 psutil 处理
        try:
            children = psutil.Process(self.process.pid).children(recursive=True)
        except psutil.NoSuchProcess:
            children = []

        for proc in children:
            try:
                proc.terminate()
            except psutil.NoSuchProcess:
                pass
        try:
            self.process.terminate()
        except ProcessLookupError:
            pass

        try:
            returncode = await asyncio.wait_for(self.process.wait(), timeout=grace)
        except asyncio.TimeoutError:
            logger.warning(f"Engine process {self.process.pid} ignored SIGTERM, killing")
            try:
                self.process.kill()
            except ProcessLookupError:
                pass
            returncode = await self.process.wait()

        if children:
            loop = asyncio.get_running_loop()
            _, alive = await loop.run_in_executor(
                None, lambda: psutil.wait_procs(children, timeout=grace)
            )
            for proc in alive:
                try:
                    proc.kill()
                except psutil.NoSuchProcess:
                    pass

        logger.info(f"Engine process {self.process.pid} exited with {returncode}")
        return returncode


async def launch(
    executable: str,
    args: Sequence[str] = (),
    stream_limit: int = DEFAULT_STREAM_LIMIT,
) -> EngineProcess:
    """
    启动引擎子进程, stdin/stdout 为管道, stderr 继承当前进程

    Raises:
        EngineLaunchError: 可执行文件不存在, 无权限等
    """
    try:
        process = await asyncio.create_subprocess_exec(
            executable,
            *args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=None,
            limit=stream_limit,
        )
    except FileNotFoundError as e:
        raise EngineLaunchError(
            f"Engine executable not found: {executable}", detail=str(e)
        ) from e
    except PermissionError as e:
        raise EngineLaunchError(
            f"Permission denied starting engine: {executable}", detail=str(e)
        ) from e
    except OSError as e:
        raise EngineLaunchError(
            f"Failed to start engine: {executable}", detail=str(e)
        ) from e

    logger.info(f"Running binary {executable} (pid {process.pid})")
    return EngineProcess(process)
