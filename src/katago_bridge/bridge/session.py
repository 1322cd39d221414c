"""
双向转发会话

Direction A: 引擎 stdout -> 连接 (process_to_connection)
Direction B: 连接 -> 引擎 stdin (connection_to_process)

两个方向作为独立任务并发运行, 任一方向结束即结束会话, 另一方向被取消。
"""

import asyncio
import contextlib
from enum import Enum
from typing import Protocol

from katago_bridge.bridge.connection import MessageSink, MessageSource
from katago_bridge.bridge.messages import CloseMessage, OtherMessage, TextMessage
from katago_bridge.errors import EngineOutputDecodeError, EngineWriteError
from katago_bridge.utils.loggers import get_logger

logger = get_logger(__name__)

# 读错误后的退避时间 (秒); StreamReader 出错后会立即重复抛出同一异常
READ_ERROR_BACKOFF = 0.05


class Direction(str, Enum):
    PROCESS_TO_CONNECTION = "process_to_connection"
    CONNECTION_TO_PROCESS = "connection_to_process"


class LineReader(Protocol):
    async def readline(self) -> bytes: ...


class ByteWriter(Protocol):
    def write(self, data: bytes) -> None: ...

    async def drain(self) -> None: ...


async def process_to_connection(stdout: LineReader, sink: MessageSink) -> None:
    """
    读取引擎输出, 每行作为一条文本消息发送

    读到 EOF 时正常返回; 读错误记录并退避后继续; 非 UTF-8 输出视为协议损坏, 抛出异常。
    按行读取: 没有换行结尾的输出会被缓存, 直到读到换行或 EOF 才发送。
    """
    while True:
        try:
            data = await stdout.readline()
        except (OSError, ValueError) as e:
            # ValueError: 单行超过 StreamReader 的 limit
            logger.warning(f"Error reading from engine stdout: {e!r}")
            await asyncio.sleep(READ_ERROR_BACKOFF)
            continue

        if not data:
            logger.info("Engine closed its output")
            return

        try:
            line = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EngineOutputDecodeError(
                "Error parsing UTF-8 from engine output", detail=str(e)
            ) from e

        logger.debug(f"engine: {line.rstrip()}")
        await sink.send_text(line)


async def connection_to_process(source: MessageSource, stdin: ByteWriter) -> None:
    """
    接收客户端消息写入引擎 stdin, 每条消息写入后立即 drain

    收到 Close 时正常返回; 非文本消息忽略; 接收错误与写入错误向上抛出。
    """
    while True:
        msg = await source.receive()

        if isinstance(msg, TextMessage):
            logger.debug(f"client: {msg.content.rstrip()}")
            try:
                stdin.write(msg.content.encode("utf-8"))
                await stdin.drain()
            except ConnectionError as e:
                raise EngineWriteError("Error writing to engine stdin", detail=str(e)) from e
        elif isinstance(msg, CloseMessage):
            logger.info(f"Client closed the connection (code={msg.code})")
            return
        elif isinstance(msg, OtherMessage):
            logger.warning(f"Not text or close message: {msg.kind}")
        else:
            logger.warning(f"Unexpected message object: {msg!r}")


async def _reap(task: asyncio.Task) -> None:
    """等待任务真正结束, 确保其持有的流句柄被释放"""
    with contextlib.suppress(asyncio.CancelledError):
        try:
            await task
        except Exception as e:
            # 结果由 run() 统一处理, 这里只保证任务已结束
            logger.debug(f"{task.get_name()} finished with {e!r}")


class BridgeSession:
    """
    在引擎进程与客户端连接之间转发消息

    构造时接收四个端点的独占所有权, ``run`` 只能调用一次。
    """

    def __init__(
        self,
        stdout: LineReader,
        stdin: ByteWriter,
        sink: MessageSink,
        source: MessageSource,
    ):
        self._stdout = stdout
        self._stdin = stdin
        self._sink = sink
        self._source = source
        self._started = False

    async def run(self) -> Direction:
        """
        并发运行两个方向, 返回先结束的方向

        先结束的方向若以异常结束, 异常会在另一方向取消后重新抛出。
        """
        if self._started:
            raise RuntimeError("BridgeSession.run() called twice")
        self._started = True

        tasks = {
            asyncio.create_task(
                process_to_connection(self._stdout, self._sink),
                name=Direction.PROCESS_TO_CONNECTION.value,
            ): Direction.PROCESS_TO_CONNECTION,
            asyncio.create_task(
                connection_to_process(self._source, self._stdin),
                name=Direction.CONNECTION_TO_PROCESS.value,
            ): Direction.CONNECTION_TO_PROCESS,
        }

        try:
            done, pending = await asyncio.wait(
                tasks, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            # 外部取消 run() 时也要回收两个任务
            for task in tasks:
                if not task.done():
                    task.cancel()
            for task in tasks:
                await _reap(task)

        # 两个任务可能同时完成; 优先报告异常
        finished = sorted(done, key=lambda t: t.exception() is None)[0]
        direction = tasks[finished]
        for task in pending:
            logger.debug(f"Abandoned {tasks[task].value}")

        exc = finished.exception()
        if exc is not None:
            logger.error(f"{direction.value} failed: {exc!r}")
            raise exc

        logger.info(f"Session ended by {direction.value}")
        return direction
