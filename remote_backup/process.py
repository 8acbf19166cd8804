import asyncio
import collections
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional

from .logger import get_logger, log

logger = get_logger(__name__)

STDERR_TAIL_LINES = 50
STREAM_LIMIT = 1024 * 1024


@dataclass
class ProcessResult:
    returncode: int
    stderr: str


async def _pump(stream: asyncio.StreamReader, tag: str, sink: Optional[Deque[str]] = None):
    async for line in stream:
        text = line.decode("utf-8", errors="replace")
        if sink is not None:
            sink.append(text)
        log(text, tag)


async def run_process(
    cmd: List[str],
    cwd: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    stream_stdout: bool = True,
    timeout: Optional[float] = None,
) -> ProcessResult:
    """
    Runs an external command, forwarding its output to the status log line by line.

    stdout lines are logged as info (or discarded when stream_stdout is False),
    stderr lines as errors. The last lines of stderr are returned for error
    reporting. If the deadline passes or the caller is cancelled, the process
    is killed and the exception is re-raised.
    """
    logger.debug(f"Executing command: {cmd[0]} (cwd={cwd})")
    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE if stream_stdout else asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
        env=env,
        limit=STREAM_LIMIT,
    )

    stderr_tail: Deque[str] = collections.deque(maxlen=STDERR_TAIL_LINES)

    async def communicate() -> int:
        pumps = [_pump(process.stderr, "error", stderr_tail)]
        if stream_stdout:
            pumps.append(_pump(process.stdout, "info"))
        await asyncio.gather(*pumps)
        return await process.wait()

    try:
        returncode = await asyncio.wait_for(communicate(), timeout)
    except BaseException:
        # timeout, cancellation or a stream error: never leave the child running
        if process.returncode is None:
            logger.warning(f"Killing {cmd[0]} (pid {process.pid})")
            process.kill()
            await process.wait()
        raise

    return ProcessResult(returncode=returncode, stderr="".join(stderr_tail))
