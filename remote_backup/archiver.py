import asyncio
from typing import Optional

from .errors import ArchiveFailed
from .logger import log
from .process import run_process


class Archiver:
    """Compresses a dump into a single gzip tarball with the system tar."""

    tool = "tar"

    async def compress(self, directory: str, input_name: str, output_name: str, timeout: Optional[float] = None) -> None:
        """
        Runs `tar -zcf output input` inside directory.

        Only stderr is forwarded to the log; tar is silent on success.
        """
        log(f"Starting compression of {input_name} into {output_name}", "info")
        try:
            result = await run_process(
                [self.tool, "-zcf", output_name, input_name],
                cwd=directory,
                stream_stdout=False,
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise ArchiveFailed(None, timed_out=True) from e
        except FileNotFoundError as e:
            raise ArchiveFailed(127) from e

        if result.returncode != 0:
            raise ArchiveFailed(result.returncode)
        log("Successfully compressed directory", "info")
