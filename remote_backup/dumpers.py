import abc
import asyncio
import os
from typing import Dict, List, Optional

from .error_parser import parse_dump_error
from .errors import DumpFailed
from .logger import log
from .process import run_process
from .schemas import SourceConfig
from .utils import ALL_DATABASES


class DumpProvider(abc.ABC):
    tool: str
    kind: str

    @abc.abstractmethod
    def build_command(self, source: SourceConfig, database: str, directory: str) -> List[str]:
        pass

    def build_env(self, source: SourceConfig) -> Optional[Dict[str, str]]:
        return None

    async def prepare(self, directory: str) -> None:
        pass

    async def dump(self, source: SourceConfig, database: str, directory: str, timeout: Optional[float] = None) -> None:
        """
        Dumps one database (or all of them) into directory.

        Raises DumpFailed on a non-zero exit, a missing tool or a missed deadline.
        """
        await self.prepare(directory)
        cmd = self.build_command(source, database, directory)

        log(f"Starting {self.tool} of {database}", "info")
        try:
            result = await run_process(cmd, env=self.build_env(source), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise DumpFailed(self.tool, None, timed_out=True) from e
        except FileNotFoundError as e:
            raise DumpFailed(self.tool, 127, summary=f"{self.tool} is not installed or not on PATH") from e

        if result.returncode != 0:
            summary = parse_dump_error(result.stderr, self.kind)
            raise DumpFailed(self.tool, result.returncode, summary=summary)
        log(f"{self.tool} executed successfully", "info")


class MongoDumper(DumpProvider):
    tool = "mongodump"
    kind = "mongodb"

    def build_command(self, source: SourceConfig, database: str, directory: str) -> List[str]:
        address = source.host if source.port is None else f"{source.host}:{source.port}"
        cmd = [self.tool, "--host", address]

        if database and database != ALL_DATABASES:
            cmd += ["--db", database]
        else:
            # a full dump lays out one folder per database, so keep it under all/
            directory = os.path.join(directory, ALL_DATABASES)
        cmd += ["--out", directory]

        if source.username and source.password:
            cmd += ["--username", source.username, "--password", source.password]
        return cmd


class MySQLDumper(DumpProvider):
    tool = "mysqldump"
    kind = "mysql"

    def build_command(self, source: SourceConfig, database: str, directory: str) -> List[str]:
        cmd = [self.tool, "-h", source.host]
        if source.port is not None:
            cmd += ["-P", str(source.port)]
        if source.username:
            cmd += ["-u", source.username]

        if database and database != ALL_DATABASES:
            cmd.append(database)
        else:
            cmd.append("--all-databases")
        cmd.append(f"--result-file={os.path.join(directory, database)}")
        return cmd

    def build_env(self, source: SourceConfig) -> Optional[Dict[str, str]]:
        if not source.password:
            return None
        # Keep the password off the command line.
        return {**os.environ, "MYSQL_PWD": source.password}

    async def prepare(self, directory: str) -> None:
        # mysqldump does not create the directory of its result file
        await asyncio.to_thread(os.makedirs, directory, exist_ok=True)


DUMPERS = {
    "mongodb": MongoDumper,
    "mysql": MySQLDumper,
}


def get_dumper(kind: str) -> DumpProvider:
    try:
        return DUMPERS[kind]()
    except KeyError:
        raise ValueError(f"Unsupported database kind: {kind}")
