import os
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .schemas import SourceConfig
from .utils import get_archive_name


class DatabaseKind(str, Enum):
    MONGODB = "mongodb"
    MYSQL = "mysql"


@dataclass
class BackupJob:
    """One database carried through dump, archive and upload."""

    kind: DatabaseKind
    database: str
    source: SourceConfig
    tmp_dir: str
    archive_name: str = ""

    def __post_init__(self):
        if not self.archive_name:
            self.archive_name = get_archive_name(self.database)

    @classmethod
    def create(cls, kind: DatabaseKind, database: str, source: SourceConfig, tmp_root: Optional[str] = None) -> "BackupJob":
        tmp_root = tmp_root or tempfile.gettempdir()
        tmp_dir = os.path.join(tmp_root, f"{kind.value}_s3_backup")
        return cls(kind=kind, database=database, source=source, tmp_dir=tmp_dir)

    @property
    def backup_dir(self) -> str:
        return os.path.join(self.tmp_dir, self.database)

    @property
    def archive_path(self) -> str:
        return os.path.join(self.tmp_dir, self.archive_name)

    def contains(self, path: str) -> bool:
        root = os.path.abspath(self.tmp_dir)
        path = os.path.abspath(path)
        return path != root and os.path.commonpath([root, path]) == root

    def is_contained(self) -> bool:
        """True when both temporary artifacts sit strictly inside tmp_dir."""
        return self.contains(self.backup_dir) and self.contains(self.archive_path)


@dataclass
class PipelineOutcome:
    database: str
    error: Optional[BaseException] = None
    duration: float = 0.0
    archive_name: Optional[str] = field(default=None)

    @property
    def succeeded(self) -> bool:
        return self.error is None
