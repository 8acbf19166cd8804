from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Literal, Optional

from .utils import ALL_DATABASES


class SourceConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = "localhost"
    port: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = None
    dbs: List[str] = Field(default_factory=lambda: [ALL_DATABASES])


class RemoteConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: Optional[str] = None
    secret: Optional[str] = None
    bucket: str
    destination: str = "/"
    encrypt: bool = False
    endpoint_url: Optional[str] = None
    region: Optional[str] = None


class StageTimeouts(BaseModel):
    model_config = ConfigDict(frozen=True)

    dump: Optional[float] = 3600
    archive: Optional[float] = 1800
    upload: Optional[float] = 3600


class JobConfig(BaseModel):
    id: str
    kind: Literal["mongodb", "mysql"]
    source: SourceConfig
    schedule: Optional[str] = None
    timeouts: StageTimeouts = Field(default_factory=StageTimeouts)


class AppConfig(BaseModel):
    storage: Optional[RemoteConfig] = None
    jobs: List[JobConfig] = Field(default_factory=list)

    def get_job(self, job_id: str) -> Optional[JobConfig]:
        for job in self.jobs:
            if job.id == job_id:
                return job
        return None


class JobInfo(BaseModel):
    id: str
    kind: str
    host: str
    dbs: List[str]
    schedule: Optional[str] = None


class BackupRunInfo(BaseModel):
    job_id: str
    status: str


class ReloadInfo(BaseModel):
    jobs: int
    scheduled: Dict[str, str]
