import asyncio
import inspect
import os
import tempfile
import time
from datetime import datetime
from typing import Callable, List, Optional

import psutil
from botocore.exceptions import BotoCoreError

from .archiver import Archiver
from .cleaner import FilesystemCleaner
from .dumpers import DumpProvider, get_dumper
from .errors import BackupError, CleanupFailed, RejectedIdentifier, UploadFailed
from .logger import get_logger, log
from .metrics import (
    BACKUPS_TOTAL, BACKUP_DURATION_SECONDS, BACKUP_SIZE_BYTES, BACKUP_LAST_STATUS,
    BACKUP_LAST_SUCCESS_TIMESTAMP_SECONDS, CLEANUP_FAILURES_TOTAL, DISK_SPACE_AVAILABLE_BYTES
)
from .models import BackupJob, DatabaseKind, PipelineOutcome
from .schemas import JobConfig, RemoteConfig, SourceConfig, StageTimeouts
from .storage import StorageProvider, get_storage_provider, object_key
from .utils import ALL_DATABASES, is_contained_identifier, is_safe_identifier

logger = get_logger(__name__)

JobCallback = Callable[[Optional[BaseException]], object]


async def run_backup(
    source: SourceConfig,
    remote: RemoteConfig,
    kind,
    callback: Optional[JobCallback] = None,
    dumper: Optional[DumpProvider] = None,
    archiver: Optional[Archiver] = None,
    storage: Optional[StorageProvider] = None,
    cleaner: Optional[FilesystemCleaner] = None,
    timeouts: Optional[StageTimeouts] = None,
    tmp_root: Optional[str] = None,
) -> List[PipelineOutcome]:
    """
    Backs up every database in source.dbs to remote storage.

    Each database runs as its own pipeline (cleanup, dump, archive, upload,
    cleanup) and all pipelines run concurrently. callback, if given, is called
    once per database with None or the first failure of that pipeline, after
    its temporary files are gone. Returns the outcomes in source.dbs order.
    """
    kind = DatabaseKind(kind)
    databases = list(source.dbs or [ALL_DATABASES])
    tmp_root = tmp_root or tempfile.gettempdir()

    dumper = dumper or get_dumper(kind.value)
    archiver = archiver or Archiver()
    storage = storage or get_storage_provider(remote)
    cleaner = cleaner or FilesystemCleaner()
    timeouts = timeouts or StageTimeouts()

    _record_disk_space(tmp_root)

    pipelines = [
        _run_job(
            kind, database, source, remote,
            dumper=dumper, archiver=archiver, storage=storage, cleaner=cleaner,
            timeouts=timeouts, callback=callback, tmp_root=tmp_root,
        )
        for database in databases
    ]
    return list(await asyncio.gather(*pipelines))


async def sync_mongo(source: SourceConfig, remote: RemoteConfig, callback: Optional[JobCallback] = None, **kwargs):
    """mongodump each configured database, gzip it and upload it to S3."""
    return await run_backup(source, remote, DatabaseKind.MONGODB, callback=callback, **kwargs)


async def sync_mysql(source: SourceConfig, remote: RemoteConfig, callback: Optional[JobCallback] = None, **kwargs):
    """mysqldump each configured database, gzip it and upload it to S3."""
    return await run_backup(source, remote, DatabaseKind.MYSQL, callback=callback, **kwargs)


async def run_configured_job(job: JobConfig, remote: RemoteConfig) -> List[PipelineOutcome]:
    logger.info(f"Starting backup run for job '{job.id}' ({job.kind}, {len(job.source.dbs)} database(s))")
    outcomes = await run_backup(job.source, remote, job.kind, timeouts=job.timeouts)
    failed = [o.database for o in outcomes if not o.succeeded]
    if failed:
        logger.error(f"Backup run for job '{job.id}' finished with failures: {failed}")
    else:
        logger.info(f"Backup run for job '{job.id}' finished successfully.")
    return outcomes


async def _run_job(
    kind: DatabaseKind,
    database: str,
    source: SourceConfig,
    remote: RemoteConfig,
    dumper: DumpProvider,
    archiver: Archiver,
    storage: StorageProvider,
    cleaner: FilesystemCleaner,
    timeouts: StageTimeouts,
    callback: Optional[JobCallback],
    tmp_root: str,
) -> PipelineOutcome:
    start_time = time.monotonic()

    if not _is_acceptable_identifier(kind, database):
        return await _reject(kind, database, callback)

    job = BackupJob.create(kind, database, source, tmp_root)
    if not job.is_contained():
        return await _reject(kind, database, callback)
    error: Optional[BaseException] = None
    size_bytes = None

    try:
        await _cleanup(job, cleaner)
        await dumper.dump(source, database, job.tmp_dir, timeout=timeouts.dump)
        await archiver.compress(job.tmp_dir, database, job.archive_name, timeout=timeouts.archive)
        size_bytes = await _archive_size(job)
        await _upload(job, remote, storage, timeouts.upload)
    except BackupError as e:
        error = e
    except Exception as e:
        logger.error(f"Unexpected error while backing up '{database}': {e}", exc_info=True)
        error = e
    finally:
        await _cleanup(job, cleaner)

    if error is not None:
        log(error, "error")
    else:
        log(f"Successfully backed up {database}")

    outcome = PipelineOutcome(
        database=database,
        error=error,
        duration=time.monotonic() - start_time,
        archive_name=job.archive_name,
    )
    _record_outcome(kind, outcome, size_bytes)
    await _notify(callback, error)
    return outcome


async def _reject(kind: DatabaseKind, database: str, callback: Optional[JobCallback]) -> PipelineOutcome:
    error = RejectedIdentifier(database)
    log(error, "error")
    outcome = PipelineOutcome(database=database, error=error)
    _record_outcome(kind, outcome, None)
    await _notify(callback, error)
    return outcome


def _is_acceptable_identifier(kind: DatabaseKind, database: str) -> bool:
    # every kind uses the identifier as a path under the temp directory
    if not is_contained_identifier(database):
        return False
    return kind is not DatabaseKind.MYSQL or is_safe_identifier(database)


async def _upload(job: BackupJob, remote: RemoteConfig, storage: StorageProvider, timeout: Optional[float]):
    key = object_key(remote.destination, job.archive_name)
    try:
        status = await asyncio.wait_for(
            asyncio.to_thread(storage.save, job.archive_path, key, remote.encrypt),
            timeout,
        )
    except asyncio.TimeoutError as e:
        raise UploadFailed(timed_out=True) from e
    except (BotoCoreError, OSError) as e:
        raise UploadFailed(transport_error=e) from e

    if status != 200:
        raise UploadFailed(status_code=status)
    log("Successfully uploaded to s3")


async def _cleanup(job: BackupJob, cleaner: FilesystemCleaner):
    for target in (job.backup_dir, job.archive_path):
        if not job.contains(target):
            log(f"Refusing to remove {target}: outside {job.tmp_dir}", "error")
            continue
        try:
            await cleaner.remove(target)
        except CleanupFailed as e:
            log(e, "error")
            CLEANUP_FAILURES_TOTAL.labels(database_name=job.database, kind=job.kind.value).inc()


async def _archive_size(job: BackupJob) -> Optional[int]:
    try:
        return await asyncio.to_thread(os.path.getsize, job.archive_path)
    except OSError:
        return None


async def _notify(callback: Optional[JobCallback], error: Optional[BaseException]):
    if callback is None:
        return
    try:
        result = callback(error)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.error(f"Backup callback raised: {e}", exc_info=True)


def _record_disk_space(path: str):
    try:
        free = psutil.disk_usage(path).free
    except OSError as e:
        logger.warning(f"Could not read free disk space for {path}: {e}")
        return
    DISK_SPACE_AVAILABLE_BYTES.set(free)
    logger.debug(f"{free} bytes free in {path}")


def _record_outcome(kind: DatabaseKind, outcome: PipelineOutcome, size_bytes: Optional[int]):
    labels = {"database_name": outcome.database, "kind": kind.value}
    status = "completed" if outcome.succeeded else "failed"

    BACKUPS_TOTAL.labels(status=status, **labels).inc()
    BACKUP_DURATION_SECONDS.labels(**labels).observe(outcome.duration)
    BACKUP_LAST_STATUS.labels(**labels).set(1 if outcome.succeeded else 0)

    if outcome.succeeded:
        if size_bytes is not None:
            BACKUP_SIZE_BYTES.labels(**labels).set(size_bytes)
        BACKUP_LAST_SUCCESS_TIMESTAMP_SECONDS.labels(**labels).set(datetime.now().timestamp())
