from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks, status
from typing import List

from ..schemas import AppConfig, BackupRunInfo, JobInfo
from .. import backup_manager
from ..dependencies import get_settings


router = APIRouter()


@router.get("/jobs", response_model=List[JobInfo])
def list_jobs(settings: AppConfig = Depends(get_settings)):
    return [
        JobInfo(id=job.id, kind=job.kind, host=job.source.host, dbs=job.source.dbs, schedule=job.schedule)
        for job in settings.jobs
    ]


@router.post("/{job_id}", response_model=BackupRunInfo, status_code=status.HTTP_202_ACCEPTED)
def run_job(job_id: str, background_tasks: BackgroundTasks, settings: AppConfig = Depends(get_settings)):
    """
    Start an on-demand backup of a configured job. The backup runs after the
    response is sent; its outcome is reported through logs and metrics.
    """
    job = settings.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Backup job not found")
    if settings.storage is None:
        raise HTTPException(status_code=409, detail="No storage configured")

    background_tasks.add_task(backup_manager.run_configured_job, job, settings.storage)
    return BackupRunInfo(job_id=job.id, status="started")
