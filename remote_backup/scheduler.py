from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
import os
from typing import Dict

from .backup_manager import run_configured_job
from .schemas import AppConfig
from .logger import get_logger

logger = get_logger(__name__)

# This will be started in main.py
scheduler = AsyncIOScheduler()

JOB_PREFIX = "backup_"


def schedule_backup_jobs(config: AppConfig, target: AsyncIOScheduler = None) -> Dict[str, str]:
    """
    Adds one cron job per configured backup job with a schedule and removes
    jobs that are no longer scheduled. Returns job id -> schedule.
    """
    target = target or scheduler
    scheduled = {}

    if config.storage is None:
        logger.warning("No storage configured, backup jobs will not be scheduled.")
    else:
        for job in config.jobs:
            if not job.schedule:
                continue
            job_id = f"{JOB_PREFIX}{job.id}"
            # replace_existing is not applied to jobs added before start()
            if target.get_job(job_id):
                target.remove_job(job_id)
            target.add_job(
                run_configured_job,
                trigger=CronTrigger.from_crontab(job.schedule, timezone=os.getenv("TZ", "UTC")),
                args=[job, config.storage],
                id=job_id,
                name=f"Backup for {job.id}",
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )
            scheduled[job.id] = job.schedule
            logger.info(f"Scheduled backup for '{job.id}' with schedule: '{job.schedule}'")

    for existing in target.get_jobs():
        if existing.id.startswith(JOB_PREFIX) and existing.id[len(JOB_PREFIX):] not in scheduled:
            target.remove_job(existing.id)
            logger.info(f"Removed backup schedule for '{existing.id[len(JOB_PREFIX):]}'.")

    return scheduled
