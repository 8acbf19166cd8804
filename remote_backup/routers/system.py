import yaml
from fastapi import APIRouter, HTTPException, Request, status

from ..config import load_config
from ..scheduler import schedule_backup_jobs
from ..schemas import ReloadInfo

router = APIRouter()


@router.post("/reload-config", response_model=ReloadInfo)
def reload_config(request: Request):
    """Reload backup jobs from the configuration file and update the scheduler."""
    try:
        settings = load_config()
    except (ValueError, yaml.YAMLError) as e:
        # pydantic's ValidationError is a ValueError as well
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    request.app.state.settings = settings
    scheduled = schedule_backup_jobs(settings)
    return ReloadInfo(jobs=len(settings.jobs), scheduled=scheduled)
