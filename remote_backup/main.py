import yaml
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from .config import load_config
from .scheduler import scheduler, schedule_backup_jobs
from .routers import backups, system
from .schemas import AppConfig
from .logger import setup_logging, get_logger

setup_logging()
logger = get_logger(__name__)

app = FastAPI(title="remote_backup")
app.state.settings = AppConfig()
Instrumentator().instrument(app).expose(app)


@app.on_event("startup")
async def startup_event():
    try:
        app.state.settings = load_config()
    except (ValueError, yaml.YAMLError) as e:
        # pydantic's ValidationError is a ValueError as well
        logger.error(f"Configuration rejected, starting without backup jobs: {e}")
        app.state.settings = AppConfig()

    scheduler.start()
    schedule_backup_jobs(app.state.settings)


@app.on_event("shutdown")
def shutdown_event():
    scheduler.shutdown()


app.include_router(backups.router, prefix="/backups", tags=["backups"])
app.include_router(system.router, prefix="/system", tags=["system"])
