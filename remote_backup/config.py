import yaml
import os
from typing import Optional
from pydantic import ValidationError
from .schemas import AppConfig, JobConfig, RemoteConfig, SourceConfig
from .logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"

SOURCE_FIELDS = {"host", "port", "username", "password", "dbs"}
JOB_DEFAULTS = {"schedule", "timeouts"}


def get_config_path() -> str:
    return os.getenv("BACKUP_CONFIG", DEFAULT_CONFIG_PATH)


def _resolve_env(config: dict, field: str, var_field: str):
    """Fills config[field] from the environment variable named by config[var_field]."""
    env_name = config.pop(var_field, None)
    if field not in config and env_name:
        value = os.getenv(env_name)
        if value is None:
            logger.warning(f"Environment variable '{env_name}' for '{field}' is not set.")
        config[field] = value


def load_config(path: Optional[str] = None) -> AppConfig:
    config_path = path or get_config_path()
    if not os.path.exists(config_path):
        logger.info(f"No configuration found at {config_path}, no backup jobs configured.")
        return AppConfig()

    with open(config_path, "r") as f:
        try:
            config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Error parsing {config_path}: {e}")
            raise

    return parse_config(config_data)


def parse_config(config_data: dict) -> AppConfig:
    global_config = config_data.get("global", {}) or {}
    job_configs = config_data.get("jobs", []) or []
    logger.debug(f"Found {len(job_configs)} backup job configurations.")

    # Pre-validate for duplicate IDs
    config_ids = [conf.get('id') for conf in job_configs if conf.get('id')]
    if len(config_ids) > len(set(config_ids)):
        seen = set()
        duplicates = {x for x in config_ids if x in seen or seen.add(x)}
        error_msg = f"Duplicate job IDs found in configuration: {sorted(duplicates)}."
        logger.error(error_msg)
        raise ValueError(error_msg)

    storage = None
    storage_config = dict(config_data.get("storage") or {})
    if storage_config:
        _resolve_env(storage_config, "key", "key_var")
        _resolve_env(storage_config, "secret", "secret_var")
        try:
            storage = RemoteConfig(**storage_config)
        except ValidationError as e:
            logger.error(f"Invalid storage configuration: {e}")
            raise

    jobs = []
    for config in job_configs:
        config = dict(config)
        for key, value in global_config.items():
            if key in JOB_DEFAULTS and key not in config:
                logger.debug(f"Applying global default '{key}={value}' to job '{config.get('id')}'.")
                config[key] = value

        config_id = config.get('id')
        if not config_id:
            logger.warning(
                f"Skipping a backup job (kind: {config.get('kind', 'N/A')}) "
                f"because it is missing the required 'id' field."
            )
            continue

        _resolve_env(config, "username", "username_var")
        _resolve_env(config, "password", "password_var")

        source = {key: config.pop(key) for key in list(config) if key in SOURCE_FIELDS}
        if not source.get("dbs"):
            source.pop("dbs", None)
        elif isinstance(source["dbs"], str):
            source["dbs"] = [source["dbs"]]

        try:
            jobs.append(JobConfig(source=SourceConfig(**source), **config))
        except ValidationError as e:
            logger.error(f"Invalid configuration for job '{config_id}': {e}")
            raise

    logger.info(f"Loaded {len(jobs)} backup job(s) from configuration.")
    return AppConfig(storage=storage, jobs=jobs)
