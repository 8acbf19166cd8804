import pytest
import yaml
from pydantic import ValidationError

from remote_backup.config import load_config, parse_config


def _write(tmp_path, data):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)


def test_missing_file_gives_empty_config(tmp_path):
    config = load_config(str(tmp_path / "absent.yaml"))

    assert config.jobs == []
    assert config.storage is None


def test_loads_jobs_with_defaults_and_env(tmp_path, monkeypatch):
    monkeypatch.setenv("MONGO_USER", "backup")
    monkeypatch.setenv("MONGO_PASSWORD", "s3cret")
    monkeypatch.setenv("S3_SECRET", "aws-secret")
    path = _write(tmp_path, {
        "global": {"schedule": "0 3 * * *", "timeouts": {"dump": 7200}},
        "storage": {"bucket": "backups", "key": "AKIA", "secret_var": "S3_SECRET", "encrypt": True},
        "jobs": [
            {"id": "mongo", "kind": "mongodb", "host": "mongo.local", "port": 27017,
             "username_var": "MONGO_USER", "password_var": "MONGO_PASSWORD", "dbs": ["orders", "users"]},
            {"id": "mysql", "kind": "mysql", "host": "mysql.local", "schedule": "30 2 * * *", "dbs": "shop"},
        ],
    })

    config = load_config(path)

    assert config.storage.secret == "aws-secret"
    assert config.storage.destination == "/"
    assert config.storage.encrypt is True

    mongo, mysql = config.jobs
    assert mongo.schedule == "0 3 * * *"
    assert mongo.timeouts.dump == 7200
    assert mongo.timeouts.upload == 3600
    assert mongo.source.username == "backup"
    assert mongo.source.password == "s3cret"
    assert mongo.source.dbs == ["orders", "users"]

    assert mysql.schedule == "30 2 * * *"
    assert mysql.source.dbs == ["shop"]
    assert mysql.source.port is None


def test_dbs_default_to_all():
    config = parse_config({"jobs": [{"id": "mongo", "kind": "mongodb", "dbs": None}]})

    assert config.jobs[0].source.dbs == ["all"]


def test_job_without_id_is_skipped():
    config = parse_config({"jobs": [{"kind": "mongodb"}, {"id": "ok", "kind": "mysql"}]})

    assert [job.id for job in config.jobs] == ["ok"]


def test_duplicate_ids_rejected():
    with pytest.raises(ValueError, match="Duplicate job IDs"):
        parse_config({"jobs": [{"id": "a", "kind": "mongodb"}, {"id": "a", "kind": "mysql"}]})


def test_unknown_kind_rejected():
    with pytest.raises(ValidationError):
        parse_config({"jobs": [{"id": "pg", "kind": "postgres"}]})


def test_storage_requires_bucket():
    with pytest.raises(ValidationError):
        parse_config({"storage": {"key": "AKIA"}})


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("jobs: [unclosed")

    with pytest.raises(yaml.YAMLError):
        load_config(str(path))


def test_connection_config_is_immutable():
    config = parse_config({"storage": {"bucket": "backups"}, "jobs": [{"id": "a", "kind": "mongodb"}]})

    with pytest.raises(ValidationError):
        config.storage.bucket = "other"
    with pytest.raises(ValidationError):
        config.jobs[0].source.host = "elsewhere"
