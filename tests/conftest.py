import os

import pytest

from remote_backup.cleaner import FilesystemCleaner
from remote_backup.schemas import RemoteConfig, SourceConfig


class FakeDumper:
    def __init__(self, error=None, hook=None):
        self.calls = []
        self.error = error
        self.hook = hook

    async def dump(self, source, database, directory, timeout=None):
        self.calls.append((database, directory))
        if self.hook is not None:
            await self.hook(database)
        if isinstance(self.error, dict):
            error = self.error.get(database)
        else:
            error = self.error
        if error is not None:
            raise error
        os.makedirs(os.path.join(directory, database), exist_ok=True)


class FakeArchiver:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    async def compress(self, directory, input_name, output_name, timeout=None):
        self.calls.append((directory, input_name, output_name))
        if self.error is not None:
            raise self.error
        with open(os.path.join(directory, output_name), "wb") as f:
            f.write(b"archive")


class FakeStorage:
    def __init__(self, status=200, error=None, delay=None):
        self.calls = []
        self.status = status
        self.error = error
        self.delay = delay

    def save(self, source_path, destination_path, encrypt=False):
        self.calls.append((source_path, destination_path, encrypt))
        if self.delay:
            import time
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.status


class RecordingCleaner(FilesystemCleaner):
    def __init__(self):
        self.calls = []

    async def remove(self, target):
        self.calls.append(target)
        await super().remove(target)


@pytest.fixture
def source_config():
    return SourceConfig(host="db.local", port=27017, username="backup", password="s3cret", dbs=["orders"])


@pytest.fixture
def remote_config():
    return RemoteConfig(key="AKIA", secret="secret", bucket="backups", destination="/nightly", encrypt=True)


@pytest.fixture
def cleaner():
    return RecordingCleaner()
