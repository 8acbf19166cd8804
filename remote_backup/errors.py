from typing import Optional


class BackupError(Exception):
    """Base class for failures reported as a backup job outcome."""


class DumpFailed(BackupError):
    def __init__(self, tool: str, exit_code: Optional[int], summary: str = "", timed_out: bool = False):
        self.tool = tool
        self.exit_code = exit_code
        self.summary = summary
        self.timed_out = timed_out
        if timed_out:
            message = f"{tool} did not finish before its deadline"
        else:
            message = f"{tool} exited with code {exit_code}"
        if summary:
            message = f"{message}: {summary}"
        super().__init__(message)


class ArchiveFailed(BackupError):
    def __init__(self, exit_code: Optional[int], timed_out: bool = False):
        self.exit_code = exit_code
        self.timed_out = timed_out
        if timed_out:
            super().__init__("tar did not finish before its deadline")
        else:
            super().__init__(f"tar exited with code {exit_code}")


class UploadFailed(BackupError):
    def __init__(
        self,
        status_code: Optional[int] = None,
        transport_error: Optional[BaseException] = None,
        timed_out: bool = False,
    ):
        self.status_code = status_code
        self.transport_error = transport_error
        self.timed_out = timed_out
        if timed_out:
            message = "Upload to S3 did not finish before its deadline"
        elif transport_error is not None:
            message = f"Upload to S3 failed: {transport_error}"
        else:
            message = f"Expected a 200 response from S3, got {status_code}"
        super().__init__(message)


class RejectedIdentifier(BackupError):
    def __init__(self, database: str):
        self.database = database
        super().__init__(f"Refusing to back up database with unsafe name {database!r}")


class CleanupFailed(BackupError):
    """Raised by the cleaner; logged by the orchestrator, never a job outcome."""

    def __init__(self, path: str, reason: BaseException):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to remove {path}: {reason}")
