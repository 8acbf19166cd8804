import asyncio
import os
import shutil

from .errors import CleanupFailed
from .logger import log


def _remove_path(target: str) -> bool:
    if not os.path.lexists(target):
        return False
    if os.path.isdir(target) and not os.path.islink(target):
        shutil.rmtree(target)
    else:
        os.remove(target)
    return True


class FilesystemCleaner:
    """Recursive, forced removal of temporary backup artifacts."""

    async def remove(self, target: str) -> None:
        """
        Removes a file or directory tree. A missing target is not an error.

        Raises CleanupFailed if the target exists but cannot be removed.
        """
        exists = await asyncio.to_thread(os.path.lexists, target)
        if not exists:
            return
        log(f"Removing {target}", "info")
        try:
            await asyncio.to_thread(_remove_path, target)
        except OSError as e:
            raise CleanupFailed(target, e) from e
