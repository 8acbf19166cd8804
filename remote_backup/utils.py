import os
import re
import time
from datetime import datetime
from typing import Optional

ALL_DATABASES = "all"

# Database names that are safe to hand to a dump tool as a single argument.
_SAFE_IDENTIFIER = re.compile(r"^[A-Za-z0-9_$][A-Za-z0-9_$\-]*$")


def get_archive_name(database: str, now: Optional[datetime] = None) -> str:
    """
    Returns the archive name in <database>_YYYY_M_D_<epoch ms>.tar.gz format.

    The calendar part uses local time with a 1-based month and no zero
    padding; the epoch milliseconds keep names distinct across runs.
    """
    if now is None:
        epoch_ms = time.time_ns() // 1_000_000
        now = datetime.fromtimestamp(epoch_ms / 1000)
    else:
        epoch_ms = int(now.replace(microsecond=0).timestamp()) * 1000 + now.microsecond // 1000

    parts = [database, now.year, now.month, now.day, epoch_ms]
    return "_".join(str(part) for part in parts) + ".tar.gz"


def is_safe_identifier(database: str) -> bool:
    """
    Checks a database identifier before it is passed to a dump tool.
    - Rejects empty names.
    - Rejects anything containing a semicolon.
    - Allows only letters, digits, underscores, dollar signs and hyphens.
    - Rejects a leading hyphen, which a dump tool would read as an option.
    """
    if not database or ";" in database:
        return False
    return bool(_SAFE_IDENTIFIER.match(database))


def is_contained_identifier(database: str) -> bool:
    """
    Checks that a database identifier names a single entry inside the temp
    directory: no path separators, and not empty, "." or "..".
    """
    if database in ("", ".", ".."):
        return False
    separators = {os.sep, "/"} | ({os.altsep} if os.altsep else set())
    return not any(sep in database for sep in separators)
