# remote_backup/error_parser.py

def parse_dump_error(stderr: str, kind: str) -> str:
    """
    Parses the stderr output from a dump command and returns a human-readable summary.
    """
    stderr = stderr.lower()

    if kind == "mysql":
        if "access denied" in stderr:
            return "Authentication error: the username or password was rejected."
        if "unknown database" in stderr:
            return "Database error: the requested database does not exist."
        if "can't connect" in stderr or "connection refused" in stderr:
            return "Connection error: could not reach the MySQL server. Check the host and port."
        if "unknown mysql server host" in stderr:
            return "Connection error: the server host name could not be resolved."
        if "lost connection" in stderr:
            return "Connection error: the connection to the server was lost during the dump."
        if "errcode: 28" in stderr or "no space left" in stderr:
            return "Disk error: the temporary directory ran out of space."

    elif kind == "mongodb":
        if "authentication failed" in stderr:
            return "Authentication error: the username or password was rejected."
        if "could not connect to server" in stderr or "server selection error" in stderr:
            return "Connection error: could not reach the MongoDB server. Check the host and port."
        if "failed to connect" in stderr:
            return "Connection error: failed to connect to the server. Check the network configuration."
        if "no space left" in stderr:
            return "Disk error: the temporary directory ran out of space."

    if "command not found" in stderr or "no such file or directory" in stderr:
        return "Tool error: the dump tool is not installed or not on PATH."

    return "Unknown error: the dump failed for an unidentified reason. Check the full log for details."
