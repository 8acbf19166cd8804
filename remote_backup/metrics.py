from prometheus_client import Counter, Histogram, Gauge

BACKUPS_TOTAL = Counter(
    "backups_total",
    "Total number of backup jobs.",
    ["database_name", "kind", "status"]
)

BACKUP_DURATION_SECONDS = Histogram(
    "backup_duration_seconds",
    "Duration of backup jobs in seconds.",
    ["database_name", "kind"]
)

BACKUP_SIZE_BYTES = Gauge(
    "backup_size_bytes",
    "Size of the last uploaded archive in bytes.",
    ["database_name", "kind"]
)

DISK_SPACE_AVAILABLE_BYTES = Gauge(
    "disk_space_available_bytes",
    "Available disk space in the temporary directory in bytes."
)

CLEANUP_FAILURES_TOTAL = Counter(
    "cleanup_failures_total",
    "Total number of temporary artifacts that could not be removed.",
    ["database_name", "kind"]
)

BACKUP_LAST_STATUS = Gauge(
    "backup_last_status",
    "Status of the last backup (1 for success, 0 for failure).",
    ["database_name", "kind"]
)

BACKUP_LAST_SUCCESS_TIMESTAMP_SECONDS = Gauge(
    "backup_last_success_timestamp_seconds",
    "Timestamp of the last successful backup.",
    ["database_name", "kind"]
)
