from .ids import new_file_id, new_folder_id, new_uuid
from .time import normalize_dt, now_utc, parse_rfc3339, to_rfc3339

__all__ = [
    "new_uuid",
    "new_folder_id",
    "new_file_id",
    "now_utc",
    "parse_rfc3339",
    "to_rfc3339",
    "normalize_dt",
]
