"""Utility modules."""
from excel_quiz.utils.json_utils import (
    compact_dump,
    json_dump,
    json_load,
    load_json_text,
    read_json_file,
    write_json_file,
)
from excel_quiz.utils.time_utils import (
    ensure_utc,
    format_timestamp,
    parse_iso_timestamp,
    utc_now,
)
from excel_quiz.utils.validation import normalize_email, require_text

__all__ = [
    "compact_dump",
    "json_dump",
    "json_load",
    "load_json_text",
    "read_json_file",
    "write_json_file",
    "ensure_utc",
    "format_timestamp",
    "parse_iso_timestamp",
    "utc_now",
    "normalize_email",
    "require_text",
]
