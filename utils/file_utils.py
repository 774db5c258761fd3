# utils/file_utils.py

"""File operation utilities."""
import re
from datetime import datetime as dt
from datetime import timedelta, timezone
from functools import lru_cache
from pathlib import PurePosixPath
from typing import Iterable, Union

from core.pack_format import DEFAULT_UTC_OFFSET, filetime_to_unix


def format_size(size_bytes: int) -> str:
    """Formats bytes into a human-readable string (KB, MB, GB)."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    size = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"


def filetime_to_datetime(filetime: int, utc_offset: int = DEFAULT_UTC_OFFSET) -> dt:
    """Convert an archive FILETIME to an aware datetime in the archive's zone."""
    zone = timezone(timedelta(seconds=utc_offset))
    return dt.fromtimestamp(filetime_to_unix(filetime, utc_offset), tz=zone)


def format_filetime(filetime: int, utc_offset: int = DEFAULT_UTC_OFFSET) -> str:
    """Readable timestamp, or the raw FILETIME when it is outside the datetime range."""
    try:
        return filetime_to_datetime(filetime, utc_offset).strftime('%Y-%m-%d %H:%M:%S UTC%z')
    except (ValueError, OverflowError, OSError):
        return str(filetime)


def filetime_to_iso(filetime: int, utc_offset: int = DEFAULT_UTC_OFFSET) -> Union[str, int]:
    try:
        return filetime_to_datetime(filetime, utc_offset).isoformat()
    except (ValueError, OverflowError, OSError):
        return filetime


@lru_cache(maxsize=256)
def _compile_wildcard(mask: str, ignore_case: bool):
    # only '*' and '?' are special
    parts = []
    for char in mask:
        if char == '*':
            parts.append('.*')
        elif char == '?':
            parts.append('.')
        else:
            parts.append(re.escape(char))
    flags = re.DOTALL | (re.IGNORECASE if ignore_case else 0)
    return re.compile(''.join(parts), flags)


def wildcard_match(mask: str, name: str, ignore_case: bool = True) -> bool:
    """Match `name` against a mask where '*' is any run and '?' any one character."""
    return _compile_wildcard(mask, ignore_case).fullmatch(name) is not None


def match_any(patterns: Iterable[str], name: str) -> bool:
    """True when no patterns are given or any of them matches."""
    patterns = list(patterns)
    if not patterns:
        return True
    return any(wildcard_match(pattern, name) for pattern in patterns)


def is_safe_entry_name(name: str) -> bool:
    """Entry names must stay inside the extraction directory."""
    path = PurePosixPath(name)
    if not name or path.is_absolute() or re.match(r'^[A-Za-z]:', name):
        return False
    return '..' not in path.parts
