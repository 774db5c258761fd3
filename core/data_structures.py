"""Core data structures for the PACK archive tool."""
from enum import Enum
from pathlib import Path
from typing import FrozenSet, List, NamedTuple, Tuple


class PackHeader(NamedTuple):
    """The fixed-size header found at offset 0 of every archive."""
    magic: bytes
    revision: bytes
    version: int
    file_count0: int
    time1: int
    time2: int
    mountpoint: str
    file_count: int
    table_region_size: int
    padding_size: int
    data_section_size: int


class FileInfo(NamedTuple):
    """Per-entry record stored right after the entry's name in the table."""
    seed: int = 0
    reserved: int = 0
    offset: int = 0          # relative to the start of the data section
    size_compressed: int = 0
    size_orig: int = 0
    is_compressed: int = 0
    time_created: int = 0
    time_created2: int = 0
    time_accessed: int = 0
    time_modified: int = 0
    time_written: int = 0


class PackEntry(NamedTuple):
    """A table entry: the '/'-separated name and its FileInfo."""
    name: str
    info: FileInfo


class PackSummary(NamedTuple):
    """Header fields shown to users when listing an archive."""
    path: Path
    version: int
    created: int             # FILETIME
    mountpoint: str
    file_count: int
    data_section_size: int


class WriterConfig(NamedTuple):
    """Everything the writer needs to know before the first entry is added."""
    path: Path
    version: int
    entry_count: int
    mountpoint: str = "data\\"
    utc_offset: int = 32400
    compression_level: int = 9


class WriterState(Enum):
    OPENING = "opening"
    STREAMING = "streaming"
    COMMITTED = "committed"
    DISCARDED = "discarded"


class WriterSession(NamedTuple):
    """Immutable snapshot of a writer between two operations."""
    state: WriterState
    cursor: int
    entries: Tuple[PackEntry, ...] = ()
    names: FrozenSet[str] = frozenset()


class ExtractReport(NamedTuple):
    """Outcome of a bulk extraction."""
    extracted: List[str]
    failed: List[Tuple[str, str]]
