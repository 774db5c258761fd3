# core/pack_writer.py

"""
Creating PACK archives.

The table has to sit right after the header, but entry sizes are only
known once each entry has been compressed. The writer therefore reserves
the largest table the declared entry count can need, streams payloads
into the data section behind it, and fills in table and header on commit:

    open    -> reserve table region, seek to data start (nothing written)
    add_*   -> compress, encrypt, append payload, remember FileInfo
    commit  -> write table after the header, then the header itself

Every operation turns the current WriterSession snapshot into a new one.
"""
import sys
import time
from pathlib import Path
from typing import Optional, Union

from core import cipher, compression
from core.data_structures import (
    FileInfo, PackEntry, PackHeader, WriterConfig, WriterSession, WriterState
)
from core.errors import (
    CommitOverflow, DuplicateEntry, IOFailure, OpenFailure, WriterStateError
)
from core.pack_format import (
    HEADER_SIZE, MAGIC, REVISION, U32_MAX, encode_file_info, encode_header,
    encode_mountpoint, encode_name, encode_table_entry, reserved_table_size,
    unix_to_filetime
)


class PackWriter:
    """A single write session producing one archive."""

    def __init__(self, config: WriterConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        self._file = None
        self.table_region_size = 0
        self.created = 0
        self.header: Optional[PackHeader] = None
        self.session = WriterSession(WriterState.OPENING, 0)

    @classmethod
    def open(cls, config: WriterConfig, verbose: bool = False) -> 'PackWriter':
        writer = cls(config, verbose=verbose)
        writer._open()
        return writer

    def _log(self, message: str):
        if self.verbose:
            print(f"[WRITER] {message}", file=sys.stderr)

    @property
    def state(self) -> WriterState:
        return self.session.state

    @property
    def data_start(self) -> int:
        return HEADER_SIZE + self.table_region_size

    def _require(self, state: WriterState, action: str):
        if self.session.state is not state:
            raise WriterStateError(f"Cannot {action} while {self.session.state.value}")

    # --- Phase 1 ---

    def _open(self):
        self._require(WriterState.OPENING, "open")
        config = self.config
        encode_mountpoint(config.mountpoint)
        if not 0 <= config.version <= U32_MAX:
            raise ValueError(f"Version {config.version} does not fit in 32 bits")
        if config.entry_count < 0:
            raise ValueError(f"Invalid entry count: {config.entry_count}")

        self.table_region_size = reserved_table_size(config.entry_count)
        self.created = unix_to_filetime(time.time(), config.utc_offset)
        path = Path(config.path)
        try:
            handle = path.open('wb')
            handle.seek(self.data_start)
        except OSError as e:
            raise OpenFailure(f"Cannot create {path}: {e}") from e

        self._file = handle
        self.session = WriterSession(WriterState.STREAMING, self.data_start)
        self._log(f"Created {path}: {config.entry_count} entries, "
                  f"{self.table_region_size} bytes reserved for the table")

    # --- Phase 2 ---

    def add_file(self, path: Union[str, Path], name: Optional[str] = None) -> PackEntry:
        """Add the file at `path`, stored under `name` (defaults to the path string)."""
        name = str(path) if name is None else name
        self._check_new_entry(name)
        try:
            data = Path(path).read_bytes()
            mtime = Path(path).stat().st_mtime
        except OSError as e:
            raise IOFailure(f"Cannot read {path}: {e}") from e
        return self._append(name, data, mtime)

    def add_bytes(self, name: str, data: bytes, mtime: Optional[float] = None) -> PackEntry:
        """Add an in-memory payload as the next entry."""
        self._check_new_entry(name)
        return self._append(name, data, mtime)

    def _append(self, name: str, data: bytes, mtime: Optional[float]) -> PackEntry:
        session = self.session
        if len(data) > U32_MAX:
            raise IOFailure(f"{name} is {len(data)} bytes, entries are limited to {U32_MAX}")
        packed = cipher.encrypt(
            compression.compress(data, self.config.compression_level), cipher.WRITER_SEED
        )
        offset = session.cursor - self.data_start
        if offset + len(packed) > U32_MAX:
            raise IOFailure(f"Cannot add {name}: data section would exceed {U32_MAX} bytes")

        modified = self.created if mtime is None else unix_to_filetime(mtime, self.config.utc_offset)
        info = FileInfo(
            seed=cipher.WRITER_SEED,
            offset=offset,
            size_compressed=len(packed),
            size_orig=len(data),
            is_compressed=1,
            time_created=self.created,
            time_created2=self.created,
            time_accessed=self.created,
            time_modified=modified,
            time_written=self.created,
        )
        try:
            encode_file_info(info)
        except ValueError as e:
            raise IOFailure(f"Cannot add {name}: {e}") from e

        try:
            written = self._file.write(packed)
            if written is not None and written != len(packed):
                raise OSError(f"short write: {written} of {len(packed)} bytes")
        except OSError as e:
            self._file.seek(session.cursor)
            raise IOFailure(f"Cannot write {name}: {e}") from e

        entry = PackEntry(name, info)
        self.session = session._replace(
            cursor=session.cursor + len(packed),
            entries=session.entries + (entry,),
            names=session.names | {name},
        )
        self._log(f"Added {name}: {len(data)} -> {len(packed)} bytes at +{info.offset}")
        return entry

    def _check_new_entry(self, name: str):
        self._require(WriterState.STREAMING, "add entries")
        session = self.session
        if len(session.entries) >= self.config.entry_count:
            raise WriterStateError(f"Writer was opened for {self.config.entry_count} entries")
        if name in session.names:
            raise DuplicateEntry(f"Duplicate entry: {name}")
        encode_name(name)

    # --- Phase 3 ---

    def commit(self) -> PackHeader:
        """Write table and header, close the file and return the header."""
        if self.session.state is WriterState.COMMITTED:
            return self.header
        self._require(WriterState.STREAMING, "commit")
        session = self.session

        table = b''.join(encode_table_entry(e.name, e.info) for e in session.entries)
        if len(table) > self.table_region_size:
            self.discard()
            raise CommitOverflow(
                f"Table needs {len(table)} bytes but only {self.table_region_size} were reserved"
            )
        if len(session.entries) != self.config.entry_count:
            self._log(f"Committing {len(session.entries)} of {self.config.entry_count} declared entries")

        header = PackHeader(
            magic=MAGIC,
            revision=REVISION,
            version=self.config.version,
            file_count0=len(session.entries),
            time1=self.created,
            time2=self.created,
            mountpoint=self.config.mountpoint,
            file_count=len(session.entries),
            table_region_size=self.table_region_size,
            padding_size=self.table_region_size - len(table),
            data_section_size=session.cursor - self.data_start,
        )
        try:
            raw_header = encode_header(header)
        except ValueError as e:
            self.discard()
            raise IOFailure(f"Cannot finalize {self.config.path}: {e}") from e

        try:
            self._file.seek(HEADER_SIZE)
            self._file.write(table)
            self._file.seek(0)
            self._file.write(raw_header)
            self._file.close()
        except OSError as e:
            self.discard()
            raise IOFailure(f"Cannot finalize {self.config.path}: {e}") from e

        self.header = header
        self._file = None
        self.session = session._replace(state=WriterState.COMMITTED)
        self._log(f"Committed {self.config.path}: {header.file_count} entries, "
                  f"{header.data_section_size} data bytes")
        return header

    def discard(self):
        """Abandon the session. The output file is left without a valid header."""
        if self.session.state in (WriterState.COMMITTED, WriterState.DISCARDED):
            return
        if self._file is not None:
            try:
                self._file.close()
            except OSError as e:
                self._log(f"Error closing {self.config.path}: {e}")
            self._file = None
        self.session = self.session._replace(state=WriterState.DISCARDED)
        self._log(f"Discarded {self.config.path}")

    def __enter__(self) -> 'PackWriter':
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.commit()
        else:
            self.discard()

    def __del__(self):
        self.discard()
