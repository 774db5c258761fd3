# core/pack_reader.py

"""Reading PACK archives: eager table parse, on-demand entry decoding."""
import sys
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from core import cipher, compression
from core.data_structures import FileInfo, PackEntry, PackHeader, PackSummary
from core.errors import DecodeFailure, EntryNotFound, OpenFailure, UnsupportedEntry
from core.pack_format import HEADER_SIZE, data_section_offset, decode_header, read_table_entry


class PackReader:
    """
    An open PACK archive.

    The header and the whole file table are parsed when the archive is
    opened; entry payloads are read only when asked for. Not safe for use
    from several threads at once since every read seeks the shared handle.
    """

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.path: Optional[Path] = None
        self._file = None
        self._header: Optional[PackHeader] = None
        self.files: Dict[str, FileInfo] = {}

    @classmethod
    def open_path(cls, path: Union[str, Path], verbose: bool = False) -> 'PackReader':
        reader = cls(verbose=verbose)
        reader.open(path)
        return reader

    def _log(self, message: str):
        if self.verbose:
            print(f"[PACK] {message}", file=sys.stderr)

    def open(self, path: Union[str, Path]):
        """
        Open `path`, validate its header and load the file table.

        Any failure leaves the reader closed with an empty table.
        """
        self.close()
        path = Path(path)
        self._log(f"Opening pack file: {path}")
        try:
            handle = path.open('rb')
        except OSError as e:
            raise OpenFailure(f"Cannot open {path}: {e}") from e

        try:
            header = decode_header(handle.read(HEADER_SIZE))
            self._log(f"Version {header.version}, {header.file_count} file(s), "
                      f"mountpoint '{header.mountpoint}'")

            files: Dict[str, FileInfo] = {}
            for _ in range(header.file_count):
                name, info = read_table_entry(handle)
                # first occurrence of a repeated name wins
                files.setdefault(name, info)
        except BaseException:
            handle.close()
            raise

        self.path = path
        self._file = handle
        self._header = header
        self.files = files
        self._log(f"Loaded {len(files)} table entries")

    def close(self):
        """Release the handle and forget the table. Safe to call repeatedly."""
        if self._file is not None:
            self._file.close()
        self._file = None
        self._header = None
        self.files = {}

    @property
    def is_open(self) -> bool:
        return self._file is not None

    @property
    def header(self) -> PackHeader:
        self._require_open()
        return self._header

    def summary(self) -> PackSummary:
        header = self.header
        return PackSummary(
            path=self.path,
            version=header.version,
            created=header.time1,
            mountpoint=header.mountpoint,
            file_count=header.file_count,
            data_section_size=header.data_section_size,
        )

    def entries(self) -> List[PackEntry]:
        """All table entries sorted by name."""
        return [PackEntry(name, self.files[name]) for name in sorted(self.files)]

    def get_info(self, name: str) -> FileInfo:
        try:
            return self.files[name]
        except KeyError:
            raise EntryNotFound(name) from None

    def read(self, entry: Union[str, FileInfo, PackEntry]) -> bytes:
        """
        Decode one entry and return its original bytes.

        Failures are local to the entry; the archive stays open.
        """
        self._require_open()
        if isinstance(entry, PackEntry):
            info = entry.info
        elif isinstance(entry, FileInfo):
            info = entry
        else:
            info = self.get_info(entry)

        if info.size_compressed == 0:
            raise UnsupportedEntry("Entry has no compressed data")
        if not info.is_compressed:
            raise UnsupportedEntry("Uncompressed entries are not supported")

        self._file.seek(data_section_offset(self._header) + info.offset)
        payload = self._file.read(info.size_compressed)
        if len(payload) != info.size_compressed:
            raise DecodeFailure(f"Short read: {len(payload)} of {info.size_compressed} bytes")

        payload = cipher.decrypt(payload, info.seed)
        return compression.decompress(payload, info.size_orig)

    def _require_open(self):
        if self._file is None:
            raise OpenFailure("Pack file is not open")

    def __iter__(self) -> Iterator[PackEntry]:
        return iter(self.entries())

    def __len__(self) -> int:
        return len(self.files)

    def __contains__(self, name: str) -> bool:
        return name in self.files

    def __enter__(self) -> 'PackReader':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __del__(self):
        self.close()
