# core/pack_operations.py

"""List, extract and create operations built on the reader and writer."""
import os
import stat
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from tqdm import tqdm

from core.data_structures import ExtractReport, PackEntry, PackSummary, WriterConfig
from core.errors import PackError
from core.pack_format import DEFAULT_UTC_OFFSET
from core.pack_reader import PackReader
from core.pack_writer import PackWriter
from utils.file_utils import is_safe_entry_name, match_any
from utils.i18n import translator as t


def _raise(error: OSError):
    raise error


def collect_files(paths: Iterable[str]) -> List[str]:
    """
    Expand files and directories into a de-duplicated list of file paths.

    Directories are walked recursively in sorted order; the returned strings
    keep the form they were given in, joined with '/'.
    """
    result: List[str] = []
    seen = set()

    def add(path: str):
        if path not in seen:
            seen.add(path)
            result.append(path)

    for arg in paths:
        name = arg.rstrip('/')
        if not name:
            raise ValueError("Empty filename in argument list")

        mode = os.stat(name).st_mode
        if stat.S_ISREG(mode):
            add(name)
        elif stat.S_ISDIR(mode):
            for root, dirs, files in os.walk(name, onerror=_raise):
                dirs.sort()
                for filename in sorted(files):
                    path = f"{root}/{filename}"
                    file_mode = os.stat(path).st_mode
                    if not stat.S_ISREG(file_mode):
                        raise ValueError(f"Unsupported file type: {path}")
                    add(path)
        else:
            raise ValueError(f"Unsupported file type: {name}")
    return result


def list_archive(pack_path: Path, patterns: Sequence[str] = (),
                 verbose: bool = False) -> Tuple[PackSummary, List[PackEntry]]:
    """Header summary plus the entries matching `patterns`."""
    with PackReader.open_path(pack_path, verbose=verbose) as reader:
        entries = [entry for entry in reader if match_any(patterns, entry.name)]
        return reader.summary(), entries


def extract_entry(reader: PackReader, entry: PackEntry, dest_dir: Path) -> Path:
    """Write one entry below `dest_dir`, removing partial output on failure."""
    if not is_safe_entry_name(entry.name):
        raise ValueError(f"Refusing to extract unsafe name: {entry.name}")

    target = dest_dir / entry.name
    target.parent.mkdir(parents=True, exist_ok=True)
    data = reader.read(entry)
    try:
        target.write_bytes(data)
    except OSError:
        if target.exists():
            target.unlink()
        raise
    return target


def extract_archive(pack_path: Path, dest_dir: Path, patterns: Sequence[str] = (),
                    progress: bool = True, verbose: bool = False) -> ExtractReport:
    """
    Extract every matching entry into `dest_dir`.

    Errors opening the archive propagate; a bad entry is reported and
    skipped so the rest of the archive still gets extracted.
    """
    extracted: List[str] = []
    failed: List[Tuple[str, str]] = []
    with PackReader.open_path(pack_path, verbose=verbose) as reader:
        dest_dir.mkdir(parents=True, exist_ok=True)
        entries = [entry for entry in reader if match_any(patterns, entry.name)]

        for entry in tqdm(entries, desc=t.get('extracting'), unit='file', disable=not progress):
            try:
                extract_entry(reader, entry, dest_dir)
            except (PackError, ValueError, OSError) as e:
                print(t.get('extract_failed', entry.name, e), file=sys.stderr)
                failed.append((entry.name, str(e)))
                continue
            extracted.append(entry.name)

    return ExtractReport(extracted, failed)


def create_archive(pack_path: Path, inputs: Iterable[str], version: int = 0,
                   mountpoint: str = 'data\\', utc_offset: int = DEFAULT_UTC_OFFSET,
                   compression_level: int = 9, progress: bool = True,
                   verbose: bool = False, files: Optional[List[str]] = None):
    """
    Pack `inputs` (files and directories) into a new archive.

    On any failure the partial archive is removed before the error is
    re-raised. Returns the committed header.
    """
    if files is None:
        files = collect_files(inputs)
    config = WriterConfig(
        path=Path(pack_path),
        version=version,
        entry_count=len(files),
        mountpoint=mountpoint,
        utc_offset=utc_offset,
        compression_level=compression_level,
    )

    writer = PackWriter.open(config, verbose=verbose)
    try:
        for path in tqdm(files, desc=t.get('adding'), unit='file', disable=not progress):
            writer.add_file(path)
        return writer.commit()
    except BaseException:
        writer.discard()
        Path(pack_path).unlink(missing_ok=True)
        raise
