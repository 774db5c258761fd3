# core/pack_format.py

"""
On-disk layout of PACK archives.

Everything here works on byte strings or binary buffers and knows nothing
about archive files as a whole. Integers are little-endian; structures are
encoded field by field so the layout never depends on the host.

    header (544 bytes) | table region | data section

The table region holds `file_count` entries of (name prefix, name, FileInfo)
and is padded up to the size reserved by the writer.
"""
import struct
from typing import BinaryIO, Tuple

from core.data_structures import FileInfo, PackHeader
from core.errors import FormatError, NameTooLong, TruncatedTable

# --- Header ---
MAGIC = b'PACK'
REVISION = b'\x02\x01\x00\x00'
MOUNTPOINT_SIZE = 480
HEADER_FORMAT = '<4s4sIIQQ480sIIII16s'
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)          # 544

# --- FileInfo ---
FILE_INFO_FORMAT = '<IIIIIIQQQQQ'
FILE_INFO_SIZE = struct.calcsize(FILE_INFO_FORMAT)    # 64
U32_MAX = 0xFFFFFFFF

# --- Names ---
NAME_KIND_EXPLICIT = 5
NAME_BUDGET = 512
MAX_NAME_LENGTH = NAME_BUDGET - 1 - 4 - 1             # kind, length, terminator
NAME_ENCODING = 'utf-8'
TABLE_ALIGNMENT = 1024

# --- Timestamps ---
FILETIME_EPOCH_DELTA = 11644473600                    # 1601-01-01 -> 1970-01-01
FILETIME_TICKS = 10_000_000
DEFAULT_UTC_OFFSET = 32400                            # KST

_IMPLICIT_LENGTHS = {kind: 16 * (kind + 1) - 1 for kind in range(4)}
_IMPLICIT_LENGTHS[4] = 0x5F
_IMPLICIT_KINDS = {length: kind for kind, length in _IMPLICIT_LENGTHS.items()}


# --- Header encode/decode ---

def encode_mountpoint(mountpoint: str) -> bytes:
    raw = mountpoint.encode(NAME_ENCODING, errors='surrogateescape')
    if len(raw) >= MOUNTPOINT_SIZE:
        raise ValueError(f"Mountpoint is {len(raw)} bytes, at most {MOUNTPOINT_SIZE - 1} allowed")
    return raw


def encode_header(header: PackHeader) -> bytes:
    """Pack the fixed header. Raises ValueError when a field does not fit its slot."""
    mountpoint = encode_mountpoint(header.mountpoint)
    try:
        return struct.pack(
            HEADER_FORMAT,
            header.magic, header.revision, header.version, header.file_count0,
            header.time1, header.time2, mountpoint,
            header.file_count, header.table_region_size, header.padding_size,
            header.data_section_size, b'\x00' * 16,
        )
    except struct.error as e:
        raise ValueError(f"Header field out of range: {e}") from e


def decode_header(buf: bytes) -> PackHeader:
    """Parse and validate the fixed header."""
    if len(buf) < HEADER_SIZE:
        raise FormatError(f"Header truncated: {len(buf)} of {HEADER_SIZE} bytes")
    (magic, revision, version, file_count0, time1, time2, mountpoint,
     file_count, table_region_size, padding_size, data_section_size,
     _reserved) = struct.unpack_from(HEADER_FORMAT, buf, 0)

    if magic != MAGIC:
        raise FormatError(f"Invalid magic: {magic!r}")
    if revision != REVISION:
        raise FormatError(f"Unsupported revision: {revision.hex()}")

    # the last byte always terminates the string
    mountpoint = mountpoint[:MOUNTPOINT_SIZE - 1].split(b'\x00', 1)[0]
    return PackHeader(
        magic=magic,
        revision=revision,
        version=version,
        file_count0=file_count0,
        time1=time1,
        time2=time2,
        mountpoint=mountpoint.decode(NAME_ENCODING, errors='surrogateescape'),
        file_count=file_count,
        table_region_size=table_region_size,
        padding_size=padding_size,
        data_section_size=data_section_size,
    )


def data_section_offset(header: PackHeader) -> int:
    return HEADER_SIZE + header.table_region_size


# --- FileInfo encode/decode ---

def encode_file_info(info: FileInfo) -> bytes:
    try:
        return struct.pack(FILE_INFO_FORMAT, *info)
    except struct.error as e:
        raise ValueError(f"FileInfo field out of range: {e}") from e


def decode_file_info(buf: bytes) -> FileInfo:
    if len(buf) != FILE_INFO_SIZE:
        raise TruncatedTable(f"FileInfo truncated: {len(buf)} of {FILE_INFO_SIZE} bytes")
    return FileInfo(*struct.unpack(FILE_INFO_FORMAT, buf))


# --- Name encoding ---

def to_disk_name(name: str) -> str:
    return name.replace('/', '\\')


def from_disk_name(name: str) -> str:
    return name.replace('\\', '/')


def encode_name_length(length: int, compact: bool = False) -> bytes:
    """
    Kind byte (plus explicit length) for a name of `length` bytes.

    The writer always uses the explicit form; `compact` picks the one-byte
    kinds 0-4 when the length matches one of them.
    """
    if length < 0 or length > U32_MAX:
        raise ValueError(f"Invalid name length: {length}")
    if compact and length in _IMPLICIT_KINDS:
        return bytes([_IMPLICIT_KINDS[length]])
    return struct.pack('<BI', NAME_KIND_EXPLICIT, length)


def decode_name_length(buf: bytes) -> Tuple[int, int]:
    """Returns (length, bytes consumed) for a prefix at the start of `buf`."""
    if not buf:
        raise TruncatedTable("Missing name kind byte")
    kind = buf[0]
    if kind in _IMPLICIT_LENGTHS:
        return _IMPLICIT_LENGTHS[kind], 1
    if kind == NAME_KIND_EXPLICIT:
        if len(buf) < 5:
            raise TruncatedTable("Explicit name length truncated")
        return struct.unpack_from('<I', buf, 1)[0], 5
    raise TruncatedTable(f"Unknown name kind: {kind}")


def encode_name(name: str) -> bytes:
    """Encode a '/'-separated name into its on-disk form (always kind 5)."""
    raw = to_disk_name(name).encode(NAME_ENCODING, errors='surrogateescape')
    if len(raw) > MAX_NAME_LENGTH:
        raise NameTooLong(f"Name is {len(raw)} bytes, at most {MAX_NAME_LENGTH} allowed: {name}")
    return encode_name_length(len(raw)) + raw


def read_name(buffer: BinaryIO) -> str:
    """Read one name from the table and return it with '/' separators."""
    kind = buffer.read(1)
    if len(kind) != 1:
        raise TruncatedTable("Table ended before a name")
    prefix = kind
    if kind[0] == NAME_KIND_EXPLICIT:
        prefix += buffer.read(4)
    length, _ = decode_name_length(prefix)

    if length > MAX_NAME_LENGTH:
        raise TruncatedTable(f"Declared name length {length} exceeds {MAX_NAME_LENGTH}")
    raw = buffer.read(length)
    if len(raw) != length:
        raise TruncatedTable(f"Name truncated: {len(raw)} of {length} bytes")
    return from_disk_name(raw.decode(NAME_ENCODING, errors='surrogateescape'))


def read_table_entry(buffer: BinaryIO) -> Tuple[str, FileInfo]:
    name = read_name(buffer)
    return name, decode_file_info(buffer.read(FILE_INFO_SIZE))


def encode_table_entry(name: str, info: FileInfo) -> bytes:
    return encode_name(name) + encode_file_info(info)


def reserved_table_size(entry_count: int) -> int:
    """Upper bound for the table region, rounded up to TABLE_ALIGNMENT."""
    needed = entry_count * (NAME_BUDGET + FILE_INFO_SIZE)
    return -(-needed // TABLE_ALIGNMENT) * TABLE_ALIGNMENT


# --- Timestamps ---

def unix_to_filetime(timestamp: float, utc_offset: int = DEFAULT_UTC_OFFSET) -> int:
    return (int(timestamp) + FILETIME_EPOCH_DELTA + utc_offset) * FILETIME_TICKS


def filetime_to_unix(filetime: int, utc_offset: int = DEFAULT_UTC_OFFSET) -> int:
    return filetime // FILETIME_TICKS - FILETIME_EPOCH_DELTA - utc_offset
