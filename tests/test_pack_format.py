import io
import struct

import pytest

from core.data_structures import FileInfo, PackHeader
from core.errors import FormatError, NameTooLong, TruncatedTable
from core.pack_format import (
    FILE_INFO_SIZE, HEADER_SIZE, MAGIC, MAX_NAME_LENGTH, REVISION,
    decode_file_info, decode_header, decode_name_length, encode_file_info,
    encode_header, encode_name, encode_name_length, filetime_to_unix, read_name,
    reserved_table_size, unix_to_filetime
)


def make_header(**overrides):
    fields = dict(
        magic=MAGIC, revision=REVISION, version=120, file_count0=3,
        time1=130000000000000000, time2=130000000000000000, mountpoint='data\\',
        file_count=3, table_region_size=2048, padding_size=100, data_section_size=9999,
    )
    fields.update(overrides)
    return PackHeader(**fields)


def test_struct_sizes():
    assert HEADER_SIZE == 544
    assert FILE_INFO_SIZE == 64


def test_header_layout():
    raw = encode_header(make_header())
    assert len(raw) == HEADER_SIZE
    assert raw[:4] == b'PACK'
    assert raw[4:8] == b'\x02\x01\x00\x00'
    assert struct.unpack_from('<I', raw, 8)[0] == 120
    assert raw[32:37] == b'data\\'
    assert struct.unpack_from('<IIII', raw, 512) == (3, 2048, 100, 9999)
    assert raw[528:] == b'\x00' * 16


def test_header_roundtrip():
    header = make_header()
    assert decode_header(encode_header(header)) == header


def test_bad_magic_rejected_even_if_rest_is_valid():
    raw = b'KCAP' + encode_header(make_header())[4:]
    with pytest.raises(FormatError):
        decode_header(raw)


def test_bad_revision_rejected():
    raw = bytearray(encode_header(make_header()))
    raw[4:8] = b'\x01\x01\x00\x00'
    with pytest.raises(FormatError):
        decode_header(bytes(raw))


def test_short_header_rejected():
    with pytest.raises(FormatError):
        decode_header(encode_header(make_header())[:100])


def test_mountpoint_always_terminated():
    raw = bytearray(encode_header(make_header()))
    raw[32:512] = b'A' * 480
    assert decode_header(bytes(raw)).mountpoint == 'A' * 479


def test_mountpoint_too_long():
    with pytest.raises(ValueError):
        encode_header(make_header(mountpoint='m' * 480))


def test_file_info_layout():
    info = FileInfo(seed=1, reserved=2, offset=3, size_compressed=4, size_orig=5,
                    is_compressed=1, time_created=6, time_created2=7, time_accessed=8,
                    time_modified=9, time_written=10)
    raw = encode_file_info(info)
    assert len(raw) == FILE_INFO_SIZE
    assert struct.unpack('<6I5Q', raw) == tuple(info)
    assert decode_file_info(raw) == info


def test_file_info_truncated():
    with pytest.raises(TruncatedTable):
        decode_file_info(b'\x00' * 10)


@pytest.mark.parametrize('kind,length', [(0, 15), (1, 31), (2, 47), (3, 63), (4, 95)])
def test_implicit_kinds(kind, length):
    assert decode_name_length(bytes([kind])) == (length, 1)
    assert encode_name_length(length, compact=True) == bytes([kind])


def test_explicit_kind():
    assert decode_name_length(b'\x05\x10\x01\x00\x00') == (0x110, 5)
    assert encode_name_length(0x110) == b'\x05\x10\x01\x00\x00'


def test_writer_form_is_always_explicit():
    assert encode_name_length(15) == b'\x05\x0f\x00\x00\x00'


@pytest.mark.parametrize('kind', [6, 7, 0x80, 0xFF])
def test_unknown_kind(kind):
    with pytest.raises(TruncatedTable):
        decode_name_length(bytes([kind]))


def test_name_length_encoding_is_a_bijection():
    for length in range(0, 4095):
        for compact in (False, True):
            prefix = encode_name_length(length, compact=compact)
            assert decode_name_length(prefix) == (length, len(prefix))
            assert encode_name_length(decode_name_length(prefix)[0], compact=compact) == prefix


@pytest.mark.parametrize('length', [14, 15, 16, 94, 95, 96])
def test_boundaries(length):
    prefix = encode_name_length(length, compact=True)
    expected_width = 1 if length in (15, 95) else 5
    assert len(prefix) == expected_width


def test_encode_name_uses_backslashes():
    encoded = encode_name('db/items/a.xml')
    assert encoded == b'\x05\x0e\x00\x00\x00db\\items\\a.xml'


def test_read_name_uses_slashes():
    assert read_name(io.BytesIO(b'\x05\x05\x00\x00\x00a\\b\\c')) == 'a/b/c'


def test_read_name_with_implicit_length():
    name = b'x' * 14 + b'\\'
    assert read_name(io.BytesIO(b'\x00' + name)) == 'x' * 14 + '/'


def test_name_cap():
    assert len(encode_name('n' * MAX_NAME_LENGTH)) == MAX_NAME_LENGTH + 5
    with pytest.raises(NameTooLong):
        encode_name('n' * (MAX_NAME_LENGTH + 1))


def test_oversized_declared_length_rejected_without_reading():
    buffer = io.BytesIO(struct.pack('<BI', 5, 100000) + b'x' * 20)
    with pytest.raises(TruncatedTable):
        read_name(buffer)
    assert buffer.tell() == 5


def test_truncated_name():
    with pytest.raises(TruncatedTable):
        read_name(io.BytesIO(b'\x05\x0a\x00\x00\x00abc'))


def test_reserved_table_size():
    assert reserved_table_size(0) == 0
    assert reserved_table_size(1) == 1024
    assert reserved_table_size(16) == 16 * 576
    assert reserved_table_size(17) % 1024 == 0
    assert reserved_table_size(17) >= 17 * 576


def test_filetime_conversion():
    assert unix_to_filetime(0, 0) == 116444736000000000
    assert filetime_to_unix(unix_to_filetime(1_600_000_000)) == 1_600_000_000
    assert unix_to_filetime(0) - unix_to_filetime(0, 0) == 32400 * 10_000_000


@pytest.mark.parametrize('field', ['version', 'file_count', 'data_section_size'])
def test_header_field_out_of_range(field):
    with pytest.raises(ValueError):
        encode_header(make_header(**{field: 2 ** 32}))


def test_file_info_field_out_of_range():
    with pytest.raises(ValueError):
        encode_file_info(FileInfo(offset=2 ** 32))
    with pytest.raises(ValueError):
        encode_file_info(FileInfo(time_modified=-1))
