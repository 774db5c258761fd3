import os
from pathlib import Path

import pytest

from core.data_structures import FileInfo, PackEntry
from core.errors import FormatError, PackError
from core.pack_operations import (
    collect_files, create_archive, extract_archive, extract_entry, list_archive
)
from core.pack_reader import PackReader


def test_collect_files_walks_sorted_and_dedupes(source_tree):
    files = collect_files(['src/', 'src/readme.txt', 'src/db'])
    assert files == [
        'src/readme.txt',
        'src/db/empty.bin',
        'src/db/items.xml',
        'src/gfx/sprite.raw',
    ]


def test_collect_files_single_file(source_tree):
    assert collect_files(['src/gfx/sprite.raw']) == ['src/gfx/sprite.raw']


def test_collect_files_empty_argument(source_tree):
    with pytest.raises(ValueError):
        collect_files(['///'])


def test_collect_files_missing_path(source_tree):
    with pytest.raises(OSError):
        collect_files(['src/nope'])


@pytest.mark.skipif(not hasattr(os, 'mkfifo'), reason='needs mkfifo')
def test_collect_files_rejects_special_files(source_tree):
    os.mkfifo('src/pipe')
    with pytest.raises(ValueError):
        collect_files(['src'])


def test_create_then_read_back(source_tree, sample_files):
    header = create_archive(Path('out.pack'), ['src'], version=9, progress=False)
    assert header.file_count == len(sample_files)
    with PackReader.open_path('out.pack') as reader:
        assert reader.header.version == 9
        for name, data in sample_files.items():
            assert reader.read(f'src/{name}') == data


def test_create_removes_partial_archive_on_failure(source_tree, monkeypatch):
    def fail(self, path, name=None):
        raise PackError('boom')

    monkeypatch.setattr('core.pack_writer.PackWriter.add_file', fail)
    with pytest.raises(PackError):
        create_archive(Path('out.pack'), ['src'], progress=False)
    assert not Path('out.pack').exists()


def test_list_with_patterns(sample_pack):
    summary, entries = list_archive(sample_pack, ['DB/*'])
    assert summary.version == 7
    assert [e.name for e in entries] == ['db/empty.bin', 'db/items.xml']


def test_list_without_patterns(sample_pack, sample_files):
    _, entries = list_archive(sample_pack)
    assert len(entries) == len(sample_files)


def test_list_rejects_non_pack(tmp_path):
    path = tmp_path / 'junk.pack'
    path.write_bytes(b'\x00' * 2000)
    with pytest.raises(FormatError):
        list_archive(path)


def test_extract_all(sample_pack, sample_files, tmp_path):
    dest = tmp_path / 'out'
    report = extract_archive(sample_pack, dest, progress=False)
    assert report.failed == []
    assert sorted(report.extracted) == sorted(sample_files)
    for name, data in sample_files.items():
        assert (dest / name).read_bytes() == data


def test_extract_with_pattern(sample_pack, tmp_path):
    dest = tmp_path / 'out'
    report = extract_archive(sample_pack, dest, ['*.xml'], progress=False)
    assert report.extracted == ['db/items.xml']
    assert not (dest / 'readme.txt').exists()


def test_extract_continues_past_bad_entries(make_pack, tmp_path):
    path = make_pack({'../escape.txt': b'bad', 'ok.txt': b'good'})
    dest = tmp_path / 'out'
    report = extract_archive(path, dest, progress=False)
    assert report.extracted == ['ok.txt']
    assert [name for name, _ in report.failed] == ['../escape.txt']
    assert not (tmp_path / 'escape.txt').exists()
    assert (dest / 'ok.txt').read_bytes() == b'good'


def test_extract_entry_leaves_nothing_on_decode_failure(sample_pack, tmp_path):
    with PackReader.open_path(sample_pack) as reader:
        bad = PackEntry('broken.txt', FileInfo(size_compressed=4, size_orig=4, is_compressed=0))
        with pytest.raises(PackError):
            extract_entry(reader, bad, tmp_path)
    assert not (tmp_path / 'broken.txt').exists()
