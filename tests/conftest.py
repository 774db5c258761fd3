# tests/conftest.py

"""Shared fixtures: sample source trees and archives built from them."""
import os
from pathlib import Path

import pytest

from core.data_structures import WriterConfig
from core.pack_writer import PackWriter

SAMPLE_FILES = {
    'readme.txt': b'hello pack\n',
    'db/items.xml': b'<items>' + b'<item id="1"/>' * 200 + b'</items>',
    'db/empty.bin': b'',
    'gfx/sprite.raw': bytes(range(256)) * 40,
}


@pytest.fixture
def sample_files():
    return dict(SAMPLE_FILES)


@pytest.fixture
def source_tree(tmp_path, monkeypatch):
    """A directory tree of SAMPLE_FILES; the cwd is moved next to it."""
    root = tmp_path / 'src'
    for name, data in SAMPLE_FILES.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        os.utime(path, (1_600_000_000, 1_600_000_000))
    monkeypatch.chdir(tmp_path)
    return root


@pytest.fixture
def make_pack(tmp_path):
    """Build an archive from a {name: bytes} mapping, in the mapping's order."""
    def _make(files, name='test.pack', version=7, mountpoint='data\\'):
        path = tmp_path / name
        config = WriterConfig(path=path, version=version, entry_count=len(files),
                              mountpoint=mountpoint)
        writer = PackWriter.open(config)
        for entry_name, data in files.items():
            writer.add_bytes(entry_name, data, mtime=1_600_000_000)
        writer.commit()
        return path
    return _make


@pytest.fixture
def sample_pack(make_pack) -> Path:
    return make_pack(SAMPLE_FILES)
