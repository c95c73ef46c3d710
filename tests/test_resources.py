import gzip
import io
import zipfile
from unittest import mock

import pytest

from a2emu.resources import (
    is_http_resource,
    is_internal_resource,
    load_resource,
    normalize_filename,
)


def test_prefix_detection():
    assert is_internal_resource("<internal>/rom.bin")
    assert not is_internal_resource("rom.bin")
    assert is_http_resource("http://example.com/a.dsk")
    assert is_http_resource("https://example.com/a.dsk")
    assert not is_http_resource("ftp://example.com/a.dsk")


def test_normalize_removes_quotes():
    assert normalize_filename('"my disk.dsk"') == "my disk.dsk"
    assert normalize_filename("plain.dsk") == "plain.dsk"


def test_normalize_expands_tilde(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    assert normalize_filename("~/disk.dsk") == str(tmp_path) + "/disk.dsk"


def test_local_file_is_writeable(tmp_path):
    path = tmp_path / "image.dsk"
    path.write_bytes(b"\x01\x02\x03")
    data, writeable = load_resource(str(path))
    assert data == b"\x01\x02\x03"
    assert writeable is True


def test_quoted_local_file(tmp_path):
    path = tmp_path / "image.dsk"
    path.write_bytes(b"abc")
    data, _ = load_resource(f'"{path}"')
    assert data == b"abc"


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_resource(str(tmp_path / "missing.dsk"))


def test_internal_resource_read_only(tmp_path):
    (tmp_path / "rom.bin").write_bytes(b"ROMDATA")
    data, writeable = load_resource("<internal>/rom.bin", internal_dir=tmp_path)
    assert data == b"ROMDATA"
    assert writeable is False


def test_missing_internal_resource_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_resource("<internal>/nothing.bin", internal_dir=tmp_path)


def test_gzip_is_decompressed(tmp_path):
    payload = bytes(range(200)) * 3
    path = tmp_path / "image.dsk.gz"
    path.write_bytes(gzip.compress(payload))
    data, writeable = load_resource(str(path))
    assert data == payload
    assert writeable is False


def _zip_bytes(entries):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in entries:
            archive.writestr(name, content)
    return buffer.getvalue()


def test_zip_picks_diskette_entry(tmp_path):
    path = tmp_path / "bundle.zip"
    path.write_bytes(_zip_bytes([("readme.txt", b"hello"), ("disk.dsk", b"D" * 64)]))
    data, writeable = load_resource(str(path), is_diskette=lambda b: len(b) == 64)
    assert data == b"D" * 64
    assert writeable is False


def test_zip_without_diskette_keeps_archive(tmp_path):
    raw = _zip_bytes([("readme.txt", b"hello")])
    path = tmp_path / "bundle.zip"
    path.write_bytes(raw)
    data, _ = load_resource(str(path), is_diskette=lambda b: False)
    assert data == raw


def test_http_resource_read_only():
    with mock.patch("urllib.request.urlopen", return_value=io.BytesIO(b"REMOTE")) as opener:
        data, writeable = load_resource("https://example.com/disk.dsk")
    opener.assert_called_once_with("https://example.com/disk.dsk")
    assert data == b"REMOTE"
    assert writeable is False