"""Loading of ROM and disk images from files, URLs or bundled resources."""

from __future__ import annotations

import gzip
import io
import urllib.request
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Optional, Union

INTERNAL_PREFIX = "<internal>/"
HTTP_PREFIX = "http://"
HTTPS_PREFIX = "https://"

DEFAULT_INTERNAL_DIR = Path(__file__).resolve().parent / "resources"

_GZIP_SIGNATURE = b"\x1f\x8b\x08"
_ZIP_SIGNATURE = b"PK\x03\x04"


def is_internal_resource(filename: str) -> bool:
    return filename.startswith(INTERNAL_PREFIX)


def is_http_resource(filename: str) -> bool:
    return filename.startswith((HTTP_PREFIX, HTTPS_PREFIX))


def normalize_filename(filename: str) -> str:
    """Strip surrounding double quotes and expand a leading tilde."""
    if filename.startswith('"') and filename.endswith('"'):
        filename = filename[1:-1]
    if filename.startswith("~"):
        try:
            home = str(Path.home())
        except RuntimeError:
            pass
        else:
            filename = home + filename[1:]
    return filename


def _read_raw(filename: str, internal_dir: Path) -> tuple[bytes, bool]:
    if is_internal_resource(filename):
        path = internal_dir / filename[len(INTERNAL_PREFIX):]
        return path.read_bytes(), False
    if is_http_resource(filename):
        with urllib.request.urlopen(filename) as response:
            return response.read(), False
    return Path(filename).read_bytes(), True


def load_resource(
    filename: str,
    internal_dir: Union[str, Path, None] = None,
    is_diskette: Optional[Callable[[bytes], bool]] = None,
) -> tuple[bytes, bool]:
    """Load a resource and return its bytes and whether it may be written back.

    Names starting with ``<internal>/`` are read from ``internal_dir``;
    http and https URLs are downloaded; anything else is a local file.
    Gzip content is decompressed. For zip content the first entry accepted
    by ``is_diskette`` (any entry when it is None) replaces the data.
    Only plain local files are writeable.
    """
    filename = normalize_filename(filename)
    directory = Path(internal_dir) if internal_dir is not None else DEFAULT_INTERNAL_DIR
    data, writeable = _read_raw(filename, directory)

    if data.startswith(_GZIP_SIGNATURE):
        writeable = False
        data = gzip.decompress(data)
    elif data.startswith(_ZIP_SIGNATURE):
        writeable = False
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            for info in archive.infolist():
                content = archive.read(info)
                if is_diskette is None or is_diskette(content):
                    data = content
                    break

    return data, writeable