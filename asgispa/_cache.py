"""
This module implements the building of the in-memory asset cache. The
directory tree is read once; each file becomes a ``CacheRecord`` that holds
the raw bytes, and the gzipped bytes if compression is worth it.
"""

import os
import gzip
import logging
from collections import namedtuple
from collections.abc import Mapping

from ._mime import PRECOMPRESSED_TYPES, default_mime_table


logger = logging.getLogger("asgispa")

FALLBACK_PATH = "/index.html"

# The payload of a typical TCP segment
PACKET_SIZE = 1460


class BuildError(Exception):
    """ An error raised when the asset cache cannot be built. The ``path``
    and ``phase`` attributes say where it went wrong. The original error
    (if any) is available as ``__cause__``.
    """

    def __init__(self, message, path, phase):
        super().__init__(message)
        self.path = path
        self.phase = phase


_CacheRecordBase = namedtuple(
    "CacheRecord", ["url_path", "content_type", "plain", "compressed", "should_compress"]
)


class CacheRecord(_CacheRecordBase):
    """ An immutable record for a single asset.

    * ``url_path``: the normalized path at which the asset is served.
    * ``content_type``: the content type, or "" if unknown.
    * ``plain``: the raw bytes.
    * ``compressed``: the gzipped bytes, or None if not worth it.
    * ``should_compress``: whether the compressed bytes should be served
      to clients that accept gzip.
    """

    __slots__ = ()

    @property
    def plain_size(self):
        return len(self.plain)

    @property
    def compressed_size(self):
        return 0 if self.compressed is None else len(self.compressed)


class AssetCache(Mapping):
    """ A read-only mapping of url paths to ``CacheRecord`` objects.
    """

    __slots__ = ("_records",)

    def __init__(self, records=()):
        d = {}
        for record in records:
            if record.url_path in d:
                raise ValueError(f"Duplicate asset path {record.url_path!r}")
            d[record.url_path] = record
        self._records = d

    def __getitem__(self, url_path):
        return self._records[url_path]

    def __iter__(self):
        return iter(self._records)

    def __len__(self):
        return len(self._records)

    def __repr__(self):
        return f"<AssetCache with {len(self)} assets>"

    @property
    def total_size(self):
        """ The total number of bytes held by the cache.
        """
        return sum(r.plain_size + r.compressed_size for r in self._records.values())


def should_compress(
    plain_size, compressed_size, content_type="", precompressed_types=PRECOMPRESSED_TYPES
):
    """ Get whether the compressed form of an asset is worth serving. This is
    the case when it saves at least one whole packet, and the content type
    is not compressed by itself already.
    """
    if content_type in precompressed_types:
        return False
    return plain_size // PACKET_SIZE > compressed_size // PACKET_SIZE


def build_record(
    fpath,
    url_path,
    mime_table,
    *,
    precompressed_types=PRECOMPRESSED_TYPES,
    compress_level=9,
):
    """ Read the file at ``fpath`` and produce a ``CacheRecord`` for it.
    """
    logger.debug(f"Found file: {fpath}")

    try:
        with open(fpath, "rb") as f:
            plain = f.read()
    except OSError as err:
        raise BuildError(f"Failed to read {fpath}: {err}", fpath, "read file") from err

    content_type = mime_table.content_type(fpath)

    try:
        compressed = gzip.compress(plain, compresslevel=compress_level, mtime=0)
    except Exception as err:
        raise BuildError(f"Failed to compress {fpath}: {err}", fpath, "compress") from err

    compress = should_compress(
        len(plain), len(compressed), content_type, precompressed_types
    )
    record = CacheRecord(
        url_path, content_type, plain, compressed if compress else None, compress
    )

    logger.info(
        f"Cached {url_path} ({content_type or 'unknown type'}) "
        f"({record.plain_size} bytes, {record.compressed_size} compressed)"
    )
    return record


def iter_records(root_dir, mime_table, url_path="/", **kwargs):
    """ Walk ``root_dir`` depth-first and yield a ``CacheRecord`` for each
    file. Entries whose name starts with "." or "_" are skipped.
    """
    logger.debug(f"Reading directory: {root_dir}")

    try:
        with os.scandir(root_dir) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as err:
        raise BuildError(
            f"Failed to read directory {root_dir}: {err}", root_dir, "read directory"
        ) from err

    for entry in entries:
        if entry.name.startswith((".", "_")):
            logger.debug(f"Skipping: {entry.path}")
            continue

        sub_url_path = url_path.rstrip("/") + "/" + entry.name
        try:
            is_dir = entry.is_dir()
        except OSError as err:
            raise BuildError(
                f"Failed to stat {entry.path}: {err}", entry.path, "read directory"
            ) from err

        if is_dir:
            yield from iter_records(entry.path, mime_table, sub_url_path, **kwargs)
        else:
            yield build_record(entry.path, sub_url_path, mime_table, **kwargs)


def build_cache(
    root_dir, mime_table=None, *, precompressed_types=None, compress_level=9
):
    """ Build an ``AssetCache`` from all files in ``root_dir``. Raises
    ``BuildError`` if any file or directory cannot be read, or if there
    is no ``index.html`` in the root.

    Parameters:

    * ``root_dir (str)``: The directory to serve.
    * ``mime_table (MimeTable)``: The content type lookup. Default
      ``default_mime_table()``.
    * ``precompressed_types (set)``: Content types that are never compressed.
      Default ``PRECOMPRESSED_TYPES``.
    * ``compress_level (int)``: The gzip compression level. Default 9.
    """
    root_dir = os.fspath(root_dir)
    if mime_table is None:
        mime_table = default_mime_table()
    if precompressed_types is None:
        precompressed_types = PRECOMPRESSED_TYPES
    if not (isinstance(compress_level, int) and 0 <= compress_level <= 9):
        raise ValueError("build_cache() compress_level must be an int 0-9")

    cache = AssetCache(
        iter_records(
            root_dir,
            mime_table,
            precompressed_types=frozenset(precompressed_types),
            compress_level=compress_level,
        )
    )

    if FALLBACK_PATH not in cache:
        raise BuildError(
            f"No {FALLBACK_PATH} found in {root_dir}", root_dir, "fallback"
        )

    logger.info(
        f"Asset cache ready: {len(cache)} assets, {cache.total_size} bytes in memory"
    )
    return cache
