"""
This module implements the lookup from file extension to content type
that is used when the asset cache is built.
"""

import os
import mimetypes


SEED_TYPES = {
    ".html": "text/html",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".txt": "text/plain",
    ".xhtml": "application/xhtml+xml",
    ".xml": "application/xml",
    ".json": "application/json",
    ".zip": "application/zip",
    ".mp3": "audio/mpeg",
    ".mp4": "video/mp4",
    ".mpeg": "video/mpeg",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".ttf": "font/ttf",
}

# Media types whose encoding is already compressed. Gzipping these again
# costs CPU and gains (next to) nothing.
PRECOMPRESSED_TYPES = frozenset(
    [
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/avif",
        "audio/mpeg",
        "audio/ogg",
        "video/mp4",
        "video/mpeg",
        "video/webm",
        "font/woff",
        "font/woff2",
        "application/zip",
        "application/gzip",
    ]
)


class MimeTable:
    """ An immutable mapping of file extensions to content types. Extensions
    include the leading dot and are matched case-insensitive. Unknown
    extensions map to an empty string.
    """

    __slots__ = ("_types",)

    def __init__(self, mapping=None):
        types = {}
        for ext, ctype in (mapping or {}).items():
            if not (isinstance(ext, str) and isinstance(ctype, str)):
                raise TypeError("MimeTable keys and values must be str.")
            if not ext.startswith("."):
                raise ValueError(f"Extension must start with a dot: {ext!r}")
            types[ext.lower()] = ctype
        self._types = types

    def __repr__(self):
        return f"<MimeTable with {len(self._types)} types>"

    def __len__(self):
        return len(self._types)

    def __contains__(self, ext):
        return ext.lower() in self._types

    def lookup(self, ext):
        """ Get the content type for the given extension, or "".
        """
        return self._types.get(ext.lower(), "")

    def content_type(self, filename):
        """ Get the content type for the given filename, or "".
        """
        return self.lookup(os.path.splitext(filename)[1])

    def with_types(self, mapping):
        """ Get a new table that has the given extra types. This table
        is left untouched.
        """
        types = dict(self._types)
        types.update(MimeTable(mapping)._types)
        return MimeTable(types)


def default_mime_table():
    """ Get the default table: Python's builtin types, overlaid with
    the types that a single-page app typically needs.
    Platform ``mime.types`` files are not consulted.
    """
    # Instantiating MimeTypes() would call mimetypes.init(), which loads
    # the host's files into the module-level registry.
    builtin = mimetypes._types_map_default
    return MimeTable(builtin).with_types(SEED_TYPES)
