"""
This module implements resolving a request to a cached asset, and the
selection of the representation (plain or gzipped) to send.
"""

import posixpath

from ._cache import FALLBACK_PATH


GZIP_NAMES = "gzip", "x-gzip"


class FallbackMissingError(LookupError):
    """ An error raised when not even the fallback document is in the
    cache. A successfully built cache always has it, so this signals
    an internal fault.
    """


def normalize_path(request_path):
    """ Make the given path absolute and clean it lexically: collapse
    "." and ".." segments and repeated slashes, and drop a trailing slash.
    The result never rises above "/".
    """
    if not request_path.startswith("/"):
        request_path = "/" + request_path
    path = posixpath.normpath(request_path)
    # Posix allows exactly two leading slashes, urls don't
    if path.startswith("//"):
        path = "/" + path.lstrip("/")
    return path


def _parse_qvalue(params):
    for param in params.split(";"):
        key, _, val = param.partition("=")
        if key.strip().lower() == "q":
            try:
                return float(val.strip())
            except ValueError:
                return 1.0
    return 1.0


def accepts_gzip(accept_encoding):
    """ Get whether the given accept-encoding header value allows a gzip
    response. Tokens are compared case-insensitive, and "q=0" means
    "not acceptable". An explicit gzip entry takes precedence over "*".
    """
    qvalues = {}
    for item in (accept_encoding or "").split(","):
        name, _, params = item.partition(";")
        name = name.strip().lower()
        if name:
            qvalues[name] = _parse_qvalue(params)

    explicit = [qvalues[name] for name in GZIP_NAMES if name in qvalues]
    if explicit:
        return max(explicit) > 0
    return qvalues.get("*", 0) > 0


def resolve(cache, request_path, accept_encoding=""):
    """ Get the ``(record, use_compressed)`` to serve for the given request
    path. Unknown paths resolve to the fallback document (/index.html), so
    that client-side routes of a single-page app work.
    """
    path = normalize_path(request_path)
    record = cache.get(path)
    if record is None:
        record = cache.get(FALLBACK_PATH)
        if record is None:
            raise FallbackMissingError(
                f"Fallback {FALLBACK_PATH} missing while resolving {path}"
            )
    use_compressed = record.should_compress and accepts_gzip(accept_encoding)
    return record, use_compressed


def serve_record(record, use_compressed):
    """ Get the ``(status, headers, body)`` response for the given record.
    """
    headers = {}
    if record.content_type:
        headers["content-type"] = record.content_type
    if use_compressed:
        body = record.compressed
        headers["content-encoding"] = "gzip"
    else:
        body = record.plain
    headers["content-length"] = str(len(body))
    return 200, headers, body
