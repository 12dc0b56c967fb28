"""
This module implements the single-page-app handler, which serves the
assets of a directory from memory.
"""

import logging

from ._app import to_asgi, ERROR_BODY
from ._cache import build_cache
from ._router import resolve, serve_record, FallbackMissingError


logger = logging.getLogger("asgispa")


def make_spa_handler(
    directory, mime_table=None, *, precompressed_types=None, compress_level=9
):
    """
    Get a coroutine function for serving a single-page app from memory.
    All files in ``directory`` are read (and gzipped where that pays off)
    right away; the handler never touches the file system. Usage:

    .. code-block:: python

        spa_handler = make_spa_handler("./dist")

        async def some_handler(request):
            return await spa_handler(request)

    Parameters:

    * ``directory (str)``: The directory to serve. Files and directories
      whose name starts with "." or "_" are not published. The directory
      must contain an ``index.html``.
    * ``mime_table (MimeTable)``: The lookup for content types. Default
      ``default_mime_table()``.
    * ``precompressed_types (set)``: Content types that are never gzipped.
      Default ``PRECOMPRESSED_TYPES``.
    * ``compress_level (int)``: The gzip compression level. Default 9.

    Raises ``BuildError`` if the assets cannot be loaded.

    Handler behavior:

    * The request path is cleaned ("." and ".." segments etc.) and looked up.
      Unknown paths get ``/index.html``, so that client-side routes work.
    * The ``content-type`` header is set if the type is known.
    * If the asset is worth compressing and the request has an
      ``accept-encoding`` header that allows gzip, the gzipped body is sent
      with ``content-encoding: gzip``.
    * The request method is not inspected.
    """

    cache = build_cache(
        directory,
        mime_table,
        precompressed_types=precompressed_types,
        compress_level=compress_level,
    )

    async def spa_handler(request):
        try:
            record, use_compressed = resolve(
                cache, request.path, request.headers.get("accept-encoding", "")
            )
        except FallbackMissingError as err:
            logger.critical(f"Internal fault: {str(err)}")
            return 500, {}, ERROR_BODY
        logger.debug(
            f"Request for {record.url_path} (original: {request.path}, "
            f"gzip: {use_compressed})"
        )
        return serve_record(record, use_compressed)

    spa_handler.cache = cache
    return spa_handler


def make_spa_app(directory, mime_table=None, **kwargs):
    """ Get an ASGI application that serves a single-page app from memory.
    See ``make_spa_handler()`` for details.
    """
    return to_asgi(make_spa_handler(directory, mime_table, **kwargs))
