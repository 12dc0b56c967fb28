"""
Asgispa - Serve a single-page app from memory, with ASGI
"""

from ._mime import MimeTable, default_mime_table, PRECOMPRESSED_TYPES
from ._cache import AssetCache, CacheRecord, BuildError, build_cache
from ._router import FallbackMissingError, resolve
from ._request import HttpRequest
from ._app import to_asgi, set_log_level
from ._spa import make_spa_handler, make_spa_app
from ._config import Config
from ._run import run


__all__ = [
    "MimeTable",
    "default_mime_table",
    "PRECOMPRESSED_TYPES",
    "AssetCache",
    "CacheRecord",
    "BuildError",
    "build_cache",
    "FallbackMissingError",
    "resolve",
    "HttpRequest",
    "to_asgi",
    "set_log_level",
    "make_spa_handler",
    "make_spa_app",
    "Config",
    "run",
]


__version__ = "0.1.0"
