"""
This module provides an ASGI app for the directory that is configured via
the environment (see ``asgispa.Config``). Point an ASGI server to
``asgispa.serve:app``, or use ``python -m asgispa``.
"""

from ._app import set_log_level
from ._config import Config
from ._spa import make_spa_app


config = Config.from_env()
set_log_level(config.log_level)

app = make_spa_app(config.root, compress_level=config.compress_level)
