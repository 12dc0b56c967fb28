"""
This module implements the configuration, which is read from environment
variables. The CLI writes its options to the same variables, so that the
server process (and its workers) see them.
"""

import os
from dataclasses import dataclass, fields


ENV_PREFIX = "ASGISPA_"

SERVERS = "uvicorn", "hypercorn", "daphne"
LOG_LEVELS = "critical", "error", "warning", "info", "debug"


@dataclass(frozen=True)
class Config:
    """ Server configuration. Each field maps to an environment variable,
    e.g. ``root`` is read from ``ASGISPA_ROOT``.
    """

    root: str = "."
    server: str = "uvicorn"
    bind: str = "localhost:8080"
    log_level: str = "info"
    compress_level: int = 9

    def __post_init__(self):
        if not self.root:
            raise ValueError("Config root must not be empty")
        if self.server.lower() not in SERVERS:
            raise ValueError(f"Invalid server specified: {self.server!r}")
        if ":" not in self.bind:
            raise ValueError("Config bind must be 'host:port'")
        if self.log_level.lower() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level!r}")
        if not (isinstance(self.compress_level, int) and 0 <= self.compress_level <= 9):
            raise ValueError("Config compress_level must be an int 0-9")

    @classmethod
    def from_env(cls, environ=None, **overrides):
        """ Create a config from the given environment (default ``os.environ``).
        Keyword arguments take precedence over the environment.
        """
        environ = os.environ if environ is None else environ
        kwargs = {}
        for field in fields(cls):
            key = ENV_PREFIX + field.name.upper()
            if field.name in overrides:
                val = overrides[field.name]
            elif key in environ:
                val = environ[key]
            else:
                continue
            if field.type in (int, "int") and not isinstance(val, int):
                try:
                    val = int(val)
                except ValueError:
                    raise ValueError(f"Config {field.name} must be an int, not {val!r}")
            kwargs[field.name] = val
        return cls(**kwargs)

    def to_env(self):
        """ Get a dict of environment variables that represent this config.
        """
        return {
            ENV_PREFIX + field.name.upper(): str(getattr(self, field.name))
            for field in fields(self)
        }
