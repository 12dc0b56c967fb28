"""
CLI to serve a directory as a single-page app:

    python -m asgispa DIRECTORY [--server=uvicorn] [--bind=localhost:8080]
                                [--log-level=info] [--compress-level=9]

Options that are not listed above are passed on to the server. Options
that are not given are taken from the ``ASGISPA_*`` environment variables.
"""

import os
import sys

from ._config import Config
from ._run import run


APPNAME = "asgispa.serve:app"

CONFIG_OPTIONS = {
    "server": "server",
    "bind": "bind",
    "log-level": "log_level",
    "compress-level": "compress_level",
}


def parse_args(argv):
    """ Parse the command line arguments into a list of positional args
    and a dict of options.
    """
    args = []
    kwargs = {}
    argv = list(argv)
    while argv:
        arg = argv.pop(0)
        if arg.startswith("--"):
            if "=" in arg:
                key, _, val = arg[2:].partition("=")
            else:
                key = arg[2:]
                val = argv.pop(0) if argv else ""
            kwargs[key] = val
        else:
            args.append(arg)
    return args, kwargs


def main(argv, environ=None):
    """ CLI API to serve a directory. The config is written to ``environ``
    (default ``os.environ``), where the server process picks it up.
    """
    environ = os.environ if environ is None else environ

    args, kwargs = parse_args(argv)
    if len(args) != 1:
        raise RuntimeError(f"asgispa command expects one directory argument, got: {args}")
    root = os.path.abspath(args[0])
    if not os.path.isdir(root):
        raise RuntimeError(f"Not a directory: {root}")

    overrides = {"root": root}
    for option, name in CONFIG_OPTIONS.items():
        if option in kwargs:
            overrides[name] = kwargs.pop(option)
    config = Config.from_env(environ, **overrides)
    environ.update(config.to_env())

    server_kwargs = {key.replace("-", "_"): val for key, val in kwargs.items()}
    return run(APPNAME, config.server, config.bind, config.log_level, **server_kwargs)


def cli():
    """ Entry point for the ``asgispa`` console script.
    """
    main(sys.argv[1:])


if __name__ == "__main__":
    cli()
