"""
Common utilities used in our test scripts.
"""

import logging

from asgispa.testutils import MockTestServer


def run_tests(scope):
    for func in list(scope.values()):
        if callable(func) and func.__name__.startswith("test_"):
            print(f"Running {func.__name__} ...")
            func()
    print("Done")


def make_server(app):
    return MockTestServer(app)


def make_tree(root, files):
    """ Write the given dict of relative paths to str/bytes into root.
    """
    for relpath, content in files.items():
        path = root.joinpath(*relpath.split("/"))
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode()
        path.write_bytes(content)
    return root


class LogCapturer(logging.Handler):
    def __init__(self, level=logging.DEBUG):
        super().__init__(level)
        self.records = []

    @property
    def messages(self):
        return [record.getMessage() for record in self.records]

    def emit(self, record):
        self.records.append(record)

    def __enter__(self):
        logger = logging.getLogger("asgispa")
        logger.addHandler(self)
        return self

    def __exit__(self, *args, **kwargs):
        logger = logging.getLogger("asgispa")
        logger.removeHandler(self)
