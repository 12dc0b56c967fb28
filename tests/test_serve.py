"""
Test the module-level app, as loaded by an ASGI server.
"""

import sys
import importlib

from pytest import raises

from asgispa import BuildError

from common import make_server, make_tree


def load_serve_module():
    sys.modules.pop("asgispa.serve", None)
    return importlib.import_module("asgispa.serve")


def test_serve_module(tmp_path, monkeypatch):
    make_tree(tmp_path, {"index.html": "hello", "app.js": "x"})
    monkeypatch.setenv("ASGISPA_ROOT", str(tmp_path))
    monkeypatch.setenv("ASGISPA_LOG_LEVEL", "info")

    serve = load_serve_module()
    try:
        assert serve.config.root == str(tmp_path)
        assert set(serve.app.asgispa_handler.cache) == {"/index.html", "/app.js"}

        with make_server(serve.app) as server:
            r = server.get("/some/route")
            assert r.status == 200
            assert r.body == b"hello"
    finally:
        sys.modules.pop("asgispa.serve", None)


def test_serve_module_fails(tmp_path, monkeypatch):
    monkeypatch.setenv("ASGISPA_ROOT", str(tmp_path))
    monkeypatch.setenv("ASGISPA_LOG_LEVEL", "info")

    with raises(BuildError):
        load_serve_module()
    assert "asgispa.serve" not in sys.modules
