"""
Test serving a single-page app, end to end.
"""

import gzip
import asyncio

from pytest import raises

import asgispa
import asgispa._spa
from asgispa import make_spa_handler, make_spa_app, BuildError, FallbackMissingError

from common import make_server, make_tree, LogCapturer


index_html = "<!DOCTYPE html><html><body><div id='app'></div></body></html>"
style_css = "body { color: red; }\n" * 500


def make_app_dir(tmp_path):
    return make_tree(
        tmp_path,
        {
            "index.html": index_html,
            "style.css": style_css,
            "js/app.js": "console.log('hi');",
            "data.unknownext": "abc",
            "logo.png": style_css,
            ".env": "SECRET=1",
            "_drafts/post.html": "draft",
        },
    )


def test_make_spa_handler_fails(tmp_path):
    make_tree(tmp_path, {"foo.html": "x"})

    with raises(BuildError):
        make_spa_handler(tmp_path)
    with raises(BuildError):
        make_spa_app(tmp_path / "doesnotexist")


def test_spa_serving(tmp_path):
    handler = make_spa_handler(make_app_dir(tmp_path))

    with make_server(handler) as server:

        r1 = server.get("/index.html")
        r2 = server.get("/js/app.js")
        r3 = server.get("/")

        assert r1.status == 200 and r2.status == 200 and r3.status == 200
        assert r1.body == index_html.encode()
        assert r1.headers["content-type"] == "text/html"
        assert r1.headers["content-length"] == str(len(index_html))
        assert r2.body == b"console.log('hi');"
        assert r2.headers["content-type"] == "text/javascript"
        assert r3.body == r1.body

        # Unknown content type means no header
        r4 = server.get("/data.unknownext")
        assert r4.status == 200
        assert r4.body == b"abc"
        assert "content-type" not in r4.headers


def test_spa_fallback(tmp_path):
    handler = make_spa_handler(make_app_dir(tmp_path))

    with make_server(handler) as server:
        for path in ("/does/not/exist", "/users/42/edit", "/.env", "/_drafts/post.html"):
            r = server.get(path)
            assert r.status == 200, path
            assert r.body == index_html.encode(), path
            assert r.headers["content-type"] == "text/html"

        # The request method is not inspected
        for method in ("POST", "PUT", "DELETE", "HEAD"):
            r = server.request(method, "/style.css")
            assert r.status == 200
            assert r.body == style_css.encode()


def test_spa_no_escape(tmp_path):
    handler = make_spa_handler(make_app_dir(tmp_path / "app"))
    (tmp_path / "secret.txt").write_bytes(b"secret")

    with make_server(handler) as server:
        for path in ("/../secret.txt", "/js/../../secret.txt", "/%2e%2e/secret.txt"):
            r = server.get(path)
            assert r.status == 200
            assert r.body == index_html.encode()

        r = server.get("/js/../style.css")
        assert r.body == style_css.encode()


def test_spa_compression(tmp_path):
    handler = make_spa_handler(make_app_dir(tmp_path))
    record = handler.cache["/style.css"]
    assert record.should_compress

    with make_server(handler) as server:

        r1 = server.get("/style.css", headers={"accept-encoding": "gzip"})
        r2 = server.get("/style.css")
        r3 = server.get("/style.css", headers={"accept-encoding": "gzip, deflate, br"})
        r4 = server.get("/style.css", headers={"accept-encoding": "br"})

        assert r1.status == 200
        assert r1.headers["content-encoding"] == "gzip"
        assert r1.headers["content-type"] == "text/css"
        assert r1.body == record.compressed
        assert gzip.decompress(r1.body) == style_css.encode()
        assert int(r1.headers["content-length"]) == len(record.compressed)

        assert r2.status == 200
        assert "content-encoding" not in r2.headers
        assert r2.headers["content-type"] == "text/css"
        assert r2.body == style_css.encode()

        assert r3.headers["content-encoding"] == "gzip"
        assert r3.body == record.compressed

        assert "content-encoding" not in r4.headers
        assert r4.body == style_css.encode()

        # Small files and precompressed types are always plain
        for path in ("/index.html", "/logo.png"):
            r = server.get(path, headers={"accept-encoding": "gzip"})
            assert r.status == 200
            assert "content-encoding" not in r.headers
            assert r.body == handler.cache[path].plain


def test_spa_internal_fault(tmp_path, monkeypatch):
    handler = make_spa_handler(make_app_dir(tmp_path))

    def fake_resolve(cache, path, accept_encoding=""):
        raise FallbackMissingError("Fallback /index.html missing")

    monkeypatch.setattr(asgispa._spa, "resolve", fake_resolve)

    with make_server(handler) as server:
        with LogCapturer() as cap:
            r = server.get("/foo")

    assert r.status == 500
    assert r.body == b"Internal Server Error"
    assert "index.html" not in r.body.decode()
    assert [rec.levelname for rec in cap.records] == ["CRITICAL"]
    assert "Internal fault" in cap.messages[0]


def test_spa_debug_logging(tmp_path):
    app = make_spa_app(make_app_dir(tmp_path))

    asgispa.set_log_level("debug")
    try:
        with make_server(app) as server:
            with LogCapturer() as cap:
                server.get("/some/route")
    finally:
        asgispa.set_log_level("info")

    assert any(
        "/index.html" in m and "/some/route" in m for m in cap.messages
    ), cap.messages


def test_spa_non_utf8_header(tmp_path):
    handler = make_spa_handler(make_app_dir(tmp_path))

    # Header values may hold latin-1 bytes that are not valid utf-8
    headers = {"user-agent": "Mozilla \xe9", "accept-encoding": "gzip"}

    with make_server(handler) as server:
        with LogCapturer() as cap:
            r = server.get("/style.css", headers=headers)

    assert r.status == 200
    assert r.headers["content-encoding"] == "gzip"
    assert gzip.decompress(r.body) == style_css.encode()
    assert not [rec for rec in cap.records if rec.levelname == "ERROR"]


def get_mounted(app, path, root_path):
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "root_path": root_path,
        "query_string": b"",
        "headers": [],
    }
    sent = []

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(m):
        sent.append(m)

    asyncio.run(app(scope, receive, send))
    return sent[0]["status"], sent[1]["body"]


def test_spa_mounted_under_root_path(tmp_path):
    app = make_spa_app(make_app_dir(tmp_path))

    # Servers may or may not include the root_path in the path
    assert get_mounted(app, "/style.css", "/app") == (200, style_css.encode())
    assert get_mounted(app, "/app/style.css", "/app") == (200, style_css.encode())
    assert get_mounted(app, "/app/js/app.js", "/app/") == (
        200,
        b"console.log('hi');",
    )
    assert get_mounted(app, "/app", "/app") == (200, index_html.encode())

    # Only whole segments are stripped
    assert get_mounted(app, "/application/x", "/app") == (200, index_html.encode())
