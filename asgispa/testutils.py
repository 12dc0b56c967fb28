"""
Asgispa test utilities.
"""

import time
import asyncio
from collections import namedtuple
from wsgiref.handlers import format_date_time
from urllib.parse import unquote, urlparse

import requests

from ._app import to_asgi


Response = namedtuple("Response", ["status", "headers", "body"])

URL = "http://127.0.0.1:8080"


class MockTestServer:
    """ An object that mocks an ASGI server and operates in-process.
    This is fast and allows tracking test coverage, so it's suited
    for unit tests.

    The ``app`` object passed to the constructor can be an ASGI application
    or an async handler. The server is started/stopped by using it as a
    context manager; this runs the lifespan startup and shutdown.
    Requests *must* be done via the methods of this object.
    """

    def __init__(self, app):
        self._app = app
        if app.__code__.co_argcount == 3:
            self._asgi_app = app
        else:
            self._asgi_app = to_asgi(app)
        self._loop = None
        self._lifespan_task = None
        self._lifespan_messages = []
        self._lifespan_completes = []

    @property
    def app(self):
        """ The application object that was given at instantiation.
        """
        return self._app

    @property
    def url(self):
        """ The url at which the server pretends to listen.
        """
        return URL

    @property
    def lifespan_completes(self):
        """ The lifespan completion messages that the app has sent.
        """
        return list(self._lifespan_completes)

    def __enter__(self):
        self._loop = asyncio.new_event_loop()
        self._lifespan_messages = []
        self._lifespan_completes = []
        try:
            self._lifespan_task = self._make_lifespan_task()
            self._wait_for_lifespan_complete("startup")
        except Exception:
            self._close_loop()
            raise
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        try:
            self._wait_for_lifespan_complete("shutdown")
            self._loop.run_until_complete(self._lifespan_task)
        finally:
            self._close_loop()

    def _close_loop(self):
        if self._lifespan_task is not None and not self._lifespan_task.done():
            self._lifespan_task.cancel()
            try:
                self._loop.run_until_complete(self._lifespan_task)
            except asyncio.CancelledError:
                pass
        self._loop.close()

    def get(self, path, data=None, headers=None, **kwargs):
        """ Send a GET request to the server. See request() for detais.
        """
        return self.request("GET", path, data=data, headers=headers, **kwargs)

    def put(self, path, data=None, headers=None, **kwargs):
        """ Send a PUT request to the server. See request() for detais.
        """
        return self.request("PUT", path, data=data, headers=headers, **kwargs)

    def post(self, path, data=None, headers=None, **kwargs):
        """ Send a POST request to the server. See request() for detais.
        """
        return self.request("POST", path, data=data, headers=headers, **kwargs)

    def request(self, method, path, data=None, headers=None, **kwargs):
        """ Send a request to the server. Returns a named tuple ``(status, headers, body)``.

        Arguments:
            method (str): the HTTP method (e.g. "GET")
            path (str): path or url (also see the ``url`` property).
            data: the bytes to send (optional).
            headers: headers to send (optional).
            kwargs: additional arguments to pass to ``requests.Request()``.

        """
        assert isinstance(method, str)
        assert isinstance(path, str)
        if self._loop is None or self._loop.is_closed():
            raise RuntimeError("MockTestServer must be used as a context manager.")
        if path.startswith("http"):
            url = path
        else:
            url = self.url + "/" + path.lstrip("/")

        co = self._co_request(method, url, data=data, headers=headers, **kwargs)
        status, headers, body = self._loop.run_until_complete(co)
        return Response(status, headers, body)

    def _make_lifespan_task(self):
        scope = {"type": "lifespan"}

        async def receive():
            while True:
                if self._lifespan_messages:
                    return self._lifespan_messages.pop(0)
                await asyncio.sleep(0.01)

        async def send(m):
            self._lifespan_completes.append(m["type"])

        return self._loop.create_task(self._asgi_app(scope, receive, send))

    def _wait_for_lifespan_complete(self, what, timeout=5):
        what_complete = f"lifespan.{what}.complete"

        async def waiter():
            etime = time.time() + timeout
            while what_complete not in self._lifespan_completes:
                if self._lifespan_task.done():
                    raise RuntimeError(
                        f"Lifespan task finished without producing {what}"
                    )
                if time.time() > etime:
                    raise RuntimeError(
                        f"Timeout for {what}, has {self._lifespan_completes}"
                    )
                await asyncio.sleep(0.01)

        self._lifespan_messages.append({"type": f"lifespan.{what}"})
        self._loop.run_until_complete(waiter())

    def _make_scope(self, request):
        scheme, netloc, path, params, query, fragment = urlparse(request.url)
        if ":" in netloc:
            host, port = netloc.split(":", 1)
            port = int(port)
        else:
            host = netloc
            port = {"http": 80, "https": 443}[scheme]

        # Include the 'host' header.
        if "host" in request.headers:
            headers = []
        elif port == 80:
            headers = [[b"host", host.encode()]]
        else:
            headers = [[b"host", ("%s:%d" % (host, port)).encode()]]

        # Include other request headers, encoded like http.client does.
        headers += [
            [
                key.lower().encode("latin-1"),
                value if isinstance(value, bytes) else value.encode("latin-1"),
            ]
            for key, value in request.headers.items()
        ]

        return {
            "type": "http",
            "http_version": "1.1",
            "method": request.method,
            "scheme": scheme,
            "path": unquote(path),
            "raw_path": path.encode(),
            "root_path": "",
            "query_string": query.encode(),
            "headers": headers,
            "client": ["testclient", 50000],
            "server": [host, port],
        }

    async def _co_request(self, method, url, **kwargs):
        req = requests.Request(method, url, **kwargs)
        p = req.prepare()  # Get the "resolved" request
        p.headers.setdefault("user-agent", "asgi_mock_server")
        scope = self._make_scope(p)

        client_to_server = [p.body or b""]
        server_to_client = []
        response = []

        async def receive():
            if client_to_server:
                chunk = client_to_server.pop(0)
                if isinstance(chunk, str):
                    chunk = chunk.encode()
                return {"type": "http.request", "body": chunk, "more_body": False}
            return {"type": "http.disconnect"}

        async def send(m):
            if m["type"] == "http.response.start":
                headers = dict((h[0].decode(), h[1].decode()) for h in m["headers"])
                headers.setdefault("date", format_date_time(time.time()))
                headers.setdefault("server", "asgispa_mock_server")
                response.extend([m["status"], headers])
            elif m["type"] == "http.response.body":
                server_to_client.append(m["body"])

        await self._asgi_app(scope, receive, send)
        if not response:
            response.extend([9999, {}])
        response.append(b"".join(server_to_client))

        return tuple(response)
