"""
This module implements the HttpRequest class that is passed as an argument
into the handler function.
"""


CONNECTING = 0
CONNECTED = 1
DONE = 2


class HttpRequest:
    """ Represents an HTTP request, giving access to the request metadata,
    and providing the means to send the response.
    """

    __slots__ = ("_scope", "_receive", "_send", "_headers", "_app_state")

    def __init__(self, scope, receive, send):
        self._scope = scope
        self._receive = receive
        self._send = send
        self._headers = None
        self._app_state = CONNECTING  # CONNECTING -> CONNECTED -> DONE

    @property
    def scope(self):
        """ A dict representing the raw ASGI scope. See the
        `ASGI reference <https://asgi.readthedocs.io/en/latest/specs/www.html#connection-scope>`_
        for details.
        """
        return self._scope

    @property
    def method(self):
        """ The HTTP method (string). E.g. 'HEAD', 'GET', 'PUT', 'POST', 'DELETE'.
        """
        return self._scope.get("method", "GET")

    @property
    def headers(self):
        """ A dictionary representing the headers. Keys are lowercase strings.
        Header bytes are decoded as latin-1, so any byte value is accepted.
        """
        if self._headers is None:
            self._headers = dict(
                (key.decode("latin-1").lower(), val.decode("latin-1"))
                for key, val in self._scope.get("headers", [])
            )
        return self._headers

    @property
    def path(self):
        """ The path part of the URL relative to where the app is mounted
        (a string, with percent escapes decoded). A ``root_path`` that the
        server included in the path is stripped.
        """
        path = self._scope["path"]
        root_path = self._scope.get("root_path", "").rstrip("/")
        if root_path and (path == root_path or path.startswith(root_path + "/")):
            path = path[len(root_path) :]
        return path

    @property
    def committed(self):
        """ Whether the response status and headers have been sent.
        """
        return self._app_state != CONNECTING

    async def accept(self, status=200, headers={}):
        """ Send the status code and headers. Must be called exactly once,
        before ``send()``.
        """
        if self._app_state != CONNECTING:
            raise IOError("Cannot accept an already accepted connection.")
        status = int(status)
        try:
            rawheaders = [(k.encode(), v.encode()) for k, v in headers.items()]
        except Exception:
            raise TypeError("Header keys and values must all be strings.")
        self._app_state = CONNECTED
        msg = {"type": "http.response.start", "status": status, "headers": rawheaders}
        await self._send(msg)

    async def send(self, data, more=True):
        """ Send (a chunk of) data, representing the response body.
        """
        more = bool(more)
        if isinstance(data, str):
            data = data.encode()
        elif not isinstance(data, bytes):
            raise TypeError(f"Can only send bytes/str over http, not {type(data)}.")
        message = {"type": "http.response.body", "body": data, "more_body": more}
        if self._app_state == CONNECTED:
            if not more:
                self._app_state = DONE
            await self._send(message)
        elif self._app_state == CONNECTING:
            raise IOError("Cannot send before calling accept.")
        else:
            raise IOError("Cannot send to a closed connection.")
