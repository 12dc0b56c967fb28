"""
This module implements the adapter between a handler function and the
ASGI server, and sets up the logger.
"""

import sys
import logging
import inspect

from ._request import HttpRequest

# Initialize the logger
logger = logging.getLogger("asgispa")
logger.propagate = False
logger.setLevel(logging.INFO)
_handler = logging.StreamHandler(sys.stderr)
_handler.setFormatter(
    logging.Formatter(
        fmt="[%(levelname)s %(asctime)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )
)
logger.addHandler(_handler)

# What the client gets to see when something goes wrong
ERROR_BODY = b"Internal Server Error"


def set_log_level(level):
    """ Set the level of the asgispa logger. Accepts a name like "debug"
    or "warning", or a number.
    """
    if isinstance(level, str):
        name = level.upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"Invalid log level: {name.lower()!r}")
    logger.setLevel(level)


def normalize_response(response):
    """ Normalize the given response, by always returning a 3-element tuple
    (status, headers, body). The body is converted to bytes.
    """
    if isinstance(response, tuple):
        if len(response) == 3:
            status, headers, body = response
        elif len(response) == 2:
            status = 200
            headers, body = response
        elif len(response) == 1:
            status, headers, body = 200, {}, response[0]
        else:
            raise ValueError(f"Handler returned {len(response)}-tuple.")
    else:
        status, headers, body = 200, {}, response

    if not isinstance(status, int):
        raise ValueError(f"Status code must be an int, not {type(status)}")
    if not isinstance(headers, dict):
        raise ValueError(f"Headers must be a dict, not {type(headers)}")

    if isinstance(body, str):
        body = body.encode()
    elif not isinstance(body, bytes):
        raise ValueError(f"Body cannot be {type(body)}.")

    return status, headers, body


def to_asgi(handler):
    """ Convert a request handler (a coroutine function) to an ASGI
    application, which can be served with an ASGI server, such as
    Uvicorn, Hypercorn, Daphne, etc.
    """

    if not inspect.iscoroutinefunction(handler):
        raise TypeError("asgispa.to_asgi() handler function must be a coroutine function.")

    async def application_wrapper(scope, receive, send):
        return await asgispa_application(handler, scope, receive, send)

    application_wrapper.__module__ = handler.__module__
    application_wrapper.__name__ = handler.__name__
    application_wrapper.__doc__ = handler.__doc__
    application_wrapper.asgispa_handler = handler
    return application_wrapper


async def asgispa_application(handler, scope, receive, send):

    if scope["type"] == "http":
        request = HttpRequest(scope, receive, send)
        await _handle_http(handler, request)
    elif scope["type"] == "lifespan":
        await _handle_lifespan(receive, send)
    else:
        logger.warning(f"Unknown ASGI type {scope['type']}")


async def _handle_lifespan(receive, send):
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            logger.info("Server is starting up")
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            logger.info("Server is shutting down")
            await send({"type": "lifespan.shutdown.complete"})
            return
        else:
            logger.warning(f"Unknown lifespan message {message['type']}")


async def _handle_http(handler, request):

    try:

        # Call request handler to get the result
        where = "request handler"
        result = await handler(request)

        # Process the handler output
        where = "processing handler output"
        status, headers, body = normalize_response(result)
        headers.setdefault("content-length", str(len(body)))

        # Send the response in one go
        where = "sending response"
        await request.accept(status, headers)
        await request.send(body, more=False)

    except Exception as err:
        # Log the details, the client only gets a generic 500
        error_text = f"{type(err).__name__} in {where} for {request.path}: {str(err)}"
        logger.error(error_text, exc_info=err)
        if not request.committed:
            try:
                await request.accept(500, {"content-length": str(len(ERROR_BODY))})
                await request.send(ERROR_BODY, more=False)
            except Exception as err2:
                logger.error(f"Could not send error response: {str(err2)}")
