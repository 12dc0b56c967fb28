"""
Combine a single-page app with a small API. The SPA handler is just a
coroutine function, so it can be called from another handler. Here we
serve a JSON API under /api/, and add a cache-control header to
everything else.

Usage: python example_api.py path/to/dist
"""

import os
import sys
import json

import asgispa


spa_handler = asgispa.make_spa_handler(sys.argv[1] if len(sys.argv) > 1 else ".")


@asgispa.to_asgi
async def main(request):
    if request.path.startswith("/api/"):
        return await api_handler(request)

    status, headers, body = await spa_handler(request)
    if headers.get("content-type") == "text/html":
        headers["cache-control"] = "no-cache"
    else:
        headers["cache-control"] = "public, max-age=3600"
    return status, headers, body


async def api_handler(request):
    info = {
        "pid": os.getpid(),
        "assets": len(spa_handler.cache),
        "bytes_in_memory": spa_handler.cache.total_size,
    }
    return 200, {"content-type": "application/json"}, json.dumps(info)


if __name__ == "__main__":
    asgispa.run(main, "uvicorn", "localhost:8080")
