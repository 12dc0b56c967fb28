"""
Serve a single-page app from memory. All files in the given directory
(e.g. the output of a frontend build) are loaded at startup, and the
ones that benefit from it are gzipped once. Client-side routes that
do not match a file get index.html.

Usage: python example_spa.py path/to/dist
"""

import sys

import asgispa


main = asgispa.make_spa_app(sys.argv[1] if len(sys.argv) > 1 else ".")


if __name__ == "__main__":
    asgispa.run("__main__:main", "uvicorn", "localhost:8080")
