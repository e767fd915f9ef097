"""Serve the built docs like ``python3 -m http.server`` does, under ``/docs``."""

from __future__ import annotations

import threading
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

BASE_PATH = "/docs"


class DocsRequestHandler(SimpleHTTPRequestHandler):
    def translate_path(self, path):
        if path == BASE_PATH or path.startswith(BASE_PATH + "/"):
            path = path[len(BASE_PATH):] or "/"
        return super().translate_path(path)

    def log_message(self, format, *args):
        # Page loads would drown the check results.
        return


def serve_files(port: int, directory: Path, host: str = "localhost") -> ThreadingHTTPServer:
    handler = partial(DocsRequestHandler, directory=str(directory))
    server = ThreadingHTTPServer((host, port), handler)

    thread = threading.Thread(target=server.serve_forever, name="docs-server", daemon=True)
    thread.start()
    return server


def stop_serving(server: ThreadingHTTPServer) -> None:
    server.shutdown()
    server.server_close()
