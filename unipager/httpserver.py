"""HTTP server for the web frontend, telemetry and message injection."""

from __future__ import annotations

import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any

from unipager.events import Event, EventHandler, EventType
from unipager.message import Message
from unipager.telemetry import get_telemetry

log = logging.getLogger(__name__)

HOST = "0.0.0.0"
PORT = 8073
ASSET_DIR = Path(__file__).parent / "assets"

_ASSETS = {
    "/": ("index.html", "text/html"),
    "/index.html": ("index.html", "text/html"),
    "/main.js": ("main.js", "application/javascript"),
    "/vue.js": ("vue.js", "application/javascript"),
    "/style.css": ("style.css", "text/css"),
    "/logo.png": ("logo.png", "image/png"),
    "/pin_numbers.png": ("pin_numbers.png", "image/png"),
}


class _Server(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], event_handler: EventHandler) -> None:
        super().__init__(address, _RequestHandler)
        self.event_handler = event_handler


class _RequestHandler(BaseHTTPRequestHandler):
    server: _Server

    def log_message(self, format: str, *args: Any) -> None:
        log.debug("%s - %s", self.address_string(), format % args)

    def _reply(self, body: bytes, content_type: str | None = None, status: int = 200) -> None:
        self.send_response(status)
        if content_type is not None:
            self.send_header("Content-type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _not_found(self) -> None:
        self._reply(b"Not found", status=404)

    def do_GET(self) -> None:
        path = self.path.split("?", 1)[0]
        if path == "/telemetry":
            body = json.dumps(get_telemetry().to_dict()).encode()
            self._reply(body, "application/json")
            return

        asset = _ASSETS.get(path)
        if asset is None:
            self._not_found()
            return
        name, content_type = asset
        try:
            data = (ASSET_DIR / name).read_bytes()
        except OSError:
            self._not_found()
            return
        self._reply(data, content_type)

    def do_POST(self) -> None:
        if self.path.split("?", 1)[0] != "/message":
            self._not_found()
            return

        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length)
        try:
            message = Message.from_dict(json.loads(body))
        except (ValueError, TypeError, KeyError, AttributeError):
            self._reply(b'{"ok": false}')
            return
        self.server.event_handler.publish(Event(EventType.MESSAGE_RECEIVED, message))
        self._reply(b'{"ok": true}')


def make_server(event_handler: EventHandler, host: str = HOST, port: int = PORT) -> ThreadingHTTPServer:
    """Create, but do not start, the frontend HTTP server."""
    return _Server((host, port), event_handler)


def start(event_handler: EventHandler) -> threading.Thread:
    """Serve the frontend on port 8073 on a background thread."""
    server = make_server(event_handler)
    thread = threading.Thread(target=server.serve_forever, name="http", daemon=True)
    thread.start()
    return thread