"""HTTP mock of the platform services used during development."""

from __future__ import annotations

import argparse
import base64
import gzip
import hashlib
import json
import logging
import queue
import random
import sys
import threading
from collections.abc import Callable
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import urlsplit

from patchman.platform_data import (
    INVENTORY_TOPIC,
    TEST_SYSTEM_ID,
    delete_event,
    make_system_profile,
    rbac_access,
    upload_event,
    vmaas_errata,
    vmaas_patches,
    vmaas_pkglist,
    vmaas_repos,
    vmaas_updates,
)

DEFAULT_PORT = 9001
REFRESH_MESSAGE = "webapps-refreshed"

_WS_GUID = "258EAFA5-E914-47DA-95CA-C5AB0DC85B11"
_JSON = "application/json"
_JSON_UTF8 = "application/json; charset=utf-8"

_log = logging.getLogger(__name__)

Sender = Callable[[str, str], None]
Reply = tuple[int, str, bytes]


def _data(obj: Any) -> Reply:
    return 200, _JSON, json.dumps(obj, separators=(",", ":")).encode()


def _json(obj: Any) -> Reply:
    return 200, _JSON_UTF8, json.dumps(obj, separators=(",", ":")).encode()


_NOT_FOUND: Reply = (404, "text/plain", b"404 page not found")
_NOT_WEBSOCKET: Reply = (
    400,
    "text/plain; charset=utf-8",
    b"Bad Request\n",
)


class PlatformMock:
    """Mocked inventory, VMaaS and RBAC endpoints with control hooks.

    Inventory events are handed to *send* as ``(topic, message)``.
    """

    def __init__(self, send: Sender, rbac_permission: str | None = None) -> None:
        self.send = send
        self.rbac_permission = rbac_permission
        self.upload_loop_running = False
        self._rng = random.Random()
        self._subscribers: list[queue.Queue[str]] = []
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._routes: dict[tuple[str, str], Callable[[], Reply]] = {
            ("POST", "/control/upload"): self._upload_handler,
            ("POST", "/control/delete"): self._delete_handler,
            ("POST", "/control/sync"): self._sync_handler,
            ("POST", "/control/toggle_upload"): self._toggle_handler,
            ("POST", "/api/v3/updates"): lambda: _data(vmaas_updates()),
            ("POST", "/api/v3/patches"): lambda: _data(vmaas_patches()),
            ("POST", "/api/v3/errata"): lambda: _data(vmaas_errata()),
            ("POST", "/api/v3/repos"): lambda: _data(vmaas_repos()),
            ("POST", "/api/v3/pkglist"): lambda: _data(vmaas_pkglist()),
            ("GET", "/api/rbac/v1/access"): lambda: _json(
                rbac_access(self.rbac_permission)
            ),
            ("GET", "/ws"): lambda: _NOT_WEBSOCKET,
        }

    def handle(self, method: str, path: str) -> Reply:
        """Answer a plain request; return status, content type and body."""
        route = self._routes.get((method.upper(), urlsplit(path).path))
        return _NOT_FOUND if route is None else route()

    def upload(self, random_pkgs: bool = False) -> None:
        """Send an inventory event announcing an upload of the test system."""
        profile = make_system_profile(TEST_SYSTEM_ID, random_pkgs, self._rng)
        self.send(INVENTORY_TOPIC, upload_event(profile))

    def delete(self) -> None:
        """Send an inventory event deleting the test system."""
        self.send(INVENTORY_TOPIC, delete_event())

    def sync(self) -> None:
        """Tell every connected websocket client to refresh."""
        with self._lock:
            subscribers = list(self._subscribers)
        for messages in subscribers:
            messages.put("sync")

    def toggle_upload(self) -> bool:
        """Switch the continuous upload loop on or off; return the new state."""
        self.upload_loop_running = not self.upload_loop_running
        return self.upload_loop_running

    def _upload_handler(self) -> Reply:
        _log.info("Mocking platform upload event")
        self.upload(False)
        return 200, "", b""

    def _delete_handler(self) -> Reply:
        _log.info("Mocking platform delete event")
        self.delete()
        return 200, "", b""

    def _sync_handler(self) -> Reply:
        _log.info("Mocking VMaaS sync event")
        self.sync()
        return 200, "", b""

    def _toggle_handler(self) -> Reply:
        return _json("true" if self.toggle_upload() else "false")

    def _subscribe(self) -> queue.Queue[str]:
        messages: queue.Queue[str] = queue.Queue(maxsize=100)
        with self._lock:
            self._subscribers.append(messages)
        return messages

    def _unsubscribe(self, messages: queue.Queue[str]) -> None:
        with self._lock:
            if messages in self._subscribers:
                self._subscribers.remove(messages)

    def _run_uploader(self) -> None:
        iteration = 0
        while not self._stopped.is_set():
            if self.upload_loop_running:
                self.upload(True)
                iteration += 1
                _log.info("upload loop running, iteration %d", iteration)
                self._stopped.wait(0.01)
            else:
                iteration = 0
                self._stopped.wait(1)


def _websocket_accept(key: str) -> str:
    digest = hashlib.sha1((key + _WS_GUID).encode()).digest()
    return base64.b64encode(digest).decode("ascii")


def _text_frame(text: str) -> bytes:
    payload = text.encode()
    size = len(payload)
    if size < 126:
        header = bytes([0x81, size])
    elif size < 1 << 16:
        header = bytes([0x81, 126]) + size.to_bytes(2, "big")
    else:
        header = bytes([0x81, 127]) + size.to_bytes(8, "big")
    return header + payload


def _handler_class(mock: PlatformMock) -> type[BaseHTTPRequestHandler]:
    class Handler(BaseHTTPRequestHandler):
        protocol_version = "HTTP/1.1"

        def do_GET(self) -> None:
            self._dispatch("GET")

        def do_POST(self) -> None:
            self._dispatch("POST")

        def do_PUT(self) -> None:
            self._dispatch("PUT")

        def do_DELETE(self) -> None:
            self._dispatch("DELETE")

        def log_message(self, format: str, *args: Any) -> None:
            _log.info("%s %s", self.address_string(), format % args)

        def _dispatch(self, method: str) -> None:
            length = int(self.headers.get("Content-Length") or 0)
            if length:
                self.rfile.read(length)
            if (
                method == "GET"
                and urlsplit(self.path).path == "/ws"
                and self._wants_websocket()
            ):
                self._websocket()
                return
            status, content_type, body = mock.handle(method, self.path)
            if "gzip" in self.headers.get("Accept-Encoding", ""):
                body = gzip.compress(body)
                encoded = True
            else:
                encoded = False
            self.send_response(status)
            if content_type:
                self.send_header("Content-Type", content_type)
            if encoded:
                self.send_header("Content-Encoding", "gzip")
                self.send_header("Vary", "Accept-Encoding")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def _wants_websocket(self) -> bool:
            connection = self.headers.get("Connection", "").lower()
            upgrade = self.headers.get("Upgrade", "").lower()
            return "upgrade" in connection and upgrade == "websocket"

        def _websocket(self) -> None:
            key = self.headers.get("Sec-WebSocket-Key")
            if not key or self.headers.get("Sec-WebSocket-Version") != "13":
                _log.error("Failed to set websocket upgrade")
                status, content_type, body = _NOT_WEBSOCKET
                self.send_response(status)
                self.send_header("Content-Type", content_type)
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)
                return
            messages = mock._subscribe()
            self.close_connection = True
            try:
                self.send_response(101, "Switching Protocols")
                self.send_header("Upgrade", "websocket")
                self.send_header("Connection", "Upgrade")
                self.send_header("Sec-WebSocket-Accept", _websocket_accept(key))
                self.end_headers()
                self.wfile.flush()
                while not mock._stopped.is_set():
                    try:
                        messages.get(timeout=0.5)
                    except queue.Empty:
                        continue
                    self.wfile.write(_text_frame(REFRESH_MESSAGE))
                    self.wfile.flush()
            except OSError as err:
                _log.info("websocket client gone: %s", err)
            finally:
                mock._unsubscribe(messages)

    return Handler


def serve(mock: PlatformMock, port: int = DEFAULT_PORT) -> None:
    """Serve *mock* on *port* and run its upload loop until interrupted."""
    server = ThreadingHTTPServer(("", port), _handler_class(mock))
    server.daemon_threads = True
    uploader = threading.Thread(target=mock._run_uploader, daemon=True)
    uploader.start()
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        _log.info("platform mock interrupted")
    finally:
        mock._stopped.set()
        server.server_close()


_stdout_lock = threading.Lock()


def _stdout_sender(topic: str, message: str) -> None:
    line = json.dumps({"topic": topic, "value": message})
    with _stdout_lock:
        sys.stdout.write(line + "\n")
        sys.stdout.flush()


def main(argv: list[str] | None = None) -> int:
    """Run the platform mock; inventory events are written to standard output as JSON lines."""
    parser = argparse.ArgumentParser(
        prog="patchman-platform",
        description="Serve mocked inventory, VMaaS and RBAC endpoints.",
    )
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument(
        "--rbac-permissions",
        default=None,
        help="permission granted by the RBAC mock (default: $RBAC_PERMISSIONS or patch:*:read)",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    _log.info("Platform mock starting")
    serve(PlatformMock(_stdout_sender, args.rbac_permissions), args.port)
    return 0