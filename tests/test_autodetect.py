import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from oteloperator.autodetect import AutoDetect, AutoDetectError, Platform


class _Handler(BaseHTTPRequestHandler):
    def do_GET(self):
        status, body = self.server.reply
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, *args):
        pass


@pytest.fixture
def server():
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    httpd.reply = (200, b"{}")
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield httpd
    httpd.shutdown()
    httpd.server_close()


def _url(httpd):
    host, port = httpd.server_address[:2]
    return f"http://{host}:{port}"


@pytest.mark.parametrize(
    "groups, expected",
    [
        ({"groups": None}, Platform.KUBERNETES),
        ({"groups": [{"name": "route.openshift.io"}]}, Platform.OPENSHIFT),
    ],
)
def test_detect_platform_based_on_available_api_groups(server, groups, expected):
    server.reply = (200, json.dumps(groups).encode())
    assert AutoDetect(_url(server)).platform() is expected


def test_unknown_platform_on_error(server):
    server.reply = (500, b"")
    with pytest.raises(AutoDetectError):
        AutoDetect(_url(server)).platform()


def test_invalid_body_is_an_error(server):
    server.reply = (200, b"not json")
    with pytest.raises(AutoDetectError, match="invalid API group list"):
        AutoDetect(_url(server)).platform()


def test_platform_values():
    assert str(Platform.OPENSHIFT) == "OpenShift"
    assert Platform("Kubernetes") is Platform.KUBERNETES