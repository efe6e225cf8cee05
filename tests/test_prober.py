"""
Tests for the HTTP prober.
"""
import threading
import time
from dataclasses import replace
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import anyio
import httpx
import pytest

from uptime.services.prober import HttpProber, ProbeOutcome


def transport_returning(status_code, captured=None):
    def handler(request):
        if captured is not None:
            captured.append(request)
        return httpx.Response(status_code, text="ok")

    return httpx.MockTransport(handler)


def transport_raising(exc):
    def handler(request):
        raise exc

    return httpx.MockTransport(handler)


class _TrickleHandler(BaseHTTPRequestHandler):
    """Sends a valid 200 response one byte every 50ms."""

    def log_message(self, format, *args):  # noqa: A002
        return

    def do_GET(self):  # noqa: N802
        payload = b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\nConnection: close\r\n\r\nok"
        try:
            for byte in payload:
                self.wfile.write(bytes([byte]))
                self.wfile.flush()
                time.sleep(0.05)
        except OSError:
            # Client gave up
            return


@pytest.fixture
def trickle_server_url():
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _TrickleHandler)
    httpd.daemon_threads = True
    host, port = httpd.server_address
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()

    try:
        yield f"http://{host}:{port}/healthz"
    finally:
        httpd.shutdown()
        thread.join(timeout=5)
        httpd.server_close()


class TestProbeOutcome:
    def test_status(self):
        assert ProbeOutcome(True, 100, None, 200).status == "up"
        assert ProbeOutcome(False, 100, "boom", None).status == "down"


class TestHttpProber:
    """Tests for HttpProber.check."""

    def test_expected_status_is_up(self, monitor_config):
        outcome = HttpProber(monitor_config, transport_returning(200)).check()

        assert outcome.up is True
        assert outcome.status_code == 200
        assert outcome.error_message is None
        assert outcome.response_time_ms >= 0

    def test_unexpected_status_is_down(self, monitor_config):
        outcome = HttpProber(monitor_config, transport_returning(503)).check()

        assert outcome.up is False
        assert outcome.status_code == 503
        assert outcome.error_message == "Unexpected status code: 503"

    def test_custom_expected_codes(self, monitor_config):
        config = replace(monitor_config, expected_codes=(200, 301, 302))

        assert HttpProber(config, transport_returning(301)).check().up is True

    def test_timeout(self, monitor_config):
        transport = transport_raising(httpx.ReadTimeout("Read timed out"))

        outcome = HttpProber(monitor_config, transport).check()

        assert outcome.up is False
        assert outcome.status_code is None
        assert outcome.error_message == "Timeout after 5000ms"
        assert outcome.response_time_ms == 5000

    def test_slow_handler_hits_total_deadline(self, monitor_config):
        async def handler(request):
            await anyio.sleep(5)
            return httpx.Response(200)

        config = replace(monitor_config, ping_timeout_ms=100)

        outcome = HttpProber(config, httpx.MockTransport(handler)).check()

        assert outcome.up is False
        assert outcome.error_message == "Timeout after 100ms"
        assert outcome.response_time_ms == 100

    def test_trickling_server_times_out(self, monitor_config, trickle_server_url):
        """Per-read timeouts never fire here; only the total deadline does."""
        config = replace(monitor_config, target_url=trickle_server_url, ping_timeout_ms=500)

        started = time.monotonic()
        outcome = HttpProber(config).check()
        elapsed_ms = (time.monotonic() - started) * 1000

        assert outcome == ProbeOutcome(
            up=False,
            response_time_ms=500,
            error_message="Timeout after 500ms",
            status_code=None,
        )
        assert elapsed_ms < 1500

    def test_connection_error(self, monitor_config):
        transport = transport_raising(httpx.ConnectError("Connection refused"))

        outcome = HttpProber(monitor_config, transport).check()

        assert outcome.up is False
        assert outcome.status_code is None
        assert outcome.error_message == "Connection refused"

    def test_empty_error_message_falls_back(self, monitor_config):
        outcome = HttpProber(monitor_config, transport_raising(httpx.ConnectError(""))).check()

        assert outcome.error_message == "Fetch failed"

    def test_unexpected_exception_propagates(self, monitor_config):
        with pytest.raises(RuntimeError):
            HttpProber(monitor_config, transport_raising(RuntimeError("bug"))).check()

    def test_get_sends_headers_and_timeout(self, monitor_config):
        captured = []
        config = replace(monitor_config, headers={"X-Probe": "1"}, body="ignored")

        HttpProber(config, transport_returning(200, captured)).check()

        request = captured[0]
        assert request.method == "GET"
        assert str(request.url) == "https://example.com/healthz"
        assert request.headers["X-Probe"] == "1"
        assert request.extensions["timeout"] == httpx.Timeout(5.0).as_dict()
        assert request.content == b""

    def test_post_sends_body(self, monitor_config):
        captured = []
        config = replace(monitor_config, http_method="POST", body='{"ping": true}')

        outcome = HttpProber(config, transport_returning(202, captured)).check()

        assert outcome.up is True
        assert captured[0].method == "POST"
        assert captured[0].content == b'{"ping": true}'
