"""Local HTTP server serving clipboard images to the test-suite."""

import http.server
import threading

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24


class ImageServer:
    """Tiny HTTP server that records the requests it receives."""

    def __init__(self, status=200, body=PNG_BYTES):
        self.requests = []
        server = self

        class _Handler(http.server.BaseHTTPRequestHandler):
            def log_message(self, format, *args):  # noqa: A003 - match base
                return

            def do_GET(self):  # noqa: N802 - required by BaseHTTPRequestHandler
                server.requests.append((self.path, self.headers.get("User-Agent")))
                if status != 200:
                    self.send_error(status)
                    return
                self.send_response(200)
                self.send_header("Content-Type", "image/png")
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

        self._httpd = http.server.ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
        self._thread = threading.Thread(target=self._httpd.serve_forever, daemon=True)

    @property
    def base_url(self):
        host, port = self._httpd.server_address[:2]
        return f"http://{host}:{port}"

    def __enter__(self):
        self._thread.start()
        return self

    def __exit__(self, *exc):
        self._httpd.shutdown()
        self._httpd.server_close()
        self._thread.join(timeout=1)
