import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from vulnscan_api.api.deps import get_report_acunetix_service
from vulnscan_api.core.config import settings
from vulnscan_api.main import app

from conftest import auth_headers, make_scan

REPORT_BODY = b"%PDF-1.7\n" + b"x" * (2 * 1024 * 1024)


class FakeAcunetixHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        if self.path == "/api/v1/reports/rep-1":
            self._send(200, "application/json", json.dumps({"status": "completed"}).encode())
        elif self.path == "/api/v1/reports/rep-1/download":
            self._send(200, "application/pdf", REPORT_BODY)
        else:
            self._send(404, "application/json", json.dumps({"message": "Not found"}).encode())

    def _send(self, code, content_type, body):
        self.send_response(code)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        # chunked writes so the gateway reads the body over several socket reads
        for start in range(0, len(body), 64 * 1024):
            self.wfile.write(body[start:start + 64 * 1024])

    def log_message(self, format, *args):
        pass


@pytest.fixture
def acunetix_server(monkeypatch):
    monkeypatch.setenv("NO_PROXY", "127.0.0.1")
    monkeypatch.setenv("no_proxy", "127.0.0.1")
    server = ThreadingHTTPServer(("127.0.0.1", 0), FakeAcunetixHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    monkeypatch.setattr(settings, "ACUNETIX_API_URL", f"http://127.0.0.1:{server.server_address[1]}/api/v1")
    yield server
    server.shutdown()
    server.server_close()


def test_download_streams_whole_report_through_real_client(client, db_session, alice, acunetix_server):
    # use the real client factory instead of the mocked engine
    app.dependency_overrides.pop(get_report_acunetix_service)
    make_scan(db_session, alice, status="completed", report_id="rep-1")

    response = client.get("/api/scans/reports/rep-1/download", headers=auth_headers(alice))

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert len(response.content) == len(REPORT_BODY)
    assert response.content == REPORT_BODY


def test_download_of_missing_report_surfaces_engine_message(client, db_session, alice, acunetix_server):
    app.dependency_overrides.pop(get_report_acunetix_service)
    make_scan(db_session, alice, status="completed", report_id="rep-2")

    response = client.get("/api/scans/reports/rep-2/download", headers=auth_headers(alice))

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "Error downloading report",
        "error": "Failed to get report status: Not found",
    }
