import json

import httpx
import pytest

from vulnscan_api.services.acunetix_service import AcunetixError, AcunetixService
from vulnscan_api.services.profile_catalog import (
    DEFAULT_CATALOG,
    load_catalog,
    resolve_profile_id,
    resolve_template_id,
)

BASE_URL = "https://acunetix.test/api/v1"


def make_service(handler, api_key="secret-key"):
    return AcunetixService(base_url=BASE_URL, api_key=api_key, transport=httpx.MockTransport(handler))


def test_create_target_sends_api_key_and_payload():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(201, json={"target_id": "tgt-1"})

    data = make_service(handler).create_target("https://shop.example.com")

    request = seen["request"]
    assert data == {"target_id": "tgt-1"}
    assert request.method == "POST"
    assert str(request.url) == f"{BASE_URL}/targets"
    assert request.headers["X-Auth"] == "secret-key"
    assert json.loads(request.content) == {
        "address": "https://shop.example.com",
        "description": "Target for https://shop.example.com",
        "criticality": 10,
    }


@pytest.mark.parametrize("scan_type, expected", [
    ("full", "11111111-1111-1111-1111-111111111111"),
    ("quick", "11111111-1111-1111-1111-111111111112"),
    ("whatever", "11111111-1111-1111-1111-111111111111"),
])
def test_start_scan_picks_profile(scan_type, expected):
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"scan_id": "acx-1"})

    make_service(handler).start_scan("tgt-1", scan_type)

    assert bodies[0]["profile_id"] == expected
    assert bodies[0]["target_id"] == "tgt-1"
    assert bodies[0]["schedule"] == {"disable": False, "start_date": None, "time_sensitive": False}


def test_engine_error_message_is_surfaced():
    def handler(request):
        return httpx.Response(400, json={"code": 42, "message": "Invalid target address"})

    with pytest.raises(AcunetixError) as exc_info:
        make_service(handler).create_target("https://x.example.com")

    assert str(exc_info.value) == "Failed to create target: Invalid target address"


def test_transport_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AcunetixError) as exc_info:
        make_service(handler).get_scan_status("acx-1")

    assert str(exc_info.value).startswith("Failed to get scan status: ")


def test_get_vulnerabilities_filters_by_severity():
    def handler(request):
        assert request.url.path == "/api/v1/scans/acx-1/results/vulnerabilities"
        return httpx.Response(200, json={"vulnerabilities": [
            {"vuln_id": "a", "severity": 3},
            {"vuln_id": "b", "severity": 0},
            {"vuln_id": "c", "severity": 2},
        ]})

    service = make_service(handler)

    assert len(service.get_vulnerabilities("acx-1")["vulnerabilities"]) == 3
    filtered = service.get_vulnerabilities("acx-1", severities=[3, 2])["vulnerabilities"]
    assert [v["vuln_id"] for v in filtered] == ["a", "c"]


def test_delete_scan():
    calls = []

    def handler(request):
        calls.append((request.method, request.url.path))
        return httpx.Response(204)

    assert make_service(handler).delete_scan("acx-1") is True
    assert calls == [("DELETE", "/api/v1/scans/acx-1")]


def test_generate_report_uses_template_for_type():
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"report_id": "rep-1"})

    service = make_service(handler)
    service.generate_report("acx-1", "pdf")
    service.generate_report("acx-1", "html")

    assert bodies[0]["source"] == {"list_type": "scans", "id_list": ["acx-1"]}
    assert bodies[0]["template_id"] == "11111111-1111-1111-1111-111111111111"
    assert bodies[1]["template_id"] == "11111111-1111-1111-1111-111111111112"


def test_download_report_streams_body():
    def handler(request):
        assert request.url.path == "/api/v1/reports/rep-1/download"
        return httpx.Response(200, content=b"%PDF-1.7 data")

    response = make_service(handler).download_report("rep-1")
    try:
        assert b"".join(response.iter_bytes()) == b"%PDF-1.7 data"
    finally:
        response.close()


def test_download_report_failure_carries_engine_message():
    def handler(request):
        return httpx.Response(404, json={"message": "no such report"})

    with pytest.raises(AcunetixError) as exc_info:
        make_service(handler).download_report("rep-404")

    assert str(exc_info.value) == "Failed to download report: no such report"


def test_catalog_resolution():
    assert resolve_profile_id("custom", "my-profile") == "my-profile"
    assert resolve_profile_id("custom") == "11111111-1111-1111-1111-111111111111"
    assert resolve_profile_id("quick", "ignored") == "11111111-1111-1111-1111-111111111112"
    assert resolve_template_id("executive") == "11111111-1111-1111-1111-111111111112"


def test_missing_catalog_file_falls_back_to_defaults(tmp_path):
    assert load_catalog(str(tmp_path / "missing.yaml")) is DEFAULT_CATALOG
